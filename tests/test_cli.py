import io
import json

import pytest

import archgraph.__main__ as cli
from archgraph.shared.config.settings import Settings


@pytest.fixture(autouse=True)
def file_settings(tmp_path, monkeypatch):
    settings = Settings(
        _env_file=None,
        storage_backend="file",
        data_dir=tmp_path / "graphs",
        default_project_id="proj",
    )
    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    return settings


def test_show_prints_empty_graph(capsys):
    assert cli.main(["show", "--project", "demo"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["nodes"] == []
    assert data["meta"]["projectId"] == "demo"


def test_apply_file_then_show(tmp_path, capsys):
    delta_file = tmp_path / "delta.json"
    delta_file.write_text(json.dumps({
        "addNodes": [{"id": "api", "kind": "api", "label": "API", "position": {"x": 0, "y": 0}}],
    }), encoding="utf-8")

    assert cli.main(["apply", str(delta_file), "--project", "demo"]) == 0
    assert capsys.readouterr().out.strip() == 'Added 1 node(s): "API" (api).'

    cli.main(["show", "--project", "demo"])
    data = json.loads(capsys.readouterr().out)
    assert data["nodes"][0]["position"] == {"x": 100.0, "y": 100.0}


def test_apply_from_stdin_accepts_model_output(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO('Here it is:\n```json\n{"removeNodeIds": ["x"]}\n```'))

    assert cli.main(["apply", "-"]) == 0
    assert "Removed 1 node(s): x." in capsys.readouterr().out


def test_apply_unparseable_input_fails(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("no json here"))

    assert cli.main(["apply", "-"]) == 1
    assert "no valid structured content found" in capsys.readouterr().err


def test_apply_missing_file_fails(tmp_path, capsys):
    assert cli.main(["apply", str(tmp_path / "nope.json")]) == 1
    assert capsys.readouterr().err.startswith("Error:")


def test_reset(tmp_path, capsys):
    delta_file = tmp_path / "delta.json"
    delta_file.write_text('{"addNodes": [{"id": "a", "kind": "db", "label": "A", "position": {"x": 1, "y": 1}}]}', encoding="utf-8")
    cli.main(["apply", str(delta_file)])

    assert cli.main(["reset"]) == 0
    assert "Reset graph for proj" in capsys.readouterr().out

    cli.main(["show"])
    assert json.loads(capsys.readouterr().out)["nodes"] == []


def test_subcommand_is_required():
    with pytest.raises(SystemExit):
        cli.main([])
