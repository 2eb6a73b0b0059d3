import json

import pytest

from archgraph.services.graph_editor import ChatRequest, FileStorage, GraphEditorService
from archgraph.shared import get_metrics
from archgraph.shared.exceptions import (
    ConfigurationError, GraphIntegrityError, ParseError, SchemaError, StorageError,
)

from conftest import T0, make_edge, make_node, make_state


def _delta_reply(**delta):
    return json.dumps(delta)


def test_get_graph_creates_empty_project(service, storage):
    state = service.get_graph("fresh")

    assert state.nodes == [] and state.edges == []
    assert state.meta.project_id == "fresh"
    assert storage.load("fresh") == state


def test_get_graph_defaults_project(service):
    assert service.get_graph().meta.project_id == "proj"


def test_replace_graph_stamps_and_stores(service, storage, two_node_state):
    payload = two_node_state.to_json_dict()

    state = service.replace_graph(payload, "other")

    assert state.meta.project_id == "other"
    assert state.meta.updated_at > T0
    assert storage.load("other") == state


def test_replace_graph_rejects_schema_errors(service):
    with pytest.raises(SchemaError) as exc_info:
        service.replace_graph({"nodes": "nope", "edges": [], "meta": {}})

    assert exc_info.value.errors


def test_replace_graph_rejects_dangling_edges(service, storage):
    bad = make_state(nodes=[make_node("a")], edges=[make_edge("e1", "a", "ghost")])

    with pytest.raises(GraphIntegrityError) as exc_info:
        service.replace_graph(bad.to_json_dict())

    assert "Edge e1 references non-existent target node: ghost" in exc_info.value.errors
    assert storage.load("proj") is None


def test_reset_graph(service, storage, two_node_state):
    storage.save("proj", two_node_state)

    state = service.reset_graph()

    assert state.nodes == []
    assert storage.load("proj").nodes == []


def test_apply_delta_lays_out_new_nodes(service, storage, two_node_state):
    storage.save("proj", two_node_state)
    delta = {
        "addNodes": [
            {"id": "cache", "kind": "db", "label": "Cache", "position": {"x": 0, "y": 0}},
            {"id": "queue", "kind": "queue", "label": "Queue", "position": {"x": 5, "y": 5}},
        ],
        "addEdges": [{"id": "e1", "source": "a", "target": "cache", "kind": "queries"}],
    }

    result = service.apply_delta(delta)

    cache = result.graph_state.get_node("cache")
    queue = result.graph_state.get_node("queue")
    assert (cache.position.x, cache.position.y) == (100.0, 250.0)
    assert (queue.position.x, queue.position.y) == (5.0, 5.0)
    assert result.integrity.valid
    assert result.summary.startswith('Added 2 node(s): "Cache" (db), "Queue" (queue)')
    assert storage.load("proj") == result.graph_state


def test_apply_delta_on_empty_graph_starts_at_top(service):
    delta = {"addNodes": [{"id": "x", "kind": "service", "label": "X", "position": {"x": 0, "y": 0}}]}

    node = service.apply_delta(delta, "new").graph_state.get_node("x")

    assert (node.position.x, node.position.y) == (100.0, 100.0)


def test_apply_delta_rejects_malformed_delta(service, storage):
    with pytest.raises(SchemaError):
        service.apply_delta({"removeNodeIds": "a"})

    assert storage.load("proj") is None


def test_apply_text_parses_model_output(service, storage, two_node_state):
    storage.save("proj", two_node_state)

    result = service.apply_text('```json\n{"removeNodeIds": ["b"]}\n```')

    assert [n.id for n in result.graph_state.nodes] == ["a"]
    assert result.summary == "Removed 1 node(s): b."


def test_apply_text_rejects_prose(service):
    with pytest.raises(ParseError):
        service.apply_text("nothing to see here")


def test_chat_success(service, storage, fake_client, two_node_state):
    storage.save("proj", two_node_state)
    fake_client.replies.append(_delta_reply(
        addNodes=[{"id": "x", "kind": "service", "label": "X", "position": {"x": 0, "y": 0}}],
        addEdges=[{"id": "e1", "source": "a", "target": "x", "kind": "calls"}],
    ))

    response = service.chat(ChatRequest(message="Add service X called by A"))

    assert response.success
    assert 'Added 1 node(s): "X" (service)' in response.assistant_message
    assert response.graph_state.get_node("x") is not None
    assert response.integrity.valid
    assert storage.load("proj") == response.graph_state
    assert "Add service X called by A" in fake_client.calls[0][1].content


def test_chat_prefers_stored_graph(service, storage, fake_client, two_node_state):
    storage.save("proj", two_node_state)
    fake_client.replies.append("{}")
    client_copy = make_state(nodes=[make_node("stale")])

    response = service.chat(ChatRequest(message="noop", graph_state=client_copy))

    assert [n.id for n in response.graph_state.nodes] == ["a", "b"]


def test_chat_falls_back_to_client_graph(service, fake_client):
    fake_client.replies.append('{"removeNodeIds": ["b"]}')
    client_copy = make_state(nodes=[make_node("a"), make_node("b")])

    response = service.chat(ChatRequest(message="drop b", graph_state=client_copy))

    assert [n.id for n in response.graph_state.nodes] == ["a"]
    assert response.assistant_message == "Removed 1 node(s): b."


def test_chat_parse_failure_keeps_prior_state(service, storage, fake_client, two_node_state):
    storage.save("proj", two_node_state)
    fake_client.replies.append("I'm not sure what you mean.")

    response = service.chat(ChatRequest(message="do something"))

    assert not response.success
    assert response.error_type == "parse_error"
    assert "couldn't parse" in response.assistant_message
    assert response.graph_state == two_node_state
    assert storage.load("proj") == two_node_state


def test_chat_upstream_failure_keeps_prior_state(service, storage, fake_client, two_node_state, upstream_failure):
    storage.save("proj", two_node_state)
    fake_client.error = upstream_failure

    response = service.chat(ChatRequest(message="add a cache"))

    assert not response.success
    assert response.error_type == "upstream_failure"
    assert "429" in response.error
    assert response.graph_state == two_node_state


def test_chat_storage_failure_returns_prior_state(service, storage, fake_client, two_node_state, mocker):
    storage.save("proj", two_node_state)
    fake_client.replies.append('{"removeNodeIds": ["a"]}')
    mocker.patch.object(storage, "save", side_effect=StorageError("disk full"))

    response = service.chat(ChatRequest(message="remove a"))

    assert not response.success
    assert response.error_type == "storage_error"
    assert response.graph_state == two_node_state


def test_chat_reports_integrity_warnings_without_failing(service, fake_client):
    dirty = make_state(nodes=[make_node("a")], edges=[make_edge("e0", "a", "gone")])
    fake_client.replies.append("{}")

    response = service.chat(ChatRequest(message="noop", graph_state=dirty))

    assert response.success
    assert not response.integrity.valid
    assert response.assistant_message == "No changes were made to the graph."


@pytest.mark.parametrize("message", ["", "   "])
def test_chat_requires_message(service, message):
    with pytest.raises(SchemaError):
        service.chat(ChatRequest(message=message))


def test_chat_without_model_client(storage, settings):
    service = GraphEditorService(storage=storage, settings=settings)

    with pytest.raises(ConfigurationError):
        service.chat(ChatRequest(message="hello"))


def test_stats(service):
    stats = service.get_stats()

    assert stats["storage"]["backend"] == "memory"
    assert stats["model_client"] == "fake"


def test_chat_client_graph_is_stored_under_requested_project(service, storage, fake_client):
    fake_client.replies.append("{}")
    client_copy = make_state(nodes=[make_node("a")], project_id="other")

    response = service.chat(ChatRequest(message="hi", graph_state=client_copy), "foo")

    assert response.graph_state.meta.project_id == "foo"
    assert storage.load("foo").meta.project_id == "foo"
    assert storage.load("other") is None
    assert client_copy.meta.project_id == "other"


def test_chat_prompt_sees_requested_project(service, fake_client):
    fake_client.replies.append("{}")
    client_copy = make_state(project_id="other")

    service.chat(ChatRequest(message="hi", graph_state=client_copy), "foo")

    assert '"projectId": "foo"' in fake_client.calls[0][1].content


CORRUPT_GRAPH = json.dumps({
    "nodes": [{"id": "a", "kind": "service", "label": "A", "position": {"x": 1, "y": 1}}],
    "edges": [],
    "meta": {"projectId": "demo", "updatedAt": "not-a-date"},
})


@pytest.fixture
def file_service(tmp_path, fake_client, settings):
    (tmp_path / "demo.json").write_text(CORRUPT_GRAPH, encoding="utf-8")
    return GraphEditorService(storage=FileStorage(tmp_path), model_client=fake_client, settings=settings)


def test_get_graph_keeps_unreadable_file(file_service, tmp_path):
    with pytest.raises(StorageError):
        file_service.get_graph("demo")

    assert (tmp_path / "demo.json").read_text(encoding="utf-8") == CORRUPT_GRAPH


def test_apply_delta_keeps_unreadable_file(file_service, tmp_path):
    with pytest.raises(StorageError):
        file_service.apply_delta({"removeNodeIds": ["a"]}, "demo")

    assert (tmp_path / "demo.json").read_text(encoding="utf-8") == CORRUPT_GRAPH


def test_chat_keeps_unreadable_file(file_service, fake_client, tmp_path):
    fake_client.replies.append("{}")

    with pytest.raises(StorageError):
        file_service.chat(ChatRequest(message="hi", graph_state=make_state(project_id="demo")), "demo")

    assert (tmp_path / "demo.json").read_text(encoding="utf-8") == CORRUPT_GRAPH
    assert fake_client.calls == []


def test_prompt_caps_come_from_settings(storage, settings):
    capped = settings.model_copy(update={"prompt_max_nodes": 3, "prompt_max_edges": 7})

    service = GraphEditorService(storage=storage, settings=capped)

    assert service.prompt_builder.max_nodes == 3
    assert service.prompt_builder.max_edges == 7


def test_entry_points_are_timed(service, fake_client):
    metrics = get_metrics()
    applied = metrics.get_timer_stats("apply_delta_duration")["count"]
    chats = metrics.get_timer_stats("chat_duration")["count"]
    failures = metrics.get_counter("apply_delta_duration_errors_total", tags={"error": "SchemaError"})
    fake_client.replies.append("{}")

    service.apply_delta({})
    service.chat(ChatRequest(message="hi"))
    with pytest.raises(SchemaError):
        service.apply_delta({"addNodes": "all"})

    assert metrics.get_timer_stats("apply_delta_duration")["count"] == applied + 1
    assert metrics.get_timer_stats("chat_duration")["count"] == chats + 1
    assert metrics.get_counter("apply_delta_duration_errors_total", tags={"error": "SchemaError"}) == failures + 1
