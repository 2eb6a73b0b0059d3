from archgraph.services.graph_editor.integrity import validate_integrity

from conftest import make_edge, make_node, make_state


def test_consistent_state_is_valid(two_node_state):
    state = two_node_state.model_copy(update={"edges": [make_edge("e1", "a", "b")]})

    report = validate_integrity(state)

    assert report.valid
    assert report.errors == []


def test_empty_state_is_valid():
    assert validate_integrity(make_state()).valid


def test_duplicate_node_id():
    state = make_state(nodes=[make_node("a"), make_node("a", label="Again")])

    report = validate_integrity(state)

    assert not report.valid
    assert report.errors == ["Duplicate node ID: a"]


def test_duplicate_edge_id(two_node_state):
    state = two_node_state.model_copy(update={"edges": [make_edge("e1", "a", "b"), make_edge("e1", "b", "a")]})

    report = validate_integrity(state)

    assert report.errors == ["Duplicate edge ID: e1"]


def test_dangling_edge_reports_both_ends():
    state = make_state(nodes=[make_node("a")], edges=[make_edge("e9", "ghost", "phantom")])

    report = validate_integrity(state)

    assert not report.valid
    assert report.errors == [
        "Edge e9 references non-existent source node: ghost",
        "Edge e9 references non-existent target node: phantom",
    ]


def test_all_violations_are_collected():
    state = make_state(
        nodes=[make_node("a"), make_node("a")],
        edges=[make_edge("e1", "a", "x"), make_edge("e1", "a", "a")],
    )

    report = validate_integrity(state)

    assert len(report.errors) == 3
