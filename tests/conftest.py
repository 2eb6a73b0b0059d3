from datetime import datetime, timezone
from typing import List

import pytest

from archgraph.services.graph_editor import GraphEditorService, InMemoryStorage
from archgraph.shared.config.settings import Settings
from archgraph.shared.exceptions import UpstreamCallFailure
from archgraph.shared.infrastructure.ai import ChatMessage, LLMProviderConfig, ModelClient
from archgraph.shared.models import GraphEdge, GraphMeta, GraphNode, GraphState, Position

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_node(node_id, kind="service", label=None, x=0.0, y=0.0, **data):
    return GraphNode(
        id=node_id,
        kind=kind,
        label=label or node_id.upper(),
        position=Position(x=x, y=y),
        data=data,
    )


def make_edge(edge_id, source, target, kind="calls", description=None):
    data = {"description": description} if description else None
    return GraphEdge(id=edge_id, source=source, target=target, kind=kind, data=data)


def make_state(nodes=(), edges=(), project_id="proj"):
    return GraphState(
        nodes=list(nodes),
        edges=list(edges),
        meta=GraphMeta(project_id=project_id, updated_at=T0),
    )


class FakeModelClient(ModelClient):
    """Returns scripted replies and records the messages it was sent."""

    provider = "fake"

    def __init__(self, replies=None, error=None):
        super().__init__(LLMProviderConfig(api_key="test-key", model="fake-model"))
        self.replies = list(replies or [])
        self.error = error
        self.calls: List[List[ChatMessage]] = []

    def _complete(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.replies.pop(0)


@pytest.fixture
def settings():
    return Settings(_env_file=None, default_project_id="proj")


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def fake_client():
    return FakeModelClient()


@pytest.fixture
def service(storage, fake_client, settings):
    return GraphEditorService(storage=storage, model_client=fake_client, settings=settings)


@pytest.fixture
def two_node_state():
    return make_state(nodes=[make_node("a", x=100.0, y=100.0), make_node("b", x=350.0, y=100.0)])


@pytest.fixture
def upstream_failure():
    return UpstreamCallFailure("LLM API error (429): rate limited", provider="fake", status_code=429)
