"""
Graph Editor Service implementation.

Coordinates the delta pipeline for one project at a time:
load state -> build prompt -> call model -> parse delta -> lay out new
nodes -> merge -> integrity check -> save -> summarize.

Hard failures (schema, parse, upstream, storage) never touch the stored
graph; the caller always gets back either the new state or the prior one.
"""

from typing import Any, Optional, Union

from ...shared import get_logger, get_metrics
from ...shared.infrastructure.monitoring import timed_operation
from ...shared.config.settings import Settings, get_settings
from ...shared.exceptions import (
    ConfigurationError, GraphIntegrityError, ParseError, SchemaError,
    StorageError, UpstreamCallFailure,
)
from ...shared.infrastructure.ai import ModelClient
from ...shared.models import GraphDelta, GraphState, IntegrityReport, utc_now
from .delta_parser import DeltaParser
from .integrity import validate_integrity
from .layout import assign_positions, next_start_y
from .merge import merge_with_report
from .models import ChatErrorType, ChatRequest, ChatResponse, EditResult
from .prompt_builder import PromptBuilder
from .schema import validate_delta, validate_state
from .storage import StorageBackend
from .summarizer import summarize_delta


class GraphEditorService:
    """
    Service for editing architecture graphs directly or through a model.

    The storage backend and model client are supplied by the caller, who
    owns their lifecycle.
    """

    def __init__(self,
                 storage: StorageBackend,
                 model_client: Optional[ModelClient] = None,
                 settings: Optional[Settings] = None):
        """
        Initialize the graph editor service.

        Args:
            storage: Where graph states are loaded from and saved to
            model_client: Text-generation client; chat is unavailable without one
            settings: Configuration, defaults to the environment settings
        """
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()
        self.settings = settings or get_settings()

        self.storage = storage
        self.model_client = model_client
        self.prompt_builder = PromptBuilder(**self.settings.prompt_config)
        self.layout_config = self.settings.layout_config

        self.logger.info(f"Graph Editor Service initialized with {storage.name} storage")

    def _project(self, project_id: Optional[str]) -> str:
        return project_id or self.settings.default_project_id

    @staticmethod
    def _claim(state: GraphState, project_id: str) -> GraphState:
        """Return ``state`` with its meta pointing at the project it will be stored under."""
        if state.meta.project_id == project_id:
            return state
        return state.model_copy(update={'meta': state.meta.model_copy(update={'project_id': project_id})})

    # Whole-state operations
    def get_graph(self, project_id: Optional[str] = None) -> GraphState:
        """
        Get a project's graph, creating and saving an empty one if needed.

        Raises:
            StorageError: the stored graph exists but cannot be read
        """
        project_id = self._project(project_id)
        state = self.storage.load(project_id)
        if state is None:
            self.logger.info(f"No graph stored for {project_id}, creating an empty one")
            state = GraphState.empty(project_id)
            self.storage.save(project_id, state)
        return state

    def replace_graph(self, payload: Any, project_id: Optional[str] = None) -> GraphState:
        """
        Replace a project's graph wholesale.

        Raises:
            SchemaError: payload is not a GraphState
            GraphIntegrityError: payload has duplicate ids or dangling edges
        """
        project_id = self._project(project_id)
        state = validate_state(payload)

        report = validate_integrity(state)
        if not report.valid:
            self.metrics.counter('integrity_violations_total', len(report.errors))
            self.logger.warning(f"Rejected graph replacement for {project_id}: {report.errors}")
            raise GraphIntegrityError(report.errors)

        state = state.model_copy(update={
            'meta': state.meta.model_copy(update={'project_id': project_id, 'updated_at': utc_now()})
        })
        self.storage.save(project_id, state)
        self.logger.info(f"Replaced graph for {project_id}: {len(state.nodes)} nodes, {len(state.edges)} edges")
        return state

    def reset_graph(self, project_id: Optional[str] = None) -> GraphState:
        """Replace a project's graph with an empty one."""
        project_id = self._project(project_id)
        state = GraphState.empty(project_id)
        self.storage.save(project_id, state)
        self.logger.info(f"Reset graph for {project_id}")
        return state

    # Delta operations
    def layout_delta(self, state: GraphState, delta: GraphDelta) -> GraphDelta:
        """Place the delta's unpositioned new nodes below the existing content."""
        if not delta.add_nodes:
            return delta

        start_y = next_start_y(
            state,
            spacing_y=self.layout_config['spacing_y'],
            empty_start_y=self.layout_config['start_y'],
        )
        placed = assign_positions(
            delta.add_nodes,
            start_x=self.layout_config['start_x'],
            start_y=start_y,
            columns=self.layout_config['columns'],
            spacing_x=self.layout_config['spacing_x'],
            spacing_y=self.layout_config['spacing_y'],
        )
        return delta.model_copy(update={'add_nodes': placed})

    def check_integrity(self, state: GraphState) -> IntegrityReport:
        """Run the integrity validator and log, but never raise on, violations."""
        report = validate_integrity(state)
        if not report.valid:
            self.metrics.counter('integrity_violations_total', len(report.errors))
            self.logger.warning(f"Graph validation warnings for {state.meta.project_id}: {report.errors}")
        return report

    def _apply(self, state: GraphState, delta: GraphDelta) -> EditResult:
        delta = self.layout_delta(state, delta)
        merged = merge_with_report(state, delta)
        report = self.check_integrity(merged.state)
        return EditResult(graph_state=merged.state, summary=summarize_delta(delta), integrity=report)

    @timed_operation('apply_delta_duration')
    def apply_delta(self,
                    delta: Union[GraphDelta, dict],
                    project_id: Optional[str] = None) -> EditResult:
        """
        Apply a delta supplied directly by a user.

        Raises:
            SchemaError: delta is malformed
            StorageError: the new state could not be saved
        """
        project_id = self._project(project_id)
        delta = validate_delta(delta)
        state = self.get_graph(project_id)

        result = self._apply(state, delta)
        self.storage.save(project_id, result.graph_state)
        return result

    def apply_text(self, response_text: str, project_id: Optional[str] = None) -> EditResult:
        """
        Parse a delta out of raw text and apply it.

        Raises:
            ParseError: no valid delta in the text
        """
        delta = DeltaParser.parse(response_text)
        return self.apply_delta(delta, project_id)

    @timed_operation('chat_duration')
    def chat(self, request: ChatRequest, project_id: Optional[str] = None) -> ChatResponse:
        """
        Turn a natural-language request into a graph change.

        The stored graph is authoritative; the client's copy is used only
        when storage has none. Failures come back as error envelopes that
        carry the unmodified prior state.

        Raises:
            SchemaError: empty message
            ConfigurationError: no model client configured
            StorageError: the stored graph exists but cannot be read
        """
        if not request.message or not request.message.strip():
            raise SchemaError(["message: Message is required"], message="Invalid chat request")
        if self.model_client is None:
            raise ConfigurationError("No language model is configured")

        project_id = self._project(project_id)
        canonical = self.storage.load(project_id)
        if canonical is None and request.graph_state is not None:
            canonical = self._claim(request.graph_state, project_id)
        elif canonical is None:
            canonical = GraphState.empty(project_id)

        messages = self.prompt_builder.build_messages(request.message, canonical)

        try:
            response_text = self.model_client.complete(messages)
        except UpstreamCallFailure as e:
            self.logger.error(f"LLM call failed for {project_id}: {e}")
            return self._error_response(
                canonical,
                ChatErrorType.UPSTREAM_FAILURE,
                "Sorry, I encountered an error while processing your request. "
                "Please check your LLM configuration.",
                str(e),
            )

        try:
            delta = DeltaParser.parse(response_text)
        except ParseError as e:
            return self._error_response(
                canonical,
                ChatErrorType.PARSE_ERROR,
                "I couldn't parse the AI response properly. Please try rephrasing your request. "
                f"(Error: {e})",
                str(e),
            )

        result = self._apply(canonical, delta)

        try:
            self.storage.save(project_id, result.graph_state)
        except StorageError as e:
            self.logger.error(f"Failed to persist graph for {project_id}: {e}")
            return self._error_response(
                canonical,
                ChatErrorType.STORAGE_ERROR,
                "The change could not be saved, so the graph was left as it was.",
                str(e),
            )

        return ChatResponse(
            success=True,
            assistant_message=result.summary,
            graph_state=result.graph_state,
            integrity=result.integrity,
        )

    def _error_response(self,
                        prior_state: GraphState,
                        error_type: ChatErrorType,
                        assistant_message: str,
                        error: str) -> ChatResponse:
        self.metrics.counter('chat_failures_total', tags={'error_type': error_type.value})
        return ChatResponse(
            success=False,
            assistant_message=assistant_message,
            graph_state=prior_state,
            error=error,
            error_type=error_type,
        )

    def get_stats(self):
        """Get service statistics."""
        return {
            'storage': self.storage.get_stats(),
            'model_client': self.model_client.provider if self.model_client else None,
        }
