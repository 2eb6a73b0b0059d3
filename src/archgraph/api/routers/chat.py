"""
Chat endpoints: natural-language graph edits answered by a language model.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from ...services.graph_editor import ChatErrorType, ChatRequest, GraphEditorService
from ...services.graph_editor.schema import validate_model
from ..dependencies import get_graph_editor

router = APIRouter()

_ERROR_STATUS = {
    ChatErrorType.UPSTREAM_FAILURE.value: 502,
    ChatErrorType.PARSE_ERROR.value: 200,
    ChatErrorType.STORAGE_ERROR.value: 500,
}


def _chat(service: GraphEditorService, payload: Any, project_id: Optional[str]) -> JSONResponse:
    if service.model_client is None:
        raise HTTPException(status_code=503, detail="No language model is configured")

    request = validate_model(payload, ChatRequest, "chat request")
    response = service.chat(request, project_id)

    status_code = 200 if response.success else _ERROR_STATUS.get(response.error_type, 500)
    return JSONResponse(status_code=status_code, content=response.to_json_dict())


@router.post("/chat")
def chat(payload: Any = Body(...), service: GraphEditorService = Depends(get_graph_editor)):
    """
    Process a chat message against the default project.

    Returns the assistant message and the updated graph, or an error
    envelope carrying the unchanged graph.
    """
    return _chat(service, payload, None)


@router.post("/chat/{project_id}")
def chat_project(project_id: str, payload: Any = Body(...), service: GraphEditorService = Depends(get_graph_editor)):
    """Process a chat message against a specific project."""
    return _chat(service, payload, project_id)
