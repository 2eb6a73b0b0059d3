"""
Structural validation of graph states and deltas.

Turns arbitrary decoded values into typed models, or raises ``SchemaError``
listing every violation (missing field, wrong primitive type, value outside
an enum). Cross-entity checks are left to the integrity validator.
"""

from typing import Any, List, Type, TypeVar

from pydantic import ValidationError

from ...shared.exceptions import SchemaError
from ...shared.models import BaseModel, GraphDelta, GraphState

ModelT = TypeVar("ModelT", bound=BaseModel)


def format_validation_errors(error: ValidationError) -> List[str]:
    """Render pydantic errors as ``"<dotted.path>: <message>"`` strings."""
    messages = []
    for item in error.errors():
        path = ".".join(str(part) for part in item.get("loc", ())) or "(root)"
        messages.append(f"{path}: {item.get('msg', 'invalid value')}")
    return messages


def validate_model(value: Any, model: Type[ModelT], label: str) -> ModelT:
    """
    Validate ``value`` against ``model``.

    Instances of the model pass through unchanged.

    Raises:
        SchemaError: with one entry per structural violation
    """
    if isinstance(value, model):
        return value

    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise SchemaError(format_validation_errors(e), message=f"Invalid {label}") from e


def validate_state(value: Any) -> GraphState:
    """Validate a value claimed to be a GraphState."""
    return validate_model(value, GraphState, "graph state")


def validate_delta(value: Any) -> GraphDelta:
    """Validate a value claimed to be a GraphDelta."""
    return validate_model(value, GraphDelta, "graph delta")
