"""
Base models for ArchGraph.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel as PydanticBaseModel


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class BaseModel(PydanticBaseModel):
    """
    Base model for all ArchGraph data structures.

    Fields use camelCase aliases on the wire and may be populated by alias or
    by name. Unknown keys are ignored: deltas come from a language model and
    frequently carry extras.
    """

    model_config = {
        # Allow field population by name or alias
        "populate_by_name": True,
        # Validate assignments after object creation
        "validate_assignment": True,
        # Use enum values instead of enum names
        "use_enum_values": True,
        "extra": "ignore",
    }

    def to_json_dict(self) -> Dict[str, Any]:
        """Dump with wire aliases, leaving out optionals that were never set."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
