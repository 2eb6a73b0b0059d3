"""
Common exceptions for ArchGraph.

Only structural validation, parsing, upstream calls and storage are hard-fail
boundaries. Merging and layout degrade gracefully and never raise for missing
references or duplicate ids.
"""

from typing import List, Optional


class ArchGraphError(Exception):
    """Base exception for all ArchGraph errors."""
    pass


class ConfigurationError(ArchGraphError):
    """Raised when there are configuration issues."""
    pass


class SchemaError(ArchGraphError):
    """
    Raised when a value does not have the shape of a graph entity or delta.

    Carries every structural violation found, one ``"<path>: <message>"``
    entry per problem.
    """

    def __init__(self, errors: List[str], message: str = "Schema validation failed"):
        self.errors = list(errors)
        self.message = message
        super().__init__(self._format())

    def _format(self) -> str:
        if not self.errors:
            return self.message
        return f"{self.message}: " + "; ".join(self.errors)


class ParseError(ArchGraphError):
    """Raised when a delta cannot be extracted from model output."""

    NO_CONTENT = "no valid structured content found"
    INVALID_STRUCTURE = "invalid delta structure"

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.message = message
        self.errors = list(errors or [])
        detail = f"{message}: " + "; ".join(self.errors) if self.errors else message
        super().__init__(detail)


class GraphIntegrityError(ArchGraphError):
    """Raised when a whole-state replacement fails referential integrity checks."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Invalid graph structure: " + "; ".join(self.errors))


class UpstreamCallFailure(ArchGraphError):
    """Raised when the text-generation call fails (network, auth, rate limit...)."""

    def __init__(self, message: str, provider: Optional[str] = None, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)


class StorageError(ArchGraphError):
    """Raised when storage operations fail."""
    pass
