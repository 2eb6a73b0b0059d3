"""
Extraction of graph deltas from raw model output.

Models are told to answer with a bare JSON object but often wrap it in
markdown fences or prose. The parser is tolerant about the wrapping and
strict about the shape: whatever it extracts must validate as a GraphDelta.
"""

import json
import re
from typing import Any, Optional

from ...shared import get_logger, get_metrics
from ...shared.exceptions import ParseError, SchemaError
from ...shared.models import GraphDelta
from .schema import validate_delta

logger = get_logger(__name__)

_NOT_PARSED = object()

_BRACE_RUN = re.compile(r'\{[\s\S]*\}')
_CLOSERS = '}]'


class DeltaParser:
    """Parser for GraphDelta objects embedded in LLM responses."""

    @staticmethod
    def strip_fences(text: str) -> str:
        """
        Trim whitespace and remove one leading and one trailing code fence.

        The leading fence may be bare or annotated as ``json``.
        """
        cleaned = text.strip()

        if cleaned.startswith('```json'):
            cleaned = cleaned[len('```json'):]
        elif cleaned.startswith('```'):
            cleaned = cleaned[len('```'):]

        if cleaned.endswith('```'):
            cleaned = cleaned[:-len('```')]

        return cleaned.strip()

    @staticmethod
    def strip_trailing_commas(text: str) -> str:
        """Drop commas directly before ``}`` or ``]``, leaving string literals untouched."""
        out = []
        in_string = False
        escaped = False

        for index, char in enumerate(text):
            if in_string:
                if escaped:
                    escaped = False
                elif char == '\\':
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == ',':
                ahead = index + 1
                while ahead < len(text) and text[ahead].isspace():
                    ahead += 1
                if ahead < len(text) and text[ahead] in _CLOSERS:
                    continue
            out.append(char)

        return ''.join(out)

    @staticmethod
    def _loads(text: str) -> Any:
        """Parse JSON, retrying once with trailing commas removed."""
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            pass

        repaired = DeltaParser.strip_trailing_commas(text)
        if repaired == text:
            return _NOT_PARSED
        try:
            return json.loads(repaired)
        except json.JSONDecodeError:
            return _NOT_PARSED

    @staticmethod
    def extract_json(text: str) -> Any:
        """
        Decode the structured content of ``text``.

        Tries the fence-stripped text as a whole, then the largest run from
        the first ``{`` to the last ``}``.

        Raises:
            ParseError: nothing decodable was found
        """
        cleaned = DeltaParser.strip_fences(text)

        parsed = DeltaParser._loads(cleaned)
        if parsed is not _NOT_PARSED:
            return parsed

        match = _BRACE_RUN.search(cleaned)
        if match:
            parsed = DeltaParser._loads(match.group(0))
            if parsed is not _NOT_PARSED:
                logger.debug("Extracted delta from surrounding prose")
                return parsed

        raise ParseError(ParseError.NO_CONTENT)

    @staticmethod
    def parse(response_text: Any) -> GraphDelta:
        """
        Parse and validate a delta from raw model output.

        Args:
            response_text: Raw response from the text-generation call

        Returns:
            Validated GraphDelta

        Raises:
            ParseError: no structured content, or content of the wrong shape
        """
        if not isinstance(response_text, str):
            raise ParseError(ParseError.NO_CONTENT)

        try:
            parsed = DeltaParser.extract_json(response_text)
            return validate_delta(parsed)
        except ParseError as e:
            DeltaParser._log_failure(e, response_text)
            raise
        except SchemaError as e:
            error = ParseError(ParseError.INVALID_STRUCTURE, e.errors)
            DeltaParser._log_failure(error, response_text)
            raise error from e

    @staticmethod
    def _log_failure(error: ParseError, response_text: str, preview_chars: Optional[int] = 200) -> None:
        get_metrics().counter('delta_parse_failures_total', tags={'reason': error.message})
        logger.warning(f"Failed to parse model response: {error}")
        logger.warning(f"Raw response (first {preview_chars} chars): {response_text[:preview_chars]!r}")


def parse_delta(response_text: Any) -> GraphDelta:
    """Parse and validate a GraphDelta from raw model text."""
    return DeltaParser.parse(response_text)
