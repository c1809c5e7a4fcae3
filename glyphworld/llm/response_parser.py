"""
Tolerant parsing of turn responses.

Models asked for JSON still wrap it in code fences, trail commentary after
the closing brace, or get cut off mid-string. `parse_turn_json` tries the
text as-is, then trimmed to the last closing brace, then sliced from the
first opening brace to the last closing brace.
"""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

PARSE_ERROR_EMPTY = "Empty response"
PARSE_ERROR_UNKNOWN = "Unknown parse error"

_NARRATIVE_PATTERN = re.compile(r'"narrative"\s*:\s*"((?:[^"\\]|\\.)*)')


def _strip_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def _attempt(text: str) -> dict[str, Any] | None:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def parse_turn_json(raw: str | None) -> tuple[dict[str, Any] | None, str | None]:
    """
    Parse a JSON object out of a model response.

    Returns:
        Tuple of (parsed object or None, failure reason or None)
    """
    if raw is None or not raw.strip():
        return None, PARSE_ERROR_EMPTY

    text = _strip_fences(raw)

    direct = _attempt(text)
    if direct is not None:
        return direct, None

    last = text.rfind("}")
    if last != -1:
        trimmed = _attempt(text[: last + 1])
        if trimmed is not None:
            logger.debug("Parsed turn JSON after trimming trailing text")
            return trimmed, None

    first = text.find("{")
    if first != -1 and last > first:
        sliced = _attempt(text[first : last + 1])
        if sliced is not None:
            logger.debug("Parsed turn JSON after slicing to outer braces")
            return sliced, None

    return None, PARSE_ERROR_UNKNOWN


def extract_partial_narrative(text: str) -> str | None:
    """
    Pull the narrative string out of a possibly incomplete JSON response.

    Used while streaming: the narrative is shown before the rest of the
    object has arrived.
    """
    match = _NARRATIVE_PATTERN.search(text)
    if not match:
        return None
    # The pattern never captures half of an escape sequence still in flight
    value = match.group(1)
    try:
        return json.loads(f'"{value}"')
    except json.JSONDecodeError:
        return value.replace("\\n", "\n").replace('\\"', '"').replace("\\\\", "\\")
