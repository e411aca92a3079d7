"""Locate the JSON question array inside a raw model response."""

from __future__ import annotations

import json
import re
from typing import Any, List

from .errors import MalformedJson, NoArrayFound

_FENCE_RE = re.compile(r"```json\s*|\s*```", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove every Markdown fence marker, wherever it appears."""
    if "```" not in text:
        return text
    return _FENCE_RE.sub("", text).strip()


def extract_json_array(raw: str) -> List[Any]:
    """Return the JSON array embedded in ``raw``.

    The candidate payload runs from the first ``[`` to the last ``]``. When
    the response was cut off before any closing bracket, the candidate runs
    to the end of the text so the truncation is reported as malformed JSON.
    Contents are not inspected.
    """
    cleaned = strip_code_fences((raw or "").strip())

    start = cleaned.find("[")
    end = cleaned.rfind("]")
    if start == -1:
        raise NoArrayFound("No valid JSON array found in response")
    if end == -1:
        candidate = cleaned[start:]
    elif end < start:
        raise NoArrayFound("No valid JSON array found in response")
    else:
        candidate = cleaned[start : end + 1]

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise MalformedJson(
            f"Failed to parse quiz JSON: {exc}", cause=exc
        ) from exc
    if not isinstance(data, list):
        raise MalformedJson(
            "Failed to parse quiz JSON: response is not an array"
        )
    return data
