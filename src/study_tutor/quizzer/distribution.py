"""Question-type distribution for a generation request."""

from __future__ import annotations

from typing import Dict, Sequence, Tuple, Union

from .errors import InvalidRequest
from .models import QuestionType

MAX_QUESTION_COUNT = 50
DEFAULT_TYPES: Tuple[QuestionType, ...] = (
    QuestionType.MCQ,
    QuestionType.FILLBLANK,
    QuestionType.TRUEFALSE,
)


def parse_types(
    raw: Union[str, Sequence[Union[str, QuestionType]]],
) -> Tuple[QuestionType, ...]:
    """Parse a comma-separated string or sequence into distinct types.

    Unknown names are dropped and repeats collapse onto their first
    occurrence, so ``"tf,mcq,mcq"`` yields ``(mcq,)``.
    """
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    parsed: list[QuestionType] = []
    for item in items:
        qtype = QuestionType.from_value(item)
        if qtype is not None and qtype not in parsed:
            parsed.append(qtype)
    if not parsed:
        known = ", ".join(t.value for t in QuestionType)
        raise InvalidRequest(f"No supported question types. Expected: {known}")
    return tuple(parsed)


def clamp_count(count: object) -> int:
    """Coerce ``count`` to an int in ``1..MAX_QUESTION_COUNT``."""
    if isinstance(count, bool):
        raise InvalidRequest(f"Question count must be a number, got {count!r}")
    try:
        value = int(count)  # type: ignore[call-overload]
    except (TypeError, ValueError) as exc:
        raise InvalidRequest(
            f"Question count must be a number, got {count!r}", cause=exc
        ) from exc
    if value < 1:
        raise InvalidRequest("Question count must be at least 1")
    return min(value, MAX_QUESTION_COUNT)


def distribute_types(
    count: int,
    types: Sequence[QuestionType],
) -> Dict[QuestionType, int]:
    """Split ``count`` across ``types`` as evenly as possible.

    Every type gets ``count // len(types)``; the remainder goes one apiece to
    the leading types in request order. The result preserves that order.
    """
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise InvalidRequest("Question count must be at least 1")
    if not types:
        raise InvalidRequest("At least one question type is required")
    resolved = [QuestionType.from_value(t) for t in types]
    if any(t is None for t in resolved):
        raise InvalidRequest(f"Unsupported question type in {list(types)!r}")
    if len(set(resolved)) != len(resolved):
        raise InvalidRequest("Question types must be distinct")

    per_type, remainder = divmod(count, len(resolved))
    return {
        qtype: per_type + (1 if idx < remainder else 0)
        for idx, qtype in enumerate(resolved)  # type: ignore[misc]
    }
