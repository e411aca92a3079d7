"""Turn untrusted parsed records into a validated QuestionSet."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .errors import EmptyResult, InvalidRequest
from .models import Question, QuestionSet, QuestionType

DEFAULT_HINT = "Think about the key concepts from the material."
DEFAULT_EXPLANATION = "Review this topic for better understanding."


class RecordRejected(ValueError):
    """A single record failed validation; carries the reason."""


def validate_questions(
    records: Sequence[Any],
    max_count: int,
    *,
    logger: Optional[logging.Logger] = None,
) -> QuestionSet:
    """Validate ``records`` and keep at most ``max_count`` of them.

    Malformed records are dropped individually; the set only fails when no
    record survives.
    """
    if isinstance(max_count, bool) or not isinstance(max_count, int):
        raise InvalidRequest("max_count must be an integer")
    if max_count < 1:
        raise InvalidRequest("max_count must be at least 1")

    accepted: List[Question] = []
    for position, record in enumerate(records):
        try:
            accepted.append(normalize_question(record))
        except RecordRejected as exc:
            if logger is not None:
                logger.debug(
                    "Dropped malformed question record",
                    extra={"position": position, "reason": str(exc)},
                )

    if not accepted:
        raise EmptyResult("No valid questions generated")
    if logger is not None:
        logger.info(
            "Validated question records",
            extra={
                "received": len(records),
                "accepted": len(accepted),
                "kept": min(len(accepted), max_count),
            },
        )
    return QuestionSet(tuple(accepted[:max_count]))


def normalize_question(record: Any) -> Question:
    """Build a :class:`Question` from one record or raise RecordRejected."""
    if not isinstance(record, Mapping):
        raise RecordRejected("record is not an object")

    text = _clean_text(record.get("question") or record.get("text"))
    if not text:
        raise RecordRejected("missing question text")

    raw_type = record.get("type")
    qtype = (
        QuestionType.MCQ if raw_type is None else QuestionType.from_value(raw_type)
    )
    if qtype is None:
        raise RecordRejected(f"unsupported type {raw_type!r}")

    hint = _clean_text(record.get("hint")) or DEFAULT_HINT
    explanation = _clean_text(record.get("explanation")) or DEFAULT_EXPLANATION

    if qtype is QuestionType.FILLBLANK:
        answer = _clean_text(record.get("correctAnswer"))
        if not answer:
            raise RecordRejected("fillblank without correctAnswer")
        return Question(
            type=qtype,
            text=text,
            hint=hint,
            explanation=explanation,
            correct_answer=answer,
        )

    options, index = _choice_fields(record)
    return Question(
        type=qtype,
        text=text,
        hint=hint,
        explanation=explanation,
        options=options,
        correct_index=index,
    )


def _choice_fields(record: Mapping[str, Any]) -> Tuple[Tuple[str, ...], int]:
    raw_options = record.get("options")
    if not isinstance(raw_options, (list, tuple)) or not raw_options:
        raise RecordRejected("options must be a non-empty list")
    index = record.get("correctIndex")
    if isinstance(index, bool) or not isinstance(index, int):
        raise RecordRejected("correctIndex must be an integer")
    if not 0 <= index < len(raw_options):
        raise RecordRejected(f"correctIndex {index} outside options")
    return tuple(str(option).strip() for option in raw_options), index


def _clean_text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (str, int, float)):
        return str(value).strip()
    return ""
