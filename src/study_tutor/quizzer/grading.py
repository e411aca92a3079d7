"""Score an attempt against its question set."""

from __future__ import annotations

from typing import Optional

from .models import (
    Answer,
    Attempt,
    GradeReport,
    Question,
    QuestionSet,
    QuestionType,
    QuestionVerdict,
)


def fuzzy_match(reference: str, submission: Optional[str]) -> bool:
    """Case-insensitive, trimmed, bidirectional-substring comparison.

    An empty submission never matches. A one-letter reference matches any
    submission containing that letter.
    """
    expected = str(reference or "").lower().strip()
    given = str(submission or "").lower().strip()
    if not given:
        return False
    return expected == given or expected in given or given in expected


def is_correct(question: Question, answer: Answer) -> bool:
    """Return whether ``answer`` satisfies ``question``."""
    if answer is None:
        return False
    if question.type is QuestionType.FILLBLANK:
        if not isinstance(answer, str):
            return False
        return fuzzy_match(question.correct_answer or "", answer)
    if isinstance(answer, bool) or not isinstance(answer, int):
        return False
    return answer == question.correct_index


def grade_attempt(
    question_set: QuestionSet,
    attempt: Attempt,
    *,
    elapsed_seconds: Optional[int] = None,
) -> GradeReport:
    """Grade every question; unanswered entries count as incorrect."""
    if len(attempt) != len(question_set):
        raise ValueError(
            f"Attempt has {len(attempt)} answers for "
            f"{len(question_set)} questions"
        )
    verdicts = tuple(
        QuestionVerdict(
            index=idx,
            question=question,
            submitted=attempt.answer_for(idx),
            is_correct=is_correct(question, attempt.answer_for(idx)),
        )
        for idx, question in enumerate(question_set)
    )
    return GradeReport(
        verdicts=verdicts,
        correct_count=sum(1 for v in verdicts if v.is_correct),
        total=len(question_set),
        elapsed_seconds=elapsed_seconds,
    )
