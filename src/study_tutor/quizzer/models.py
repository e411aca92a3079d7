"""Immutable quiz data structures: questions, attempts, and grade reports."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator, Optional, Union

from .errors import EmptyResult

Answer = Union[int, str, None]
"""An option index, a free-text answer, or ``None`` for unanswered."""


class QuestionType(str, Enum):
    """Supported question kinds."""

    MCQ = "mcq"
    FILLBLANK = "fillblank"
    TRUEFALSE = "truefalse"

    @classmethod
    def from_value(cls, value: object) -> Optional["QuestionType"]:
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return None

    @property
    def uses_options(self) -> bool:
        return self is not QuestionType.FILLBLANK


@dataclass(frozen=True)
class Question:
    """A validated quiz item."""

    type: QuestionType
    text: str
    hint: str
    explanation: str
    options: Optional[tuple[str, ...]] = None
    correct_index: Optional[int] = None
    correct_answer: Optional[str] = None

    @property
    def answer_text(self) -> str:
        """Human-readable correct answer."""
        if self.type.uses_options and self.options is not None:
            return self.options[self.correct_index or 0]
        return self.correct_answer or ""

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "type": self.type.value,
            "question": self.text,
        }
        if self.type.uses_options:
            data["options"] = list(self.options or ())
            data["correctIndex"] = self.correct_index
        else:
            data["correctAnswer"] = self.correct_answer
        data["hint"] = self.hint
        data["explanation"] = self.explanation
        return data


@dataclass(frozen=True)
class QuestionSet:
    """Non-empty ordered collection of validated questions."""

    questions: tuple[Question, ...]

    def __post_init__(self) -> None:
        if not self.questions:
            raise EmptyResult("No valid questions generated")

    def __len__(self) -> int:
        return len(self.questions)

    def __iter__(self) -> Iterator[Question]:
        return iter(self.questions)

    def __getitem__(self, index: int) -> Question:
        return self.questions[index]


@dataclass(frozen=True)
class Attempt:
    """The user's current answers; every change yields a new Attempt."""

    answers: tuple[Answer, ...]

    @classmethod
    def fresh(cls, size: int) -> "Attempt":
        return cls(answers=(None,) * size)

    def __len__(self) -> int:
        return len(self.answers)

    def answer_for(self, index: int) -> Answer:
        return self.answers[index]

    def with_answer(self, index: int, value: Answer) -> "Attempt":
        if not 0 <= index < len(self.answers):
            raise IndexError(f"Question index {index} out of range")
        updated = list(self.answers)
        updated[index] = value
        return replace(self, answers=tuple(updated))

    def unanswered_indices(self) -> tuple[int, ...]:
        return tuple(i for i, value in enumerate(self.answers) if value is None)

    def is_complete(self) -> bool:
        return not self.unanswered_indices()


@dataclass(frozen=True)
class QuestionVerdict:
    """Grading outcome for a single question."""

    index: int
    question: Question
    submitted: Answer
    is_correct: bool

    @property
    def explanation(self) -> str:
        return self.question.explanation

    @property
    def correct_text(self) -> str:
        return self.question.answer_text

    @property
    def submitted_text(self) -> Optional[str]:
        if self.submitted is None:
            return None
        if isinstance(self.submitted, str):
            return self.submitted
        options = self.question.options or ()
        if 0 <= self.submitted < len(options):
            return options[self.submitted]
        return str(self.submitted)


@dataclass(frozen=True)
class GradeReport:
    """Read-only result of grading one attempt."""

    verdicts: tuple[QuestionVerdict, ...]
    correct_count: int
    total: int
    elapsed_seconds: Optional[int] = None

    @property
    def score(self) -> float:
        return self.correct_count / self.total if self.total else 0.0

    @property
    def score_label(self) -> str:
        return f"{self.correct_count}/{self.total}"

    @property
    def percentage(self) -> int:
        # Round half up.
        return int(math.floor(self.score * 100 + 0.5))

    @property
    def answered_count(self) -> int:
        return sum(1 for v in self.verdicts if v.submitted is not None)

    @property
    def feedback(self) -> str:
        if self.score >= 0.8:
            return "Excellent!"
        if self.score >= 0.6:
            return "Good job!"
        return "Keep practicing!"
