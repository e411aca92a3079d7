"""Failure taxonomy for the quiz generation pipeline."""

from __future__ import annotations

from typing import Optional

__all__ = [
    "QuizError",
    "InvalidRequest",
    "NoArrayFound",
    "MalformedJson",
    "EmptyResult",
    "TransportError",
    "SessionStateError",
]


class QuizError(RuntimeError):
    """Base class for pipeline failures; ``stage`` names where it happened."""

    stage = "quiz"

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    def user_message(self) -> str:
        """One line naming the failed stage and the underlying cause."""
        return f"Quiz {self.stage} failed: {self}"


class InvalidRequest(QuizError):
    """Bad generation parameters (count, types, difficulty, content)."""

    stage = "request"


class NoArrayFound(QuizError):
    """The model response contains no JSON array."""

    stage = "parse"


class MalformedJson(QuizError):
    """The located array is not valid JSON or not an array."""

    stage = "parse"


class EmptyResult(QuizError):
    """No question survived validation."""

    stage = "validation"


class TransportError(QuizError):
    """The generation collaborator failed; message passed through as is."""

    stage = "generation"


class SessionStateError(RuntimeError):
    """A session operation was invoked from a state that does not allow it."""
