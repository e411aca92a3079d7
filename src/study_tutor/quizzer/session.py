"""Quiz session state machine owning the question set, attempt, and timer.

A session moves through ``IDLE -> RENDERING -> COLLECTING -> GRADING ->
GRADED``. Rendering is left to a collaborator: it calls ``load`` with a
question set, builds its view, then calls ``begin_collecting``. Answers flow
in through ``apply_answer`` and grading happens once per attempt, whether
triggered by ``submit`` or by the quickfire countdown reaching zero.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from .errors import InvalidRequest, SessionStateError
from .grading import grade_attempt
from .models import Answer, Attempt, GradeReport, QuestionSet
from .timer import Countdown, Scheduler

DEFAULT_QUICKFIRE_SECONDS = 60

GradedCallback = Callable[[GradeReport], None]


class SessionState(Enum):
    IDLE = "idle"
    RENDERING = "rendering"
    COLLECTING = "collecting"
    GRADING = "grading"
    GRADED = "graded"


class QuizMode(Enum):
    STANDARD = "standard"
    QUICKFIRE = "quickfire"


class QuizSession:
    """Owns one quiz at a time; construct one per user-facing quiz flow."""

    def __init__(
        self,
        *,
        mode: QuizMode = QuizMode.STANDARD,
        time_limit: int = DEFAULT_QUICKFIRE_SECONDS,
        scheduler: Optional[Scheduler] = None,
        on_graded: Optional[GradedCallback] = None,
        on_tick: Optional[Callable[[int], None]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if mode is QuizMode.QUICKFIRE and time_limit < 1:
            raise InvalidRequest("Quickfire time limit must be at least 1")
        self.mode = mode
        self.time_limit = time_limit
        self._scheduler = scheduler
        self._on_graded = on_graded
        self._on_tick = on_tick
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._questions: Optional[QuestionSet] = None
        self._attempt: Optional[Attempt] = None
        self._report: Optional[GradeReport] = None
        self._countdown: Optional[Countdown] = None
        self.last_error: Optional[str] = None

    # -- read-only views -------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def question_set(self) -> Optional[QuestionSet]:
        return self._questions

    @property
    def attempt(self) -> Optional[Attempt]:
        return self._attempt

    @property
    def report(self) -> Optional[GradeReport]:
        return self._report

    @property
    def countdown(self) -> Optional[Countdown]:
        return self._countdown

    @property
    def remaining_seconds(self) -> Optional[int]:
        if self._countdown is None:
            return None
        return self._countdown.remaining

    def is_complete(self) -> bool:
        return self._attempt is not None and self._attempt.is_complete()

    def unanswered_indices(self) -> tuple[int, ...]:
        if self._attempt is None:
            return ()
        return self._attempt.unanswered_indices()

    # -- transitions -----------------------------------------------------

    def load(self, question_set: QuestionSet) -> None:
        """Take ownership of ``question_set`` and start rendering it."""
        with self._lock:
            self._require(SessionState.IDLE, action="load a quiz")
            self._cancel_countdown()
            self._questions = question_set
            self._attempt = Attempt.fresh(len(question_set))
            self._report = None
            self.last_error = None
            self._state = SessionState.RENDERING
        self._logger.info(
            "Loaded question set",
            extra={"question_count": len(question_set), "mode": self.mode.value},
        )

    def begin_collecting(self) -> None:
        """Rendering finished; accept answers and start any countdown."""
        with self._lock:
            self._require(SessionState.RENDERING, action="collect answers")
            self._state = SessionState.COLLECTING
            if self.mode is QuizMode.QUICKFIRE:
                self._cancel_countdown()
                self._countdown = Countdown(
                    self.time_limit,
                    self._expire,
                    on_tick=self._on_tick,
                    scheduler=self._scheduler,
                )
                self._countdown.start()

    def apply_answer(self, index: int, value: Answer) -> Attempt:
        """Record ``value`` for question ``index`` and return the new Attempt."""
        with self._lock:
            self._require(SessionState.COLLECTING, action="answer")
            assert self._questions is not None and self._attempt is not None
            if not 0 <= index < len(self._questions):
                raise InvalidRequest(f"No question at index {index}")
            question = self._questions[index]
            if value is not None:
                value = _coerce_answer(question.type.uses_options, value)
                if (
                    question.type.uses_options
                    and not 0 <= value < len(question.options or ())
                ):
                    raise InvalidRequest(
                        f"Option {value} does not exist for question "
                        f"{index + 1}"
                    )
            self._attempt = self._attempt.with_answer(index, value)
            return self._attempt

    def submit(self) -> GradeReport:
        """Grade the current attempt once; later calls return that report."""
        with self._lock:
            if self._state in (SessionState.GRADING, SessionState.GRADED):
                assert self._report is not None
                return self._report
            self._require(SessionState.COLLECTING, action="submit")
            assert self._questions is not None and self._attempt is not None
            self._state = SessionState.GRADING
            elapsed = None
            if self._countdown is not None:
                self._countdown.cancel()
                elapsed = self._countdown.elapsed
            self._report = grade_attempt(
                self._questions, self._attempt, elapsed_seconds=elapsed
            )
            self._state = SessionState.GRADED
            report = self._report
        self._logger.info(
            "Graded attempt",
            extra={
                "correct": report.correct_count,
                "total": report.total,
                "elapsed_seconds": report.elapsed_seconds,
            },
        )
        return report

    def retry(self) -> Attempt:
        """Start over with a blank Attempt on the same questions."""
        with self._lock:
            self._require(SessionState.GRADED, action="retry")
            assert self._questions is not None
            self._cancel_countdown()
            self._attempt = Attempt.fresh(len(self._questions))
            self._report = None
            self._state = SessionState.RENDERING
            return self._attempt

    def new_quiz(self) -> None:
        """Discard the current quiz and return to ``IDLE``."""
        with self._lock:
            self._cancel_countdown()
            self._questions = None
            self._attempt = None
            self._report = None
            self._state = SessionState.IDLE

    close = new_quiz

    def fail(self, error: BaseException) -> None:
        """Record a generation failure and return to ``IDLE``."""
        message = getattr(error, "user_message", None)
        self.new_quiz()
        self.last_error = message() if callable(message) else str(error)
        self._logger.error(
            "Quiz generation failed", extra={"error": self.last_error}
        )

    def __enter__(self) -> "QuizSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- internals -------------------------------------------------------

    def _expire(self) -> None:
        with self._lock:
            if self._state is not SessionState.COLLECTING:
                return
            self._logger.info("Quickfire time expired; submitting")
            report = self.submit()
        if self._on_graded is not None:
            self._on_graded(report)

    def _cancel_countdown(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None

    def _require(self, expected: SessionState, *, action: str) -> None:
        if self._state is not expected:
            raise SessionStateError(
                f"Cannot {action} while session is {self._state.value}"
            )


def _coerce_answer(uses_options: bool, value: Answer) -> Answer:
    if uses_options:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidRequest("Choice questions take an option index")
        return value
    if not isinstance(value, str):
        raise InvalidRequest("Fill-in-the-blank questions take text")
    return value.strip() or None
