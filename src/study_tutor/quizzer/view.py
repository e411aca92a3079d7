"""Rich console rendering for quiz sessions and grade reports.

The session object owns all quiz state; this module only draws it and turns
console input into session calls. It never grades anything itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Optional, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .errors import InvalidRequest, SessionStateError
from .models import GradeReport, Question, QuestionType
from .session import QuizSession, SessionState
from .timer import format_clock

InputProvider = Callable[[], str]
ExitAction = Literal["submitted", "expired", "quit"]

_TRUE_WORDS = {"t", "true"}
_FALSE_WORDS = {"f", "false"}


@dataclass(frozen=True)
class SessionCommand:
    """Normalized user command parsed from console input."""

    type: Literal["next", "prev", "submit", "quit", "hint", "answer"]
    value: object = None


@dataclass(frozen=True)
class SessionOutcome:
    """What ``run_quiz_session`` ended with."""

    report: Optional[GradeReport]
    exit_action: ExitAction


def parse_session_command(
    raw: Optional[str], question: Question
) -> Optional[SessionCommand]:
    """Parse console input against the current question.

    Navigation words win over answers. Choice questions accept a 1-based
    number or a letter, true/false questions also accept ``t``/``f``. Free
    text answers fill-in-the-blank questions; prefix with ``=`` to answer
    with a word that is also a command.
    """
    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    lowered = text.lower()
    if lowered in {"n", "next"}:
        return SessionCommand("next")
    if lowered in {"p", "prev", "previous"}:
        return SessionCommand("prev")
    if lowered in {"s", "submit"}:
        return SessionCommand("submit")
    if lowered in {"q", "quit", "exit"}:
        return SessionCommand("quit")
    if lowered in {"h", "hint"}:
        return SessionCommand("hint")

    if question.type is QuestionType.FILLBLANK:
        answer = text[1:].strip() if text.startswith("=") else text
        return SessionCommand("answer", answer) if answer else None

    options = question.options or ()
    if question.type is QuestionType.TRUEFALSE and (
        lowered in _TRUE_WORDS or lowered in _FALSE_WORDS
    ):
        index = _truefalse_index(options, lowered in _TRUE_WORDS)
        return None if index is None else SessionCommand("answer", index)
    if lowered.isdigit():
        index = int(lowered) - 1
        if 0 <= index < len(options):
            return SessionCommand("answer", index)
        return None
    if len(lowered) == 1 and lowered.isalpha():
        index = ord(lowered) - ord("a")
        if index < len(options):
            return SessionCommand("answer", index)
    return None


def _truefalse_index(
    options: Sequence[str], want_true: bool
) -> Optional[int]:
    """Find the option labelled true or false; position only for two options."""
    label = "true" if want_true else "false"
    for idx, option in enumerate(options):
        if option.strip().lower() == label:
            return idx
    if len(options) == 2:
        return 0 if want_true else 1
    return None


def run_quiz_session(
    session: QuizSession,
    console: Console,
    input_provider: InputProvider,
    *,
    show_explanations: bool = True,
) -> SessionOutcome:
    """Drive ``session`` from console input until it is graded or abandoned."""
    if session.state is SessionState.RENDERING:
        session.begin_collecting()
    if session.question_set is None:
        raise InvalidRequest("No quiz loaded")

    total = len(session.question_set)
    index = 0
    exit_action: ExitAction = "quit"
    while True:
        if session.state is SessionState.GRADED:
            exit_action = "expired"
            break
        question = session.question_set[index]
        render_question(console, session, index)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            break
        if session.state is SessionState.GRADED:
            exit_action = "expired"
            break

        command = parse_session_command(raw, question)
        if command is None:
            console.print("[red]Unrecognized input. Try again.[/]")
            continue
        if command.type == "answer":
            try:
                session.apply_answer(index, command.value)  # type: ignore[arg-type]
            except InvalidRequest:
                console.print("[red]Unrecognized input. Try again.[/]")
                continue
            except SessionStateError:
                if session.state is SessionState.GRADED:
                    exit_action = "expired"
                    break
                raise
            if index + 1 < total:
                index += 1
        elif command.type == "next":
            index = min(index + 1, total - 1)
        elif command.type == "prev":
            index = max(index - 1, 0)
        elif command.type == "hint":
            console.print(Panel(question.hint, title="Hint", border_style="cyan"))
        elif command.type == "quit":
            console.print("\n[bold yellow]Ending quiz without submission.[/]")
            break
        elif command.type == "submit":
            if not _confirm_submit(session, console, input_provider):
                continue
            session.submit()
            exit_action = "submitted"
            break

    report = session.report
    if report is not None:
        if exit_action == "expired":
            console.print("\n[bold red]Time's up![/]")
        render_report(console, report, show_explanations=show_explanations)
    return SessionOutcome(report=report, exit_action=exit_action)


def _confirm_submit(
    session: QuizSession, console: Console, input_provider: InputProvider
) -> bool:
    missing = session.unanswered_indices()
    if not missing:
        return True
    labels = ", ".join(str(i + 1) for i in missing)
    console.print(
        f"[yellow]Unanswered question(s): {labels}. Submit anyway? \\[y/N][/]"
    )
    try:
        reply = input_provider()
    except (EOFError, KeyboardInterrupt, StopIteration):
        return False
    return (reply or "").strip().lower() in {"y", "yes"}


def render_question(console: Console, session: QuizSession, index: int) -> None:
    assert session.question_set is not None and session.attempt is not None
    question = session.question_set[index]
    total = len(session.question_set)
    header = Text.assemble(
        (f"Question {index + 1}", "bold cyan"),
        (f" / {total}", "dim"),
    )
    remaining = session.remaining_seconds
    if remaining is not None:
        countdown = session.countdown
        style = "bold red" if countdown and countdown.is_warning else "bold"
        header.append(f"  {format_clock(remaining)}", style=style)
    console.print()
    console.rule(header)
    console.print(Text(question.text, style="bold"))

    current = session.attempt.answer_for(index)
    if question.type is QuestionType.FILLBLANK:
        shown = current if isinstance(current, str) else "(no answer yet)"
        console.print(Text(f"Your answer: {shown}", style="green"))
        hint = "type your answer (prefix '=' for words like 'next')"
    else:
        table = Table(show_header=False, box=box.SIMPLE, expand=True)
        table.add_column("Key", justify="center", style="cyan")
        table.add_column("Option")
        for opt_idx, option in enumerate(question.options or ()):
            chosen = current == opt_idx
            label = Text(("• " if chosen else "  ") + option)
            if chosen:
                label.stylize("bold green")
            table.add_row(str(opt_idx + 1), label)
        console.print(table)
        hint = "option number or letter"
        if question.type is QuestionType.TRUEFALSE:
            hint += ", t/f"

    answered = total - len(session.unanswered_indices())
    console.print(
        Text(
            f"Answered {answered}/{total} | {hint}, n (next), p (prev), "
            "h (hint), submit, quit",
            style="dim",
        )
    )


def render_report(
    console: Console,
    report: GradeReport,
    *,
    show_explanations: bool = True,
) -> None:
    console.print()
    console.rule(Text("Quiz Results", style="bold magenta"))

    overview = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD)
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Score", report.score_label)
    overview.add_row("Percentage", f"{report.percentage}%")
    overview.add_row("Answered", f"{report.answered_count}/{report.total}")
    if report.elapsed_seconds is not None:
        overview.add_row("Time", f"{report.elapsed_seconds}s")
    console.print(overview)
    console.print(Text(report.feedback, style="bold"))

    responses = Table(title="Responses", box=box.SIMPLE, expand=True)
    responses.add_column("#", justify="right")
    responses.add_column("Question", overflow="fold")
    responses.add_column("Your answer")
    responses.add_column("Correct answer")
    responses.add_column("Result", justify="center")
    for verdict in report.verdicts:
        responses.add_row(
            str(verdict.index + 1),
            verdict.question.text,
            verdict.submitted_text or "-",
            verdict.correct_text,
            "✅" if verdict.is_correct else "❌",
        )
    console.print(responses)

    if show_explanations:
        for verdict in report.verdicts:
            console.print(
                Panel(
                    verdict.explanation,
                    title=f"Explanation {verdict.index + 1}",
                    border_style="green" if verdict.is_correct else "red",
                )
            )
