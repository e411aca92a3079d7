from __future__ import annotations

from typing import Callable, Iterable

import pytest
from rich.console import Console

from study_tutor.quizzer import (
    QuizMode,
    QuizSession,
    SessionState,
    SessionStateError,
    parse_session_command,
    render_report,
    run_quiz_session,
    validate_questions,
)


def _inputs(values: Iterable[str]) -> Callable[[], str]:
    iterator = iter(values)
    return lambda: next(iterator)


def _console() -> Console:
    return Console(record=True, width=120, force_terminal=False)


def _loaded(question_set, **kwargs) -> QuizSession:
    session = QuizSession(**kwargs)
    session.load(question_set)
    return session


def test_parse_session_command_navigation_words(question_set):
    mcq = question_set[0]
    assert parse_session_command("n", mcq).type == "next"
    assert parse_session_command("prev", mcq).type == "prev"
    assert parse_session_command("SUBMIT", mcq).type == "submit"
    assert parse_session_command("q", mcq).type == "quit"
    assert parse_session_command("h", mcq).type == "hint"
    assert parse_session_command("", mcq) is None
    assert parse_session_command(None, mcq) is None


def test_parse_session_command_choice_answers(question_set):
    mcq, _, tf = question_set
    assert parse_session_command("2", mcq).value == 1
    assert parse_session_command("c", mcq).value == 2
    assert parse_session_command("9", mcq) is None
    assert parse_session_command("z", mcq) is None
    assert parse_session_command("t", tf).value == 0
    assert parse_session_command("False", tf).value == 1


def test_parse_session_command_fillblank_text(question_set):
    fill = question_set[1]
    command = parse_session_command(" photosynthesis ", fill)
    assert command.type == "answer"
    assert command.value == "photosynthesis"
    assert parse_session_command("=next", fill).value == "next"
    assert parse_session_command("=", fill) is None


def test_run_quiz_session_submits_complete_attempt(question_set):
    session = _loaded(question_set)
    console = _console()
    outcome = run_quiz_session(
        session, console, _inputs(["2", "photosynthesis", "f", "submit"])
    )

    assert outcome.exit_action == "submitted"
    assert outcome.report.correct_count == 3
    assert session.state is SessionState.GRADED
    text = console.export_text()
    assert "Quiz Results" in text
    assert "3/3" in text
    assert "Excellent!" in text
    assert "Mitochondria run oxidative phosphorylation." in text


def test_run_quiz_session_confirms_incomplete_submit(question_set):
    session = _loaded(question_set)
    console = _console()
    outcome = run_quiz_session(
        session,
        console,
        _inputs(["1", "submit", "n", "submit", "y"]),
        show_explanations=False,
    )

    assert outcome.exit_action == "submitted"
    assert outcome.report.answered_count == 1
    text = console.export_text()
    assert "Unanswered question(s): 2, 3" in text
    assert "Explanation" not in text


def test_run_quiz_session_navigation_and_hint(question_set):
    session = _loaded(question_set)
    console = _console()
    outcome = run_quiz_session(
        session,
        console,
        _inputs(["n", "h", "p", "bogus", "quit"]),
    )

    assert outcome.exit_action == "quit"
    assert outcome.report is None
    text = console.export_text()
    assert "Starts with photo." in text
    assert "Unrecognized input" in text
    assert "Ending quiz without submission." in text


def test_run_quiz_session_handles_interrupt(question_set):
    session = _loaded(question_set)
    console = _console()
    outcome = run_quiz_session(session, console, _inputs([]))
    assert outcome.exit_action == "quit"
    assert "Session interrupted." in console.export_text()


def test_run_quiz_session_reports_expiry(question_set, scheduler):
    session = _loaded(
        question_set, mode=QuizMode.QUICKFIRE, scheduler=scheduler
    )
    console = _console()

    def expire_then_answer() -> str:
        scheduler.advance(60)
        return "1"

    outcome = run_quiz_session(session, console, expire_then_answer)

    assert outcome.exit_action == "expired"
    assert outcome.report.elapsed_seconds == 60
    text = console.export_text()
    assert "01:00" in text
    assert "Time's up!" in text
    assert "60s" in text


def test_render_report_lists_every_verdict(question_set):
    session = _loaded(question_set)
    session.begin_collecting()
    session.apply_answer(1, "chlorophyll")
    report = session.submit()

    console = _console()
    render_report(console, report)
    text = console.export_text()
    assert "0/3" in text
    assert "Keep practicing!" in text
    assert "chlorophyll" in text
    assert "photosynthesis" in text
    assert text.count("❌") == 3


@pytest.mark.parametrize("raw", ["5", "e"])
def test_parse_session_command_out_of_range_option(question_set, raw):
    assert parse_session_command(raw, question_set[0]) is None


def _truefalse_set(options, correct_index):
    return validate_questions(
        [
            {
                "type": "truefalse",
                "question": "Water boils at 100C at sea level.",
                "options": options,
                "correctIndex": correct_index,
            }
        ],
        1,
    )


def test_parse_session_command_truefalse_follows_option_labels():
    question = _truefalse_set(["False", "True"], 1)[0]
    assert parse_session_command("t", question).value == 1
    assert parse_session_command("TRUE", question).value == 1
    assert parse_session_command("f", question).value == 0


def test_parse_session_command_truefalse_positional_for_unlabelled_pair():
    question = _truefalse_set(["Yes", "No"], 0)[0]
    assert parse_session_command("t", question).value == 0
    assert parse_session_command("false", question).value == 1


def test_run_quiz_session_grades_reversed_truefalse_by_label():
    session = _loaded(_truefalse_set(["False", "True"], 1))
    outcome = run_quiz_session(session, _console(), _inputs(["t", "submit"]))
    assert outcome.exit_action == "submitted"
    assert outcome.report.correct_count == 1


def test_run_quiz_session_rejects_missing_truefalse_option():
    session = _loaded(_truefalse_set(["True"], 0))
    console = _console()
    outcome = run_quiz_session(session, console, _inputs(["f", "quit"]))
    assert outcome.exit_action == "quit"
    assert session.attempt.answer_for(0) is None
    assert "Unrecognized input" in console.export_text()


def test_run_quiz_session_expiry_during_answer_ends_session(
    question_set, scheduler, monkeypatch
):
    session = _loaded(
        question_set, mode=QuizMode.QUICKFIRE, scheduler=scheduler
    )
    original = session.apply_answer

    def expire_first(index, value):
        scheduler.advance(60)
        return original(index, value)

    monkeypatch.setattr(session, "apply_answer", expire_first)
    outcome = run_quiz_session(session, _console(), _inputs(["1"]))

    assert outcome.exit_action == "expired"
    assert outcome.report is not None
    assert session.state is SessionState.GRADED


def test_run_quiz_session_propagates_state_errors_before_grading(
    question_set, monkeypatch
):
    session = _loaded(question_set)

    def broken(index, value):
        raise SessionStateError("not collecting")

    monkeypatch.setattr(session, "apply_answer", broken)
    with pytest.raises(SessionStateError):
        run_quiz_session(session, _console(), _inputs(["1"]))
