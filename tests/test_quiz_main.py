from __future__ import annotations

import json
from typing import Callable, Iterable

import pytest
from rich.console import Console

from study_tutor.core import ai
from study_tutor.quizzer import _main

from fixtures import SAMPLE_RECORDS, FakeChatClient, fenced_reply


def _inputs(values: Iterable[str]) -> Callable[[], str]:
    iterator = iter(values)
    return lambda: next(iterator)


def _console() -> Console:
    return Console(record=True, width=120, force_terminal=False)


def test_quiz_main_runs_generated_quiz(tutor_home):
    client = FakeChatClient([fenced_reply()])
    console = _console()

    code = _main.quiz_main(
        ["--text", "Cell biology notes", "--count", "3", "--model", "t/m"],
        console=console,
        input_provider=_inputs(["2", "photosynthesis", "f", "submit", "n"]),
        client=client,
    )

    assert code == 0
    assert client.calls[0]["model"] == "t/m"
    assert "Create 3 quiz questions" in client.last_prompt
    text = console.export_text()
    assert "Quiz score: 3/3 (100%) - Excellent!" in text
    log_file = tutor_home / "logs" / "quizzer.log"
    messages = [
        json.loads(line)["message"]
        for line in log_file.read_text(encoding="utf-8").splitlines()
    ]
    assert "Requesting quiz generation" in messages
    assert "Graded attempt" in messages


def test_quiz_main_retry_reuses_questions(tutor_home):
    client = FakeChatClient([fenced_reply()])
    console = _console()

    code = _main.quiz_main(
        ["--text", "notes", "--no-explain"],
        console=console,
        input_provider=_inputs(
            ["1", "x", "t", "submit", "y", "2", "photo", "f", "submit", "n"]
        ),
        client=client,
    )

    assert code == 0
    assert len(client.calls) == 1
    text = console.export_text()
    assert "Quiz score: 0/3 (0%) - Keep practicing!" in text
    assert "Quiz score: 3/3 (100%) - Excellent!" in text


def test_quiz_main_exports_report_to_workspace(tutor_home):
    client = FakeChatClient([fenced_reply()])
    console = _console()

    code = _main.quiz_main(
        ["--text", "notes", "--export", "result.md"],
        console=console,
        input_provider=_inputs(["2", "photosynthesis", "t", "submit", "n"]),
        client=client,
    )

    assert code == 0
    target = tutor_home.resolve() / "exports" / "result.md"
    assert target.read_text(encoding="utf-8").startswith("# Quiz Results")
    assert "Wrote report" in console.export_text()


def test_quiz_main_reports_generation_failure(tutor_home):
    client = FakeChatClient(["I cannot make a quiz from that."])
    console = _console()

    code = _main.quiz_main(
        ["--text", "notes"],
        console=console,
        input_provider=_inputs([]),
        client=client,
    )

    assert code == 1
    assert "Quiz parse failed: No valid JSON array found in response" in (
        console.export_text()
    )


def test_quiz_main_reads_material_from_paths(tmp_path):
    notes = tmp_path / "notes"
    notes.mkdir()
    (notes / "a.md").write_text("Mitosis splits cells.", encoding="utf-8")
    client = FakeChatClient([json.dumps(SAMPLE_RECORDS)])

    code = _main.quiz_main(
        [str(notes), "--types", "mcq", "--count", "1"],
        console=_console(),
        input_provider=_inputs(["quit"]),
        client=client,
    )

    assert code == 0
    assert "Mitosis splits cells." in client.last_prompt
    assert "- 1 MCQ questions" in client.last_prompt


def test_quiz_main_requires_material(capsys):
    code = _main.quiz_main(
        [],
        console=_console(),
        input_provider=_inputs([]),
        client=FakeChatClient(),
    )
    assert code == 2
    assert "Provide study material" in capsys.readouterr().err


def test_quiz_main_requires_api_key(monkeypatch, capsys):
    monkeypatch.setattr(ai, "load_dotenv", lambda: False)
    code = _main.quiz_main(
        ["--text", "notes"], console=_console(), input_provider=_inputs([])
    )
    assert code == 2
    assert "OPENROUTER_API_KEY" in capsys.readouterr().err


def test_quiz_main_rejects_broken_config(tmp_path, capsys):
    bad = tmp_path / "tutor.toml"
    bad.write_text("[quiz]\nunknown = 1\n", encoding="utf-8")
    code = _main.quiz_main(
        ["--text", "notes", "--config", str(bad)],
        console=_console(),
        input_provider=_inputs([]),
        client=FakeChatClient(),
    )
    assert code == 2
    assert "Unknown configuration key 'quiz.unknown'" in capsys.readouterr().err


def test_quickfire_main_uses_quickfire_defaults():
    client = FakeChatClient([fenced_reply()])
    console = _console()

    code = _main.quickfire_main(
        ["--text", "notes", "--time-limit", "45"],
        console=console,
        input_provider=_inputs(["2", "photosynthesis", "f", "submit", "n"]),
        client=client,
    )

    assert code == 0
    assert "Create 5 quiz questions" in client.last_prompt
    assert "standard difficulty with moderate depth" in client.last_prompt
    text = console.export_text()
    assert "00:4" in text
    assert "Quiz score: 3/3 (100%) in " in text
    assert "s - Excellent!" in text


@pytest.mark.parametrize("value", ["0", "-5"])
def test_quickfire_main_rejects_non_positive_time_limit(value, capsys):
    client = FakeChatClient([fenced_reply()])
    with pytest.raises(SystemExit) as excinfo:
        _main.quickfire_main(
            ["--text", "notes", "--time-limit", value],
            console=_console(),
            input_provider=_inputs([]),
            client=client,
        )
    assert excinfo.value.code == 2
    assert "--time-limit must be at least 1 second" in capsys.readouterr().err
    assert client.calls == []


def test_quiz_main_rejects_zero_count(capsys):
    with pytest.raises(SystemExit) as excinfo:
        _main.quiz_main(
            ["--text", "notes", "--count", "0"],
            console=_console(),
            input_provider=_inputs([]),
            client=FakeChatClient(),
        )
    assert excinfo.value.code == 2
    assert "--count must be at least 1" in capsys.readouterr().err
