from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

from fixtures import (  # noqa: E402
    SAMPLE_RECORDS,
    FakeChatClient,
    ManualScheduler,
)

from study_tutor.quizzer import QuestionSet, validate_questions  # noqa: E402

_MANAGED_LOGGERS = ("study_tutor.quizzer", "study_tutor.summarize")


@pytest.fixture(autouse=True)
def tutor_home(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Path]:
    """Point the workspace at a per-test directory and clear overrides."""

    home = tmp_path / "workspace"
    monkeypatch.setenv("STUDY_TUTOR_DATA_HOME", str(home))
    for name in (
        "STUDY_TUTOR_CONFIG",
        "STUDY_TUTOR_MODEL",
        "STUDY_TUTOR_LOG_LEVEL",
        "OPENROUTER_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield home
    for name in _MANAGED_LOGGERS:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


@pytest.fixture
def fake_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def question_set() -> QuestionSet:
    """MCQ, fill-in-the-blank, and true/false questions in that order."""

    return validate_questions(SAMPLE_RECORDS, 10)
