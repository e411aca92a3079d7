from __future__ import annotations

import stat

import pytest

from study_tutor import config as config_mod
from study_tutor.config import TutorConfigError, load_config
from study_tutor.quizzer import QuestionType


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_without_config_file(tmp_path):
    loaded = load_config(env={}, workspace_path=tmp_path / "ws")
    cfg = loaded.config

    assert loaded.config_path is None
    assert loaded.layout.home == (tmp_path / "ws").resolve()
    assert cfg.ai.model == "google/gemma-2-9b-it"
    assert cfg.ai.temperature == 0.7
    assert cfg.ai.top_p == 0.9
    assert cfg.ai.base_url == "https://openrouter.ai/api/v1"
    assert cfg.ai.api_key_env == "OPENROUTER_API_KEY"
    assert cfg.quiz.count == 10
    assert cfg.quiz.difficulty == "medium"
    assert cfg.quiz.types == (
        QuestionType.MCQ,
        QuestionType.FILLBLANK,
        QuestionType.TRUEFALSE,
    )
    assert cfg.quickfire.count == 5
    assert cfg.quickfire.time_limit == 60
    assert cfg.log_level == "INFO"


def test_packaged_template_matches_defaults(tmp_path):
    target = config_mod.write_default_config(tmp_path / "tutor.toml")
    from_template = load_config(
        env={}, config_path=target, workspace_path=tmp_path / "ws"
    ).config
    defaults = load_config(env={}, workspace_path=tmp_path / "ws").config
    assert from_template == defaults


def test_workspace_config_file_is_picked_up(tmp_path):
    home = tmp_path / "ws"
    _write(
        home / "config" / "tutor.toml",
        '[quiz]\ncount = 7\ntypes = ["tf", "fillblank"]\n'
        '[quickfire]\ntime_limit = 30\n',
    )
    loaded = load_config(env={}, workspace_path=home)

    assert loaded.config_path == home.resolve() / "config" / "tutor.toml"
    assert loaded.config.quiz.count == 7
    assert loaded.config.quiz.types == (QuestionType.FILLBLANK,)
    assert loaded.config.quickfire.time_limit == 30


def test_precedence_cli_over_env_over_file(tmp_path):
    path = _write(
        tmp_path / "custom.toml",
        '[ai]\nmodel = "file/model"\n[logging]\nlevel = "warning"\n',
    )
    env = {
        "STUDY_TUTOR_CONFIG": str(path),
        "STUDY_TUTOR_MODEL": "env/model",
        "STUDY_TUTOR_DATA_HOME": str(tmp_path / "ws"),
    }

    from_file_env = load_config(env=env)
    assert from_file_env.config_path == path
    assert from_file_env.config.ai.model == "env/model"
    assert from_file_env.config.log_level == "WARNING"

    from_cli = load_config(env=env, model="cli/model", log_level="debug")
    assert from_cli.config.ai.model == "cli/model"
    assert from_cli.config.log_level == "DEBUG"


def test_explicit_missing_config_is_an_error(tmp_path):
    with pytest.raises(TutorConfigError, match="not found"):
        load_config(
            env={},
            workspace_path=tmp_path / "ws",
            config_path=tmp_path / "nope.toml",
        )


@pytest.mark.parametrize(
    "body, message",
    [
        ("[ai]\nmodle = 'x'\n", "Unknown configuration key 'ai.modle'"),
        ("[tutor]\nmodel = 'x'\n", "Unknown configuration key 'tutor'"),
        ("ai = 1\n", "Expected table for 'ai', found int"),
        ("[quiz]\ndifficulty = 'brutal'\n", "quiz.difficulty"),
        ("[quiz]\ntypes = ['essay']\n", "No supported question types"),
        ("[quiz]\ncount = 0\n", "at least 1"),
        ("[quickfire]\ntime_limit = 0\n", "quickfire.time_limit"),
        ("[quickfire]\ntime_limit = 1.5\n", "quickfire.time_limit"),
        ("[ai]\ntemperature = 'hot'\n", "ai.temperature"),
        ("[ai]\nmodel = ''\n", "ai.model"),
        ("[ai\n", "Failed to parse"),
    ],
)
def test_invalid_config_values(tmp_path, body, message):
    path = _write(tmp_path / "tutor.toml", body)
    with pytest.raises(TutorConfigError, match=message):
        load_config(env={}, config_path=path, workspace_path=tmp_path / "ws")


def test_quiz_count_is_capped(tmp_path):
    path = _write(tmp_path / "tutor.toml", "[quiz]\ncount = 80\n")
    loaded = load_config(env={}, config_path=path, workspace_path=tmp_path)
    assert loaded.config.quiz.count == 50


def test_write_default_config_refuses_overwrite(tmp_path):
    target = config_mod.write_default_config(tmp_path / "tutor.toml")
    with pytest.raises(TutorConfigError, match="already exists"):
        config_mod.write_default_config(target)
    config_mod.write_default_config(target, overwrite=True)
    assert "[quickfire]" in target.read_text(encoding="utf-8")


def test_write_default_config_is_owner_only(tmp_path):
    target = config_mod.write_default_config(tmp_path / "nested" / "tutor.toml")
    assert stat.S_IMODE(target.stat().st_mode) == 0o600
    loaded = load_config(env={}, config_path=target, workspace_path=tmp_path)
    assert loaded.config_path == target


def test_env_overrides_base_url_and_blank_values_are_ignored(tmp_path):
    env = {
        "STUDY_TUTOR_BASE_URL": "http://localhost:8080/v1",
        "STUDY_TUTOR_MODEL": "   ",
    }
    loaded = load_config(env=env, workspace_path=tmp_path / "ws")
    assert loaded.config.ai.base_url == "http://localhost:8080/v1"
    assert loaded.config.ai.model == "google/gemma-2-9b-it"
