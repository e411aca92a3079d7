"""Configuration loader for study-tutor commands."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

from study_tutor.core import workspace as workspace_mod
from study_tutor.quizzer.distribution import clamp_count, parse_types
from study_tutor.quizzer.errors import InvalidRequest
from study_tutor.quizzer.generator import DIFFICULTY_DESCRIPTIONS
from study_tutor.quizzer.models import QuestionType

CONFIG_FILENAME = "tutor.toml"
CONFIG_ENV = "STUDY_TUTOR_CONFIG"
ENV_PREFIX = "STUDY_TUTOR_"
ENV_OVERRIDES = {
    "MODEL": ("ai", "model"),
    "BASE_URL": ("ai", "base_url"),
    "LOG_LEVEL": ("logging", "level"),
}


class TutorConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class AIConfig:
    model: str
    temperature: float
    top_p: Optional[float]
    base_url: Optional[str]
    api_key_env: str


@dataclass(frozen=True)
class QuizDefaults:
    count: int
    difficulty: str
    types: tuple[QuestionType, ...]


@dataclass(frozen=True)
class QuickfireDefaults:
    count: int
    time_limit: int


@dataclass(frozen=True)
class TutorConfig:
    ai: AIConfig
    quiz: QuizDefaults
    quickfire: QuickfireDefaults
    log_level: str


@dataclass(frozen=True)
class LoadResult:
    config: TutorConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def default_template() -> str:
    """Return the packaged ``tutor.toml`` text."""
    return (
        resources.files("study_tutor")
        .joinpath(CONFIG_FILENAME)
        .read_text(encoding="utf-8")
    )


def write_default_config(path: Path, *, overwrite: bool = False) -> Path:
    """Write the packaged template to ``path`` with owner-only permissions."""
    if path.exists() and not overwrite:
        raise TutorConfigError(f"Config already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(default_template(), encoding="utf-8")
    try:
        path.chmod(0o600)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path


def load_config(
    *,
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
    model: Optional[str] = None,
    log_level: Optional[str] = None,
) -> LoadResult:
    """Resolve configuration with precedence CLI > env > TOML > defaults.

    A missing default config file is fine; a missing file that was asked
    for explicitly (flag or ``STUDY_TUTOR_CONFIG``) is an error.
    """
    env_map = os.environ if env is None else env
    try:
        layout = workspace_mod.ensure_workspace(env=env_map, path=workspace_path)
    except workspace_mod.WorkspaceError as exc:
        raise TutorConfigError(str(exc)) from exc

    explicit = config_path or _env_path(env_map)
    target = (
        explicit.expanduser()
        if explicit is not None
        else layout.path_for("config") / CONFIG_FILENAME
    )

    table = _default_table()
    loaded: Optional[Path] = None
    if target.exists():
        _overlay_file(table, _read_toml(target))
        loaded = target
    elif explicit is not None:
        raise TutorConfigError(f"Config file not found: {target}")

    _overlay_strings(table, _env_overrides(env_map))
    _overlay_strings(
        table, {("ai", "model"): model, ("logging", "level"): log_level}
    )

    return LoadResult(
        config=_build_config(table), layout=layout, config_path=loaded
    )


def _read_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise TutorConfigError(f"Failed to parse {path}: {exc}") from exc
    except OSError as exc:
        raise TutorConfigError(f"Could not read {path}: {exc}") from exc


def _overlay_file(
    table: MutableMapping[str, MutableMapping[str, Any]],
    document: Mapping[str, Any],
) -> None:
    """Copy ``[section] key = value`` pairs from a tutor.toml onto ``table``.

    Every section and key must already exist in the defaults, so a typo in
    the file is reported instead of silently ignored.
    """
    for section, values in document.items():
        if section not in table:
            raise TutorConfigError(f"Unknown configuration key '{section}'.")
        if not isinstance(values, Mapping):
            raise TutorConfigError(
                f"Expected table for '{section}', "
                f"found {type(values).__name__}."
            )
        defaults = table[section]
        for key, value in values.items():
            if key not in defaults:
                raise TutorConfigError(
                    f"Unknown configuration key '{section}.{key}'."
                )
            defaults[key] = value


def _overlay_strings(
    table: MutableMapping[str, MutableMapping[str, Any]],
    overrides: Mapping[tuple[str, str], Optional[str]],
) -> None:
    for (section, key), value in overrides.items():
        if value is not None:
            table[section][key] = value


def _env_overrides(
    env_map: Mapping[str, str],
) -> dict[tuple[str, str], Optional[str]]:
    return {
        target: _env_string(env_map, suffix)
        for suffix, target in ENV_OVERRIDES.items()
    }


def _default_table() -> MutableMapping[str, MutableMapping[str, Any]]:
    return {
        "ai": {
            "model": "google/gemma-2-9b-it",
            "temperature": 0.7,
            "top_p": 0.9,
            "base_url": "https://openrouter.ai/api/v1",
            "api_key_env": "OPENROUTER_API_KEY",
        },
        "quiz": {
            "count": 10,
            "difficulty": "medium",
            "types": ["mcq", "fillblank", "truefalse"],
        },
        "quickfire": {"count": 5, "time_limit": 60},
        "logging": {"level": "INFO"},
    }


def _build_config(
    table: Mapping[str, Mapping[str, Any]],
) -> TutorConfig:
    ai = table["ai"]
    quiz = table["quiz"]
    quickfire = table["quickfire"]

    model = _require_str(ai["model"], "ai.model")
    api_key_env = _require_str(ai["api_key_env"], "ai.api_key_env")
    base_url = ai["base_url"]
    if base_url is not None and not isinstance(base_url, str):
        raise TutorConfigError("ai.base_url must be a string.")

    difficulty = _require_str(quiz["difficulty"], "quiz.difficulty").lower()
    if difficulty not in DIFFICULTY_DESCRIPTIONS:
        raise TutorConfigError(
            f"quiz.difficulty must be one of: "
            f"{', '.join(DIFFICULTY_DESCRIPTIONS)}."
        )
    try:
        types = parse_types(quiz["types"])
        count = clamp_count(quiz["count"])
        quickfire_count = clamp_count(quickfire["count"])
    except InvalidRequest as exc:
        raise TutorConfigError(str(exc)) from exc

    time_limit = quickfire["time_limit"]
    if isinstance(time_limit, bool) or not isinstance(time_limit, int):
        raise TutorConfigError("quickfire.time_limit must be an integer.")
    if time_limit < 1:
        raise TutorConfigError("quickfire.time_limit must be at least 1.")

    return TutorConfig(
        ai=AIConfig(
            model=model,
            temperature=_require_number(ai["temperature"], "ai.temperature"),
            top_p=(
                None
                if ai["top_p"] is None
                else _require_number(ai["top_p"], "ai.top_p")
            ),
            base_url=base_url or None,
            api_key_env=api_key_env,
        ),
        quiz=QuizDefaults(count=count, difficulty=difficulty, types=types),
        quickfire=QuickfireDefaults(
            count=quickfire_count,
            time_limit=time_limit,
        ),
        log_level=_require_str(
            table["logging"]["level"], "logging.level"
        ).upper(),
    )


def _require_str(value: object, key: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise TutorConfigError(f"{key} must be a non-empty string.")
    return value.strip()


def _require_number(value: object, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TutorConfigError(f"{key} must be a number.")
    return float(value)


def _env_path(env_map: Mapping[str, str]) -> Optional[Path]:
    raw = (env_map.get(CONFIG_ENV) or "").strip()
    return Path(raw) if raw else None


def _env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    return raw.strip() or None
