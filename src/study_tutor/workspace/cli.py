"""CLI entry points for workspace and config management."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Mapping, Sequence

from study_tutor import config as config_mod
from study_tutor.core import workspace as workspace_mod


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="study-tutor init",
        description=(
            "Bootstrap the study-tutor workspace and ensure required "
            "subdirectories exist."
        ),
    )
    parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Override the workspace root (defaults to STUDY_TUTOR_DATA_HOME "
            "or ~/.study-tutor-data)."
        ),
    )
    parser.add_argument(
        "--with-config",
        action="store_true",
        help="Also write a starter tutor.toml into the config directory.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output on success.",
    )
    return parser


def _build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="study-tutor config",
        description="Manage the study-tutor configuration file.",
    )
    sub = parser.add_subparsers(dest="action", required=True)
    init = sub.add_parser("init", help="Write the default tutor.toml.")
    init.add_argument(
        "--path",
        type=Path,
        help="Destination file (defaults to <workspace>/config/tutor.toml).",
    )
    init.add_argument(
        "--workspace", type=Path, help="Workspace root override."
    )
    init.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing file.",
    )
    sub.add_parser("path", help="Print the config file path in use.")
    return parser


def _format_created(created: Mapping[str, bool], key: str) -> str:
    return "created" if created.get(key, False) else "exists"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.path)
    except workspace_mod.WorkspaceError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1

    config_line = None
    if args.with_config:
        target = layout.path_for("config") / config_mod.CONFIG_FILENAME
        if target.exists():
            config_line = f"Config: {target} (exists)"
        else:
            config_mod.write_default_config(target)
            config_line = f"Config: {target} (created)"

    if args.quiet:
        return 0

    created = layout.created
    home_status = _format_created(created, "home")
    lines = [f"Workspace ready at {layout.home} ({home_status})"]

    if layout.directories:
        lines.append("Subdirectories:")
        width = max(len(name) for name in layout.directories)
        for name, directory in layout.items():
            status = _format_created(created, name)
            lines.append(f"  {name.ljust(width)}  {directory} ({status})")
    if config_line:
        lines.append(config_line)

    sys.stdout.write("\n".join(lines) + "\n")
    return 0


def config_main(argv: Sequence[str] | None = None) -> int:
    parser = _build_config_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.action == "path":
        try:
            loaded = config_mod.load_config()
        except config_mod.TutorConfigError as exc:
            sys.stderr.write(f"Error: {exc}\n")
            return 1
        if loaded.config_path is None:
            default = (
                loaded.layout.path_for("config") / config_mod.CONFIG_FILENAME
            )
            sys.stdout.write(f"{default} (not created; using defaults)\n")
        else:
            sys.stdout.write(f"{loaded.config_path}\n")
        return 0

    target = args.path
    if target is None:
        try:
            layout = workspace_mod.ensure_workspace(path=args.workspace)
        except workspace_mod.WorkspaceError as exc:
            sys.stderr.write(f"Error: {exc}\n")
            return 1
        target = layout.path_for("config") / config_mod.CONFIG_FILENAME

    try:
        written = config_mod.write_default_config(
            target.expanduser(), overwrite=args.force
        )
    except config_mod.TutorConfigError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    sys.stdout.write(f"Wrote config template -> {written}\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
