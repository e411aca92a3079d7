"""Command-line entry points for ``study-tutor quiz`` and ``quickfire``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from rich.console import Console

from study_tutor.config import LoadResult, TutorConfigError, load_config
from study_tutor.core import (
    configure_logger,
    load_client,
    parse_extensions,
    read_study_content,
)

from .distribution import DEFAULT_TYPES
from .errors import QuizError
from .export import summary_text, write_report
from .generator import (
    DIFFICULTY_DESCRIPTIONS,
    ChatQuizGenerator,
    generate_quiz,
)
from .session import QuizMode, QuizSession
from .view import InputProvider, run_quiz_session

DEFAULT_EXTENSIONS = {"txt", "md", "markdown"}


def build_arg_parser(
    mode: QuizMode = QuizMode.STANDARD,
) -> argparse.ArgumentParser:
    quickfire = mode is QuizMode.QUICKFIRE
    parser = argparse.ArgumentParser(
        prog="study-tutor quickfire" if quickfire else "study-tutor quiz",
        description=(
            "Answer a short AI-generated quiz against the clock"
            if quickfire
            else "Generate and take an AI-written quiz from study material"
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "INPUTS",
        nargs="*",
        type=Path,
        help="Study material files and/or directories",
    )
    parser.add_argument("--text", help="Study material given inline")
    parser.add_argument(
        "--extensions",
        nargs="+",
        help="File extensions to read from directories (default: txt md)",
    )
    parser.add_argument(
        "--count", type=int, help="Number of questions (config default)"
    )
    if quickfire:
        parser.add_argument(
            "--time-limit",
            type=int,
            help="Seconds on the clock (config default)",
        )
    else:
        parser.add_argument(
            "--difficulty",
            choices=sorted(DIFFICULTY_DESCRIPTIONS),
            help="Question difficulty (config default)",
        )
        parser.add_argument(
            "--types",
            help="Comma-separated question types: mcq,fillblank,truefalse",
        )
    parser.add_argument("--model", help="Chat model override")
    parser.add_argument(
        "--export",
        type=Path,
        help=(
            "Write the graded report (.md, .html, .pdf). Bare file names go "
            "to the workspace exports directory"
        ),
    )
    parser.add_argument("--explain", dest="explain", action="store_true")
    parser.add_argument("--no-explain", dest="explain", action="store_false")
    parser.set_defaults(explain=True)
    parser.add_argument("--config", type=Path, help="Path to tutor.toml")
    parser.add_argument("--workspace", type=Path, help="Workspace root")
    parser.add_argument("--log-level", help="File log level")
    parser.add_argument(
        "--verbose", action="store_true", help="Echo logs to stderr"
    )
    return parser


def quiz_main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
    input_provider: Optional[InputProvider] = None,
    client: Any = None,
) -> int:
    return _run(
        QuizMode.STANDARD,
        argv,
        console=console,
        input_provider=input_provider,
        client=client,
    )


def quickfire_main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
    input_provider: Optional[InputProvider] = None,
    client: Any = None,
) -> int:
    return _run(
        QuizMode.QUICKFIRE,
        argv,
        console=console,
        input_provider=input_provider,
        client=client,
    )


def _run(
    mode: QuizMode,
    argv: Optional[Sequence[str]],
    *,
    console: Optional[Console],
    input_provider: Optional[InputProvider],
    client: Any,
) -> int:
    parser = build_arg_parser(mode)
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.count is not None and args.count < 1:
        parser.error("--count must be at least 1")
    quickfire = mode is QuizMode.QUICKFIRE
    if quickfire and args.time_limit is not None and args.time_limit < 1:
        parser.error("--time-limit must be at least 1 second")
    console = console or Console()
    ask = input_provider or _console_input(console)

    try:
        loaded = load_config(
            config_path=args.config,
            workspace_path=args.workspace,
            model=args.model,
            log_level=args.log_level,
        )
    except TutorConfigError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2
    cfg = loaded.config

    logger, log_path = configure_logger(
        "study_tutor.quizzer",
        log_dir=loaded.layout.path_for("logs"),
        level=cfg.log_level,
        verbose=args.verbose,
    )
    logger.debug("quiz CLI invoked", extra={"mode": mode.value})

    try:
        content = _read_content(args)
    except (FileNotFoundError, ValueError) as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2

    if client is None:
        try:
            client = load_client(
                api_key_env=cfg.ai.api_key_env, base_url=cfg.ai.base_url
            )
        except RuntimeError as exc:
            sys.stderr.write(f"Error: {exc}\n")
            return 2
    generator = ChatQuizGenerator(
        client,
        model=cfg.ai.model,
        temperature=cfg.ai.temperature,
        top_p=cfg.ai.top_p,
    )

    if quickfire:
        count = args.count if args.count is not None else cfg.quickfire.count
        difficulty = "medium"
        types: Any = DEFAULT_TYPES
        time_limit = (
            args.time_limit
            if args.time_limit is not None
            else cfg.quickfire.time_limit
        )
    else:
        count = args.count if args.count is not None else cfg.quiz.count
        difficulty = args.difficulty or cfg.quiz.difficulty
        types = args.types or cfg.quiz.types
        time_limit = cfg.quickfire.time_limit

    with QuizSession(
        mode=mode,
        time_limit=time_limit,
        on_graded=lambda _report: console.print(
            "\n[bold red]Out of time.[/] Press Enter to see your results."
        ),
        logger=logger,
    ) as session:
        with console.status("Generating quiz..."):
            try:
                question_set = generate_quiz(
                    content,
                    generator=generator,
                    count=count,
                    difficulty=difficulty,
                    types=types,
                    logger=logger,
                )
            except QuizError as exc:
                session.fail(exc)
                console.print(f"[red]{session.last_error}[/]")
                console.print(f"[dim]Details logged to {log_path}[/]")
                return 1

        session.load(question_set)
        while True:
            outcome = run_quiz_session(
                session, console, ask, show_explanations=args.explain
            )
            if outcome.report is None:
                return 0
            console.print(summary_text(outcome.report))
            if args.export is not None:
                target = _export_target(args.export, loaded)
                try:
                    write_report(outcome.report, target)
                except (RuntimeError, ValueError, OSError) as exc:
                    console.print(f"[red]Export failed: {exc}[/]")
                    logger.error("Export failed", extra={"error": str(exc)})
                else:
                    console.print(f"Wrote report -> {target}")
            if not _confirm(
                console, ask, "Retry the same questions? \\[y/N]"
            ):
                return 0
            session.retry()


def _read_content(args: argparse.Namespace) -> str:
    if args.text:
        return args.text
    if not args.INPUTS:
        raise ValueError("Provide study material paths or --text")
    extensions = parse_extensions(args.extensions, default=DEFAULT_EXTENSIONS)
    paths = [path.expanduser().resolve() for path in args.INPUTS]
    content = read_study_content(paths, extensions)
    if not content.strip():
        raise ValueError("No study material found in the given inputs")
    return content


def _export_target(raw: Path, loaded: LoadResult) -> Path:
    candidate = raw.expanduser()
    if candidate.parent == Path("."):
        return loaded.layout.path_for("exports") / candidate.name
    return candidate.resolve()


def _confirm(console: Console, ask: InputProvider, prompt: str) -> bool:
    console.print(prompt)
    try:
        reply = ask()
    except (EOFError, KeyboardInterrupt, StopIteration):
        return False
    return (reply or "").strip().lower() in {"y", "yes"}


def _console_input(console: Console) -> Callable[[], str]:
    def _ask() -> str:
        return console.input("> ")

    return _ask


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(quiz_main())
