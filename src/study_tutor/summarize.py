"""Study summaries of pasted or file-based content."""

from __future__ import annotations

import argparse
import re
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from study_tutor.config import TutorConfigError, load_config
from study_tutor.core import (
    configure_logger,
    load_client,
    parse_extensions,
    read_study_content,
)
from study_tutor.core.ai import ChatCompletionError, chat_completion_content

MAX_CONTENT_CHARS = 2500
SUMMARY_MAX_TOKENS = 500

LENGTHS = {
    "short": "150 words",
    "medium": "500 words",
    "long": "800 words",
}

FORMATS = {
    "paragraph": "Write as flowing paragraphs.",
    "points": "Write as bullet points with key information.",
    "headings": "Organize with headings and subheadings.",
    "mixed": (
        "Use a mix of paragraphs, headings, and bullet points for best "
        "clarity."
    ),
}

_PREAMBLE_RE = re.compile(
    r"^(Here's|Here is|This is|The following is)\s+(a\s+)?"
    r"(summary|text|content)[^:]*:\s*",
    re.IGNORECASE,
)
_LABEL_RE = re.compile(r"^Summary:\s*", re.IGNORECASE)


def build_summary_prompt(
    content: str, *, length: str = "medium", style: str = "paragraph"
) -> str:
    if length not in LENGTHS:
        raise ValueError(
            f"Unknown summary length '{length}'. "
            f"Expected one of: {', '.join(LENGTHS)}"
        )
    if style not in FORMATS:
        raise ValueError(
            f"Unknown summary format '{style}'. "
            f"Expected one of: {', '.join(FORMATS)}"
        )
    text = content
    if len(text) > MAX_CONTENT_CHARS:
        text = text[:MAX_CONTENT_CHARS] + "..."
    return (
        f"Summarize this text in {LENGTHS[length]} or less. "
        f"{FORMATS[style]} Use simple, clear language suitable for "
        f"students:\n\n{text}\n\n"
        "Provide ONLY the summary, no preamble or extra text."
    )


def clean_summary(raw: str) -> str:
    """Drop chatty lead-ins such as "Here is a summary of the text:"."""
    text = _PREAMBLE_RE.sub("", raw.strip())
    return _LABEL_RE.sub("", text).strip()


def summarize(
    content: str,
    *,
    client: Any,
    model: str,
    length: str = "medium",
    style: str = "paragraph",
    temperature: float = 0.7,
    top_p: float | None = 0.9,
) -> str:
    """Ask the model for a summary and return the cleaned text."""
    if not content or not content.strip():
        raise ValueError("No content provided")
    prompt = build_summary_prompt(content.strip(), length=length, style=style)
    raw = chat_completion_content(
        client,
        model=model,
        prompt=prompt,
        max_tokens=SUMMARY_MAX_TOKENS,
        temperature=temperature,
        top_p=top_p,
    )
    return clean_summary(raw)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="study-tutor summarize",
        description="Summarize study material with an AI model",
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
        "--length", choices=list(LENGTHS), default="medium"
    )
    parser.add_argument(
        "--format", dest="style", choices=list(FORMATS), default="paragraph"
    )
    parser.add_argument(
        "--output", type=Path, help="Write the summary here instead of stdout"
    )
    parser.add_argument("--model", help="Chat model override")
    parser.add_argument("--config", type=Path, help="Path to tutor.toml")
    parser.add_argument("--workspace", type=Path, help="Workspace root")
    parser.add_argument("--log-level", help="File log level")
    parser.add_argument(
        "--verbose", action="store_true", help="Echo logs to stderr"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None, *, client: Any = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

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
    logger, _ = configure_logger(
        "study_tutor.summarize",
        log_dir=loaded.layout.path_for("logs"),
        level=cfg.log_level,
        verbose=args.verbose,
    )

    if args.text:
        content = args.text
    elif args.INPUTS:
        extensions = parse_extensions(args.extensions)
        paths = [p.expanduser().resolve() for p in args.INPUTS]
        try:
            content = read_study_content(paths, extensions)
        except FileNotFoundError as exc:
            sys.stderr.write(f"Error: {exc}\n")
            return 2
    else:
        sys.stderr.write("Error: Provide study material paths or --text\n")
        return 2

    if client is None:
        try:
            client = load_client(
                api_key_env=cfg.ai.api_key_env, base_url=cfg.ai.base_url
            )
        except RuntimeError as exc:
            sys.stderr.write(f"Error: {exc}\n")
            return 2

    try:
        summary = summarize(
            content,
            client=client,
            model=cfg.ai.model,
            length=args.length,
            style=args.style,
            temperature=cfg.ai.temperature,
            top_p=cfg.ai.top_p,
        )
    except ValueError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2
    except ChatCompletionError as exc:
        logger.error("Summary failed", extra={"error": str(exc)})
        sys.stderr.write(f"Error: {exc}\n")
        return 1

    logger.info(
        "Summary generated",
        extra={"length": args.length, "format": args.style, "chars": len(summary)},
    )
    if args.output:
        out = args.output.expanduser().resolve()
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(summary + "\n", encoding="utf-8")
        print(f"Wrote summary -> {out}")
    else:
        print(summary)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
