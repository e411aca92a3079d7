"""Study material discovery and loading."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Set

__all__ = [
    "parse_extensions",
    "iter_text_files",
    "read_text_file",
    "read_study_content",
]


def parse_extensions(
    values: Optional[Sequence[str]],
    *,
    default: Optional[Iterable[str]] = None,
) -> Set[str]:
    """Normalize extensions to lowercase without leading dots."""
    fallback = set(default or {"txt", "md", "markdown"})
    if not values:
        return fallback
    normalized = {
        item.strip().lower().lstrip(".")
        for item in values
        if isinstance(item, str) and item.strip()
    }
    normalized.discard("")
    return normalized or fallback


def iter_text_files(
    paths: Sequence[Path],
    extensions: Set[str],
) -> Iterator[Path]:
    """Yield files from ``paths`` in input order; directories sorted by name.

    Explicit file paths are always yielded; the extension filter applies to
    files discovered inside directories.
    """
    for raw in paths:
        path = Path(raw)
        if path.is_file():
            yield path
            continue
        if not path.exists():
            raise FileNotFoundError(f"Input not found: {path}")
        children = sorted(
            (child for child in path.rglob("*") if child.is_file()),
            key=lambda p: p.name.lower(),
        )
        for child in children:
            if child.suffix.lower().lstrip(".") in extensions:
                yield child


def read_text_file(path: Path) -> str:
    """Read a text file as UTF-8 with replacement for decode errors."""
    with Path(path).open("r", encoding="utf-8", errors="replace") as fh:
        return fh.read()


def read_study_content(
    paths: Sequence[Path],
    extensions: Set[str],
) -> str:
    """Concatenate the text of every discovered file, blank-line separated."""
    parts: List[str] = []
    for path in iter_text_files(paths, extensions):
        text = read_text_file(path).strip()
        if text:
            parts.append(text)
    return "\n\n".join(parts)
