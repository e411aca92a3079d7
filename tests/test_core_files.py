from __future__ import annotations

import pytest

from study_tutor.core import (
    iter_text_files,
    parse_extensions,
    read_study_content,
    read_text_file,
)


def test_parse_extensions_default_uses_custom_fallback():
    assert parse_extensions(None, default={"md"}) == {"md"}
    assert parse_extensions([]) == {"txt", "md", "markdown"}


def test_parse_extensions_strips_dots_and_lowercases():
    assert parse_extensions([".TXT", "Md"]) == {"txt", "md"}


def test_parse_extensions_ignores_non_strings_and_returns_fallback():
    result = parse_extensions([" ", 123, None], default={"rst"})  # type: ignore[list-item]
    assert result == {"rst"}


def test_iter_text_files_filters_directories_but_not_explicit_files(tmp_path):
    notes = tmp_path / "notes"
    (notes / "deep").mkdir(parents=True)
    (notes / "b.md").write_text("b", encoding="utf-8")
    (notes / "deep" / "A.txt").write_text("a", encoding="utf-8")
    (notes / "skip.pdf").write_bytes(b"%PDF")
    explicit = tmp_path / "extra.rst"
    explicit.write_text("rst", encoding="utf-8")

    found = list(iter_text_files([explicit, notes], {"txt", "md"}))
    assert [p.name for p in found] == ["extra.rst", "A.txt", "b.md"]


def test_iter_text_files_errors_on_missing_path(tmp_path):
    with pytest.raises(FileNotFoundError):
        list(iter_text_files([tmp_path / "missing"], {"txt"}))


def test_read_text_file_replaces_bad_bytes(tmp_path):
    path = tmp_path / "bad.txt"
    path.write_bytes(b"caf\xe9")
    assert read_text_file(path) == "caf�"


def test_read_study_content_joins_non_empty_files(tmp_path):
    (tmp_path / "1.txt").write_text("  first  \n", encoding="utf-8")
    (tmp_path / "2.txt").write_text("   ", encoding="utf-8")
    (tmp_path / "3.md").write_text("third", encoding="utf-8")

    assert read_study_content([tmp_path], {"txt", "md"}) == "first\n\nthird"
