"""Core shared helpers for study_tutor commands."""

from __future__ import annotations

from .ai import ChatCompletionError, chat_completion_content, load_client
from .files import (
    iter_text_files,
    parse_extensions,
    read_study_content,
    read_text_file,
)
from .logging import JsonLogFormatter, configure_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "ChatCompletionError",
    "chat_completion_content",
    "load_client",
    "iter_text_files",
    "parse_extensions",
    "read_study_content",
    "read_text_file",
    "JsonLogFormatter",
    "configure_logger",
    "WORKSPACE_ENV",
    "WorkspaceError",
    "WorkspaceLayout",
    "ensure_workspace",
]
