"""Shared testing fixtures and doubles for the study_tutor test suite."""

from .chat import FakeChatClient, completion  # noqa: F401
from .quiz import SAMPLE_RECORDS, fenced_reply  # noqa: F401
from .scheduler import ManualScheduler, ScheduledCall  # noqa: F401

__all__ = [
    "FakeChatClient",
    "ManualScheduler",
    "SAMPLE_RECORDS",
    "ScheduledCall",
    "completion",
    "fenced_reply",
]
