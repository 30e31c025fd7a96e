"""Data models for Git Timer."""

from .report import CheckpointResult, HistoryReport, TimeReport
from .session import SessionMessage
from .timer import DurationRecord, TimerState

__all__ = [
    "CheckpointResult",
    "DurationRecord",
    "HistoryReport",
    "SessionMessage",
    "TimeReport",
    "TimerState",
]
