"""Results returned by timer operations."""

from typing import Dict, List, Optional

from pydantic import BaseModel


class CheckpointResult(BaseModel):
    """Outcome of a timed commit or merge."""

    message: str
    elapsed_seconds: int
    session_seconds: int
    session_id: str
    branch: str
    pushed: bool = False
    merge_target: Optional[str] = None


class HistoryReport(BaseModel):
    """Session totals recovered from commit history."""

    session_totals: Dict[str, int] = {}
    total_seconds: int = 0
    branches: List[str] = []


class TimeReport(BaseModel):
    """Elapsed time for the running session plus history totals."""

    since_last_seconds: int
    has_commits: bool
    history: HistoryReport
