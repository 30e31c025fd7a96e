"""Errors raised by Git Timer operations."""

from pathlib import Path
from typing import List, Optional, Sequence


class GitTimerError(Exception):
    """Base class for all Git Timer errors."""


class NotStarted(GitTimerError):
    """The timer has no state; ``start`` has not been run."""

    def __init__(self, message: str = "Timer not started. Run: git-timer start"):
        super().__init__(message)


class MissingArgument(GitTimerError):
    """A required argument (such as a merge target branch) was not given."""


class UnknownBranch(MissingArgument):
    """The merge target does not name an existing branch or revision."""


class StateError(GitTimerError):
    """Timer state or the duration log could not be read or written."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        super().__init__(f"{self.path}: {reason}")


class NotARepository(GitTimerError):
    """The working directory is not inside a git repository."""


class ExternalCommandFailure(GitTimerError):
    """A git command exited with a non-zero status."""

    def __init__(self, command: Sequence[str], status: Optional[int], stderr: str = ""):
        self.command = list(command)
        self.status = status
        self.stderr = stderr.strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"'{' '.join(self.command)}' failed with status {status}{detail}")


class ConflictDetected(GitTimerError):
    """A merge stopped with conflicts; the user has to resolve or abort."""

    def __init__(self, files: List[Path], message: str, saved_message: Path):
        self.files = files
        self.message = message
        self.saved_message = saved_message
        super().__init__(f"Merge conflict in {len(files)} file(s)")


class MalformedHistoryEntry(GitTimerError):
    """A commit subject does not follow the timed message format."""
