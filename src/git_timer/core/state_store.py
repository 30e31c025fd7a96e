"""Timer state persisted as small flat files."""

import logging
from pathlib import Path
from typing import Callable, Optional, Tuple

from git_timer.core.clock import SystemClock
from git_timer.core.errors import NotStarted, StateError
from git_timer.core.message import SESSION_ID_RE
from git_timer.models.timer import TimerState

logger = logging.getLogger(__name__)


class TimerStateStore:
    """Start time, last checkpoint and session id of the running timer.

    Each value lives in its own file under ``state_dir`` so that separate
    invocations of the CLI share one timer. There is no locking: two
    invocations racing on the same directory can lose a checkpoint.
    """

    def __init__(self, state_dir: Path, clock=None):
        self.state_dir = Path(state_dir)
        self.start_file = self.state_dir / "git_timer_start"
        self.last_file = self.state_dir / "git_timer_last"
        self.session_file = self.state_dir / "git_timer_session"
        self.merge_message_file = self.state_dir / "git_timer_merge_msg"
        self.clock = clock or SystemClock()

    def exists(self) -> bool:
        """Check if a timer has been started."""
        return self.last_file.exists()

    def session_id(self) -> Optional[str]:
        """Get the persisted session id, if any."""
        if not self.session_file.exists():
            return None
        return self._read(self.session_file) or None

    def start(self, new_session_id: Callable[[], str]) -> TimerState:
        """Start (or restart) the timer.

        An existing session id is kept, so stopping the clock without
        ``stop`` and starting again continues the same session. Start and
        checkpoint timestamps are reset on every call.
        """
        now = self.clock.now()

        session_id = self.session_id()
        if session_id is not None and not SESSION_ID_RE.match(session_id):
            logger.warning("Replacing unreadable session id %r", session_id)
            session_id = None
        if session_id is None:
            session_id = new_session_id()
            self._write(self.session_file, session_id)
            logger.info("New session %s", session_id)
        else:
            logger.info("Continuing session %s", session_id)

        self._write(self.start_file, str(now))
        self._write(self.last_file, str(now))
        return TimerState(start_time=now, last_checkpoint=now, session_id=session_id)

    def load(self) -> TimerState:
        """Read the current state.

        Raises:
            NotStarted: no checkpoint or no session id has been recorded
            StateError: a state file is unreadable or corrupt
        """
        if not self.exists():
            raise NotStarted()
        session_id = self.session_id()
        if session_id is None:
            raise NotStarted(
                f"Timer state in {self.state_dir} has no session id. Run: git-timer start"
            )
        if not SESSION_ID_RE.match(session_id):
            raise StateError(self.session_file, f"not a session id: {session_id!r}")
        last = self._read_int(self.last_file)
        start = self._read_int(self.start_file) if self.start_file.exists() else last
        return TimerState(start_time=start, last_checkpoint=last, session_id=session_id)

    def checkpoint(self) -> Tuple[TimerState, int]:
        """Move the checkpoint to now.

        Returns:
            The updated state and the seconds elapsed since the previous
            checkpoint (never negative)
        """
        state = self.load()
        now = self.clock.now()
        elapsed = max(0, now - state.last_checkpoint)
        self._write(self.last_file, str(now))
        logger.debug("Checkpoint at %s, %ss since previous", now, elapsed)
        return state.model_copy(update={"last_checkpoint": now}), elapsed

    def save_merge_message(self, message: str) -> Path:
        """Keep the message of a conflicted merge for the resolving commit."""
        self._write(self.merge_message_file, message)
        return self.merge_message_file

    def stop(self) -> None:
        """Remove all timer state. Missing files are ignored."""
        for path in (
            self.start_file,
            self.last_file,
            self.session_file,
            self.merge_message_file,
        ):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise StateError(path, e.strerror or str(e)) from e
        logger.info("Timer state cleared in %s", self.state_dir)

    def _write(self, path: Path, value: str) -> None:
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(f"{value}\n", encoding="utf-8")
        except OSError as e:
            raise StateError(path, e.strerror or str(e)) from e

    @staticmethod
    def _read(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise StateError(path, e.strerror or str(e)) from e

    @classmethod
    def _read_int(cls, path: Path) -> int:
        text = cls._read(path)
        try:
            return int(text)
        except ValueError as e:
            raise StateError(path, f"expected a unix timestamp, found {text!r}") from e
