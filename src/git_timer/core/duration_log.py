"""Append-only log of checkpoint durations."""

import logging
from pathlib import Path
from typing import Iterator, Optional

from git_timer.core.errors import StateError
from git_timer.models.timer import DurationRecord

logger = logging.getLogger(__name__)


class DurationLog:
    """Flat file with one ``<unix_ts> <duration_seconds> <session_id>`` line per checkpoint."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def append(self, record: DurationRecord) -> None:
        """Append a record.

        Raises:
            StateError: the log could not be written; nothing is retried
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(record.to_line() + "\n")
        except OSError as e:
            raise StateError(self.path, e.strerror or str(e)) from e

    def records(self) -> Iterator[DurationRecord]:
        """Yield records in the order they were appended."""
        if not self.path.exists():
            return
        try:
            f = open(self.path, encoding="utf-8")
        except OSError as e:
            raise StateError(self.path, e.strerror or str(e)) from e
        with f:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    yield DurationRecord.from_line(line)
                except ValueError as e:
                    logger.warning("Skipping line %d of %s: %s", line_no, self.path, e)

    def session_total(self, session_id: str) -> int:
        """Sum of all durations logged for a session."""
        return sum(
            r.duration_seconds for r in self.records() if r.session_id == session_id
        )

    def last_timestamp(self, session_id: str) -> Optional[int]:
        """Timestamp of the most recent record of a session."""
        last = None
        for record in self.records():
            if record.session_id == session_id:
                last = record.timestamp
        return last
