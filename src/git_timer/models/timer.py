"""Timer state and duration log records."""

from pydantic import BaseModel


class TimerState(BaseModel):
    """State of a running timer between ``start`` and ``stop``."""

    start_time: int
    last_checkpoint: int
    session_id: str


class DurationRecord(BaseModel):
    """One line of the append-only duration log."""

    timestamp: int
    duration_seconds: int
    session_id: str

    model_config = {"frozen": True}

    def to_line(self) -> str:
        """Render as ``<unix_ts> <duration_seconds> <session_id>``."""
        return f"{self.timestamp} {self.duration_seconds} {self.session_id}"

    @classmethod
    def from_line(cls, line: str) -> "DurationRecord":
        """Parse a log line, raising ValueError if it is malformed."""
        parts = line.split()
        if len(parts) != 3:
            raise ValueError(f"Expected 3 fields, got {len(parts)}: {line!r}")
        return cls(
            timestamp=int(parts[0]),
            duration_seconds=int(parts[1]),
            session_id=parts[2],
        )
