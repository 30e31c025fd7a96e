"""Parsed form of a timed commit message."""

from pydantic import BaseModel


class SessionMessage(BaseModel):
    """A commit subject decoded from the timed message format."""

    text: str
    elapsed_seconds: int
    session_seconds: int
    session_id: str
