"""Timed commit message encoding.

Version 1 of the format, used both when writing commit and merge messages
and when reading them back from history::

    <message> (<HH:MM:SS>), Session (<HH:MM:SS>) [SESSID: <12 hex chars>]

The first duration is the time since the previous checkpoint, the second the
cumulative total of the session at the time of the commit. Commit history is
the only place session totals survive ``git-timer stop``, so decoding is
best-effort: subjects that were edited by hand, amended or squashed may
decode to the wrong value or not at all.
"""

import re

from git_timer.core.errors import MalformedHistoryEntry
from git_timer.models.session import SessionMessage

MESSAGE_FORMAT_VERSION = 1
SESSION_ID_LENGTH = 12

_DURATION = r"\d{2,}:[0-5]\d:[0-5]\d"
DURATION_RE = re.compile(rf"^({_DURATION})$")
SESSION_ID_RE = re.compile(rf"^[a-f0-9]{{{SESSION_ID_LENGTH}}}$")
SESSION_TAG_RE =re.compile(rf"\[SESSID: ([a-f0-9]{{{SESSION_ID_LENGTH}}})\]")
PAREN_DURATION_RE = re.compile(rf"\(({_DURATION})\)")
MESSAGE_RE = re.compile(
    rf"^(?P<text>.*) \((?P<elapsed>{_DURATION})\), "
    rf"Session \((?P<session>{_DURATION})\) "
    rf"\[SESSID: (?P<session_id>[a-f0-9]{{{SESSION_ID_LENGTH}}})\]$"
)


def format_duration(seconds: int) -> str:
    """Format seconds as ``HH:MM:SS``. Negative values format as zero."""
    seconds = max(0, int(seconds))
    return f"{seconds // 3600:02d}:{(seconds // 60) % 60:02d}:{seconds % 60:02d}"


def parse_duration(text: str) -> int:
    """Parse ``HH:MM:SS`` back into seconds."""
    match = DURATION_RE.match(text.strip())
    if not match:
        raise ValueError(f"Not a HH:MM:SS duration: {text!r}")
    hours, minutes, seconds = (int(part) for part in match.group(1).split(":"))
    return hours * 3600 + minutes * 60 + seconds


def session_tag(session_id: str) -> str:
    return f"SESSID: {session_id}"


def build_message(text: str, elapsed: int, session_total: int, session_id: str) -> str:
    """Build a timed commit message.

    Raises:
        ValueError: ``session_id`` is not 12 lowercase hex characters, so
            the message could never be read back from history
    """
    if not SESSION_ID_RE.match(session_id or ""):
        raise ValueError(f"Invalid session id: {session_id!r}")
    return (
        f"{text} ({format_duration(elapsed)}), "
        f"Session ({format_duration(session_total)}) [{session_tag(session_id)}]"
    )


def parse_message(subject: str) -> SessionMessage:
    """Decode a commit subject written by ``build_message``.

    Subjects that carry a session tag but not the ``Session (...)`` field
    fall back to the first parenthesized duration for both values.

    Raises:
        MalformedHistoryEntry: no session tag or no duration in the subject.
    """
    subject = subject.strip()
    match = MESSAGE_RE.match(subject)
    if match:
        return SessionMessage(
            text=match.group("text"),
            elapsed_seconds=parse_duration(match.group("elapsed")),
            session_seconds=parse_duration(match.group("session")),
            session_id=match.group("session_id"),
        )

    tag = SESSION_TAG_RE.search(subject)
    if not tag:
        raise MalformedHistoryEntry(f"No session tag in {subject!r}")
    duration = PAREN_DURATION_RE.search(subject)
    if not duration:
        raise MalformedHistoryEntry(f"No duration in {subject!r}")

    seconds = parse_duration(duration.group(1))
    return SessionMessage(
        text=subject[: duration.start()].rstrip(),
        elapsed_seconds=seconds,
        session_seconds=seconds,
        session_id=tag.group(1),
    )
