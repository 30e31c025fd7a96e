"""Session identifier generation."""

import hashlib
import logging
import os
from typing import Callable

from git_timer.core.message import SESSION_ID_LENGTH

logger = logging.getLogger(__name__)


def generate_session_id(
    is_taken: Callable[[str], bool],
    random_bytes: Callable[[int], bytes] = os.urandom,
) -> str:
    """Generate a short session id not yet referenced in commit history.

    Args:
        is_taken: Returns True if a commit message already uses the id
        random_bytes: Source of randomness, ``os.urandom`` by default

    Returns:
        First 12 hex characters of the sha256 of 32 random bytes
    """
    while True:
        session_id = hashlib.sha256(random_bytes(32)).hexdigest()[:SESSION_ID_LENGTH]
        if not is_taken(session_id):
            return session_id
        logger.debug("Session id %s already in history, retrying", session_id)
