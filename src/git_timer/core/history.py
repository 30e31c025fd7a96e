"""Session totals recovered from commit history."""

import logging
from typing import Dict, Iterable

from git_timer.core.errors import MalformedHistoryEntry
from git_timer.core.message import parse_message
from git_timer.models.report import HistoryReport

logger = logging.getLogger(__name__)


def historical_session_totals(subjects: Iterable[str]) -> Dict[str, int]:
    """Map each session id found in ``subjects`` to its largest session total.

    Every timed commit carries the cumulative total of its session, so the
    largest value is the session's total. Traversal order of history is not
    relied on. Subjects that are not timed messages are skipped.
    """
    totals: Dict[str, int] = {}
    for subject in subjects:
        try:
            parsed = parse_message(subject)
        except MalformedHistoryEntry as e:
            logger.debug("Skipping commit: %s", e)
            continue
        if parsed.session_seconds > totals.get(parsed.session_id, -1):
            totals[parsed.session_id] = parsed.session_seconds
    return totals


def collect_history(repo) -> HistoryReport:
    """Build the cross-session report for a ``GitRepository``.

    The grand total is the sum of per-session maxima: sessions are
    independent of each other (for example on different branches) while
    commits inside one session are cumulative.
    """
    totals = historical_session_totals(repo.commit_subjects())
    return HistoryReport(
        session_totals=totals,
        total_seconds=sum(totals.values()),
        branches=repo.history_branches(),
    )
