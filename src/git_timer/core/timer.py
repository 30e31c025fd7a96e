"""Timed commits and merges."""

import logging
from typing import Callable, Optional

from git_timer.config import TimerSettings
from git_timer.core.clock import SystemClock
from git_timer.core.duration_log import DurationLog
from git_timer.core.errors import (
    ConflictDetected,
    ExternalCommandFailure,
    MissingArgument,
    UnknownBranch,
)
from git_timer.core.git_repository import GitRepository
from git_timer.core.history import collect_history
from git_timer.core.message import build_message
from git_timer.core.session_id import generate_session_id
from git_timer.core.state_store import TimerStateStore
from git_timer.models.report import CheckpointResult, HistoryReport, TimeReport
from git_timer.models.timer import DurationRecord, TimerState

logger = logging.getLogger(__name__)


class GitTimer:
    """Measures time between commits and writes it into commit messages.

    Every commit or merge is a checkpoint: the seconds since the previous
    checkpoint are appended to the duration log under the current session
    id, and both that duration and the session total go into the message.
    """

    def __init__(
        self,
        store: TimerStateStore,
        log: DurationLog,
        repo: GitRepository,
        clock=None,
        settings: Optional[TimerSettings] = None,
        on_message: Optional[Callable[[CheckpointResult], None]] = None,
    ):
        self.store = store
        self.log = log
        self.repo = repo
        self.clock = clock or store.clock
        self.settings = settings or TimerSettings()
        self.on_message = on_message

    @classmethod
    def from_settings(cls, settings: TimerSettings, repo_path, clock=None, on_message=None) -> "GitTimer":
        """Wire a timer from settings, sharing one clock between its parts."""
        clock = clock or SystemClock()
        return cls(
            store=TimerStateStore(settings.state_dir, clock=clock),
            log=DurationLog(settings.duration_log_path),
            repo=GitRepository(repo_path, remote=settings.remote),
            clock=clock,
            settings=settings,
            on_message=on_message,
        )

    def start(self) -> TimerState:
        """Start the timer, creating a session id unless one is persisted."""
        _ = self.repo.root
        return self.store.start(lambda: generate_session_id(self.repo.mentions_session))

    def stop(self) -> None:
        self.store.stop()

    def commit(self, message: Optional[str] = None) -> CheckpointResult:
        """Stage everything, commit with a timed message and push.

        Raises:
            NotStarted: before any side effect if the timer is not running
            ExternalCommandFailure: a git command failed; the duration
                stays logged
        """
        self.store.load()
        text = (message or "").strip() or self.settings.default_message
        result = self._checkpoint(text, branch=self.repo.current_branch())

        self._announce(result)
        self.repo.stage_all()
        self.repo.commit(result.message)
        return self._push(result)

    def merge(self, target_branch: Optional[str]) -> CheckpointResult:
        """Merge ``target_branch`` into the current branch with a timed message.

        Raises:
            MissingArgument: no target branch given
            NotStarted: the timer is not running
            ConflictDetected: the merge stopped on conflicts; the duration
                is logged and nothing is pushed
            UnknownBranch: the target names no branch or revision; nothing
                is logged
            ExternalCommandFailure: any other git failure
        """
        if not target_branch or not target_branch.strip():
            raise MissingArgument("Please specify a branch to merge.")
        target_branch = target_branch.strip()
        self.store.load()
        if not self.repo.branch_exists(target_branch):
            raise UnknownBranch(f"No branch named '{target_branch}' to merge.")

        current = self.repo.current_branch()
        result = self._checkpoint(f"Merge {target_branch} onto {current} Commit", branch=current)
        result = result.model_copy(update={"merge_target": target_branch})

        self._announce(result)
        try:
            self.repo.merge(target_branch, result.message)
        except ExternalCommandFailure as e:
            conflicts = self.repo.conflicted_files()
            if not conflicts:
                raise
            saved = self.store.save_merge_message(result.message)
            logger.warning("Merge of %s stopped on %d conflict(s)", target_branch, len(conflicts))
            raise ConflictDetected(conflicts, result.message, saved) from e
        return self._push(result)

    def status(self) -> TimeReport:
        """Time since the last checkpoint of this session plus history totals."""
        state = self.store.load()
        now = self.clock.now()
        last = self.log.last_timestamp(state.session_id)
        since = now - (last if last is not None else state.start_time)
        return TimeReport(
            since_last_seconds=max(0, since),
            has_commits=last is not None,
            history=self.history(),
        )

    def history(self) -> HistoryReport:
        """Session totals recovered from the repository's commit messages."""
        return collect_history(self.repo)

    def _checkpoint(self, text: str, branch: str) -> CheckpointResult:
        state, elapsed = self.store.checkpoint()
        self.log.append(
            DurationRecord(
                timestamp=state.last_checkpoint,
                duration_seconds=elapsed,
                session_id=state.session_id,
            )
        )
        session_total = self.log.session_total(state.session_id)
        return CheckpointResult(
            message=build_message(text, elapsed, session_total, state.session_id),
            elapsed_seconds=elapsed,
            session_seconds=session_total,
            session_id=state.session_id,
            branch=branch,
        )

    def _push(self, result: CheckpointResult) -> CheckpointResult:
        if not self.settings.push:
            logger.info("Push disabled, leaving %s local", result.branch)
            return result
        branch = self.repo.push()
        return result.model_copy(update={"branch": branch, "pushed": True})

    def _announce(self, result: CheckpointResult) -> None:
        logger.info("Timed message: %s", result.message)
        if self.on_message is not None:
            self.on_message(result)
