"""Thin wrapper over the git commands Git Timer relies on."""

import logging
from pathlib import Path
from typing import List, Optional

import git
from git import Repo

from git_timer.core.errors import ExternalCommandFailure, NotARepository
from git_timer.core.message import session_tag

logger = logging.getLogger(__name__)


class GitRepository:
    """The user's git repository, driven through GitPython."""

    def __init__(self, path: Path, remote: str = "origin"):
        self.path = Path(path)
        self.remote = remote
        self._repo: Optional[Repo] = None

    @property
    def repo(self) -> Repo:
        """Get the git repository, opening it on first use."""
        if self._repo is None:
            try:
                self._repo = Repo(self.path, search_parent_directories=True)
            except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
                raise NotARepository(f"Not a git repository: {self.path}") from e
        return self._repo

    @property
    def root(self) -> Path:
        return Path(self.repo.working_tree_dir)

    def run(self, *args: str) -> str:
        """Run a git command and return its stdout.

        Raises:
            ExternalCommandFailure: git exited with a non-zero status
        """
        command = ["git", *args]
        logger.debug("Running %s", " ".join(command))
        try:
            return self.repo.git.execute(command)
        except git.exc.GitCommandError as e:
            stderr = e.stderr or e.stdout or ""
            raise ExternalCommandFailure(command, e.status, _clean_output(stderr)) from e

    def has_commits(self) -> bool:
        return self.repo.head.is_valid()

    def current_branch(self) -> str:
        """Name of the checked out branch (``HEAD`` when detached)."""
        try:
            return self.run("symbolic-ref", "--short", "HEAD")
        except ExternalCommandFailure:
            return self.run("rev-parse", "--abbrev-ref", "HEAD")

    def branch_exists(self, name: str) -> bool:
        try:
            self.run("rev-parse", "--verify", "--quiet", name)
        except ExternalCommandFailure:
            return False
        return True

    def has_upstream(self) -> bool:
        """Check if the current branch tracks a remote branch."""
        try:
            self.run("rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}")
        except ExternalCommandFailure:
            return False
        return True

    def stage_all(self) -> None:
        self.run("add", "-A")

    def commit(self, message: str) -> str:
        self.run("commit", "-m", message)
        return self.repo.head.commit.hexsha

    def merge(self, branch: str, message: str) -> str:
        self.run("merge", branch, "-m", message)
        return self.repo.head.commit.hexsha

    def push(self) -> str:
        """Push the current branch, setting its upstream if it has none.

        Returns:
            The branch that was pushed
        """
        branch = self.current_branch()
        if self.has_upstream():
            logger.info("Pushing %s to its upstream", branch)
            self.run("push")
        else:
            logger.info("No upstream for %s, pushing to %s", branch, self.remote)
            self.run("push", "--set-upstream", self.remote, branch)
        return branch

    def commit_subjects(self) -> List[str]:
        """Subjects of all commits reachable from HEAD, newest first."""
        if not self.has_commits():
            return []
        out = self.run("log", "--pretty=format:%s")
        return [line for line in out.splitlines() if line.strip()]

    def mentions_session(self, session_id: str) -> bool:
        """Check if any commit message already carries the session tag."""
        if not self.has_commits():
            return False
        out = self.run("log", f"--grep={session_tag(session_id)}", "--format=%s")
        return session_id in out

    def branches_containing(self, rev: str) -> List[str]:
        """Local branches that contain ``rev``."""
        out = self.run("branch", "--contains", rev)
        branches = []
        for line in out.splitlines():
            name = line.lstrip("*+ ").strip()
            if not name or name.startswith("("):
                continue
            branches.append(name)
        return branches

    def history_branches(self) -> List[str]:
        """Local branches sharing any commit with the current history.

        A branch contains some commit of HEAD's history exactly when it
        contains one of its root commits, so only the roots are queried.
        """
        if not self.has_commits():
            return []
        roots = self.run("rev-list", "--max-parents=0", "HEAD").split()
        found = set()
        for root in roots:
            found.update(self.branches_containing(root))
        return sorted(found)

    def conflicted_files(self) -> List[Path]:
        """Absolute paths of files left unmerged in the working tree."""
        out = self.run("diff", "--name-only", "--diff-filter=U")
        return [self.root / name for name in out.splitlines() if name.strip()]


def _clean_output(text: str) -> str:
    """Strip the ``stderr: '...'`` decoration GitPython adds to captured output."""
    text = text.strip()
    for prefix in ("stderr:", "stdout:"):
        if text.startswith(prefix):
            text = text[len(prefix) :].strip()
    if len(text) >= 2 and text[0] == text[-1] == "'":
        text = text[1:-1]
    return text.strip()
