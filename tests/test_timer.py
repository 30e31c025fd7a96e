"""Tests for GitTimer commits, merges and status."""

import tempfile
from pathlib import Path

import pytest
from git import Repo

from git_timer.config import TimerSettings
from git_timer.core.clock import ManualClock
from git_timer.core.errors import (
    ConflictDetected,
    ExternalCommandFailure,
    MissingArgument,
    NotStarted,
    UnknownBranch,
)
from git_timer.core.timer import GitTimer


def _commit_file(repo: Repo, name: str, content: str, message: str) -> str:
    (Path(repo.working_tree_dir) / name).write_text(content)
    repo.index.add([name])
    return repo.index.commit(message).hexsha


@pytest.fixture
def temp_git_project():
    """Create a git project with one commit, a bare origin and a state dir."""
    with tempfile.TemporaryDirectory() as temp_dir:
        root = Path(temp_dir)
        project_path = root / "project"
        origin_path = root / "origin.git"

        Repo.init(origin_path, bare=True)
        main_repo = Repo.init(project_path)
        with main_repo.config_writer() as config:
            config.set_value("user", "name", "Test User")
            config.set_value("user", "email", "test@example.com")
            config.set_value("commit", "gpgsign", "false")

        _commit_file(main_repo, "README.md", "# Test Project\n", "Initial commit")
        main_repo.create_remote("origin", str(origin_path))

        yield project_path, origin_path, root / "state"


@pytest.fixture
def clock():
    return ManualClock(start=1700000000)


@pytest.fixture
def timer(temp_git_project, clock):
    project_path, _, state_dir = temp_git_project
    settings = TimerSettings(state_dir=state_dir)
    return GitTimer.from_settings(settings, project_path, clock=clock)


def test_commit_without_start_has_no_side_effects(timer, temp_git_project):
    """Test that an unstarted timer refuses to commit and touches nothing."""
    project_path, origin_path, _ = temp_git_project
    main_repo = Repo(project_path)
    head = main_repo.head.commit.hexsha
    (project_path / "work.py").write_text("print('hi')\n")

    with pytest.raises(NotStarted):
        timer.commit("Add work")

    assert main_repo.head.commit.hexsha == head
    assert "work.py" in main_repo.untracked_files
    assert not timer.log.path.exists()
    assert Repo(origin_path).heads == []


def test_commit_writes_timed_message_and_pushes(timer, clock, temp_git_project):
    """Test the full commit flow on a branch without upstream."""
    project_path, origin_path, _ = temp_git_project
    main_repo = Repo(project_path)
    session_id = timer.start().session_id

    (project_path / "work.py").write_text("print('hi')\n")
    clock.advance(125)
    result = timer.commit("Add work")

    expected = f"Add work (00:02:05), Session (00:02:05) [SESSID: {session_id}]"
    assert result.message == expected
    assert result.merge_target is None
    assert main_repo.head.commit.message.strip() == expected
    assert "work.py" in main_repo.head.commit.tree
    assert result.pushed
    assert result.branch == main_repo.active_branch.name
    assert main_repo.active_branch.tracking_branch() is not None
    assert Repo(origin_path).heads[result.branch].commit.hexsha == main_repo.head.commit.hexsha


def test_session_total_accumulates(timer, clock, temp_git_project):
    """Test that the session total adds up elapsed times of each commit."""
    project_path, _, _ = temp_git_project
    main_repo = Repo(project_path)
    session_id = timer.start().session_id

    (project_path / "a.txt").write_text("a\n")
    clock.advance(125)
    timer.commit("First")

    (project_path / "b.txt").write_text("b\n")
    clock.advance(3600)
    result = timer.commit()

    assert result.message == f"Commit (01:00:00), Session (01:02:05) [SESSID: {session_id}]"
    assert result.session_seconds == 3725
    assert main_repo.head.commit.message.strip() == result.message


def test_commit_without_push(temp_git_project, clock):
    """Test that pushing can be turned off."""
    project_path, origin_path, state_dir = temp_git_project
    settings = TimerSettings(state_dir=state_dir, push=False)
    timer = GitTimer.from_settings(settings, project_path, clock=clock)
    timer.start()

    (project_path / "a.txt").write_text("a\n")
    result = timer.commit("Local only")

    assert not result.pushed
    assert Repo(origin_path).heads == []


def test_failed_commit_keeps_duration(timer, clock):
    """Test that time is logged even when git has nothing to commit."""
    state = timer.start()
    clock.advance(90)

    with pytest.raises(ExternalCommandFailure):
        timer.commit("Nothing here")

    assert timer.log.session_total(state.session_id) == 90


def test_status_right_after_start(timer, temp_git_project):
    """Test status before any commit of the session."""
    project_path, _, _ = temp_git_project
    timer.start()

    report = timer.status()

    assert report.since_last_seconds == 0
    assert not report.has_commits
    assert report.history.total_seconds == 0
    assert report.history.branches == [Repo(project_path).active_branch.name]


def test_status_requires_start(timer):
    with pytest.raises(NotStarted):
        timer.status()


def test_status_after_commit(timer, clock, temp_git_project):
    """Test status counts from the last commit and reads history."""
    project_path, _, _ = temp_git_project
    session_id = timer.start().session_id
    clock.advance(600)
    (project_path / "a.txt").write_text("a\n")
    timer.commit("Work")
    clock.advance(30)

    report = timer.status()

    assert report.has_commits
    assert report.since_last_seconds == 30
    assert report.history.session_totals == {session_id: 600}
    assert report.history.total_seconds == 600


def test_totals_across_sessions(timer, clock, temp_git_project):
    """Test that separate sessions are added together in history."""
    project_path, _, _ = temp_git_project

    first = timer.start().session_id
    clock.advance(100)
    (project_path / "a.txt").write_text("a\n")
    timer.commit("One")
    clock.advance(200)
    (project_path / "b.txt").write_text("b\n")
    timer.commit("Two")
    timer.stop()

    second = timer.start().session_id
    clock.advance(50)
    (project_path / "c.txt").write_text("c\n")
    timer.commit("Three")

    history = timer.history()
    assert first != second
    assert history.session_totals == {first: 300, second: 50}
    assert history.total_seconds == 350


def test_merge_requires_target(timer):
    """Test that a merge without a branch fails before logging anything."""
    timer.start()

    with pytest.raises(MissingArgument):
        timer.merge("")
    with pytest.raises(MissingArgument):
        timer.merge(None)

    assert not timer.log.path.exists()


def test_merge_requires_start(timer):
    with pytest.raises(NotStarted):
        timer.merge("feature")


def test_merge_with_timed_message(timer, clock, temp_git_project):
    """Test merging a diverged branch."""
    project_path, origin_path, _ = temp_git_project
    main_repo = Repo(project_path)
    main_branch = main_repo.active_branch.name
    main_repo.git.checkout("-b", "feature")
    _commit_file(main_repo, "feature.txt", "feature\n", "Feature work")
    main_repo.git.checkout(main_branch)
    _commit_file(main_repo, "main.txt", "main\n", "Main work")

    session_id = timer.start().session_id
    clock.advance(45)
    result = timer.merge("feature")

    expected = (
        f"Merge feature onto {main_branch} Commit (00:00:45), "
        f"Session (00:00:45) [SESSID: {session_id}]"
    )
    assert result.message == expected
    assert result.merge_target == "feature"
    assert main_repo.head.commit.message.strip() == expected
    assert len(main_repo.head.commit.parents) == 2
    assert result.pushed
    assert Repo(origin_path).heads[main_branch].commit.hexsha == main_repo.head.commit.hexsha


def test_merge_conflict(timer, clock, temp_git_project):
    """Test that a conflicted merge lists files, logs time and does not push."""
    project_path, origin_path, _ = temp_git_project
    main_repo = Repo(project_path)
    main_branch = main_repo.active_branch.name
    main_repo.git.checkout("-b", "feature")
    _commit_file(main_repo, "README.md", "# Feature version\n", "Feature readme")
    main_repo.git.checkout(main_branch)
    _commit_file(main_repo, "README.md", "# Main version\n", "Main readme")

    session_id = timer.start().session_id
    clock.advance(75)
    with pytest.raises(ConflictDetected) as exc_info:
        timer.merge("feature")

    conflict = exc_info.value
    assert [p.name for p in conflict.files] == ["README.md"]
    assert all(p.is_absolute() for p in conflict.files)
    assert conflict.saved_message.read_text().strip() == conflict.message
    assert f"[SESSID: {session_id}]" in conflict.message
    assert timer.log.session_total(session_id) == 75
    assert Repo(origin_path).heads == []
    assert (project_path / ".git" / "MERGE_HEAD").exists()


def test_merge_unknown_branch(timer, clock):
    """Test that an unknown merge target fails before logging anything."""
    timer.start()
    clock.advance(20)

    with pytest.raises(UnknownBranch, match="does-not-exist"):
        timer.merge("does-not-exist")

    assert not timer.log.path.exists()


def test_commit_with_missing_session_file(timer, temp_git_project):
    """Test that state without a session id counts as not started."""
    project_path, _, _ = temp_git_project
    head = Repo(project_path).head.commit.hexsha
    timer.start()
    timer.store.session_file.unlink()

    with pytest.raises(NotStarted):
        timer.commit("work")

    assert not timer.log.path.exists()
    assert Repo(project_path).head.commit.hexsha == head
