"""Main CLI interface for Git Timer."""

import contextlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from git_timer.config import TimerSettings
from git_timer.core.errors import ConflictDetected, GitTimerError
from git_timer.core.message import format_duration
from git_timer.core.timer import GitTimer
from git_timer.models.report import CheckpointResult

console = Console(soft_wrap=True)
logger = logging.getLogger(__name__)


def _configure_logging(settings: TimerSettings, verbose: bool) -> None:
    """Send package logs to the debug log file, and to stderr when verbose."""
    package_logger = logging.getLogger("git_timer")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.DEBUG)
    package_logger.propagate = False

    try:
        settings.state_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(settings.debug_log_path, encoding="utf-8")
    except OSError as e:
        console.print(f"[yellow]⚠️  Debug log disabled: {e}[/yellow]")
    else:
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        package_logger.addHandler(file_handler)

    if verbose:
        rich_handler = RichHandler(console=Console(stderr=True), show_path=False)
        rich_handler.setLevel(logging.DEBUG)
        package_logger.addHandler(rich_handler)


@contextlib.contextmanager
def _timer_errors():
    """Turn Git Timer errors into messages and a non-zero exit."""
    try:
        yield
    except ConflictDetected as e:
        _print_conflict_guidance(e)
        raise click.Abort() from e
    except GitTimerError as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise click.Abort() from e


def _print_conflict_guidance(conflict: ConflictDetected) -> None:
    """Explain how to finish or abandon a conflicted merge."""
    console.print("\n[bold red]🚨 MERGE CONFLICT DETECTED![/bold red]")
    console.print("The merge stopped with conflicts in:")
    for path in conflict.files:
        console.print(f"   {escape(str(path))}")
    console.print("\nThe time spent was logged. Nothing was pushed.")
    console.print("\nResolution Options:")
    console.print("1. 🛠  RESOLVE AND COMMIT:")
    console.print("   # Edit conflicted files to resolve conflicts")
    console.print("   git add -A")
    console.print(f"   git commit -F {conflict.saved_message}")
    console.print("   git push")
    console.print("\n2. 🔄 ABORT THE MERGE:")
    console.print("   git merge --abort")


def _get_timer(ctx: click.Context) -> GitTimer:
    return ctx.obj["timer"]


@click.group()
@click.version_option()
@click.option(
    "--repo",
    "repo_path",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    help="Path inside the git repository",
)
@click.option(
    "--state-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for timer state (default: $GIT_TIMER_STATE_DIR or <tmp>/git-timer)",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, repo_path: Path, state_dir: Optional[Path], verbose: bool):
    """Git Timer - time tracking written into your commit messages."""
    settings = TimerSettings()
    if state_dir is not None:
        settings = settings.model_copy(update={"state_dir": state_dir})
    _configure_logging(settings, verbose)

    ctx.ensure_object(dict)
    timer = ctx.obj.get("timer")
    if timer is None:
        timer = ctx.obj["timer"] = GitTimer.from_settings(settings, repo_path)
    if timer.on_message is None:
        timer.on_message = _print_message


def _print_message(result: CheckpointResult) -> None:
    if result.merge_target:
        console.print(
            f"📝 Merging '{escape(result.merge_target)}' into '{escape(result.branch)}' with commit message:"
        )
    else:
        console.print("📝 Committing with message:")
    console.print(f'"{result.message}"', markup=False)


@main.command()
@click.pass_context
def start(ctx: click.Context):
    """Start the timer (continues the saved session if there is one)."""
    timer = _get_timer(ctx)
    with _timer_errors():
        state = timer.start()
    started = datetime.fromtimestamp(state.start_time).ctime()
    console.print(f"[green]✅ Timer started at {started}[/green]")
    console.print(f"[bold]Session:[/bold] {state.session_id}")


@main.command()
@click.argument("message", nargs=-1)
@click.pass_context
def commit(ctx: click.Context, message: Tuple[str, ...]):
    """Add all files, commit with time info and push."""
    timer = _get_timer(ctx)
    with _timer_errors():
        result = timer.commit(" ".join(message))
    if result.pushed:
        console.print(f"🚀 Pushed {result.branch}")
    else:
        console.print(f"[yellow]Committed on {result.branch} (not pushed)[/yellow]")


@main.command(name="gcmm")
@click.argument("target_branch", required=False)
@click.pass_context
def merge(ctx: click.Context, target_branch: Optional[str]):
    """Merge TARGET_BRANCH into the current branch with a timed message."""
    timer = _get_timer(ctx)
    with _timer_errors():
        result = timer.merge(target_branch)
    if result.pushed:
        console.print(f"🚀 Pushed {result.branch}")
    console.print("ℹ️ Merge session logged")


@main.command(name="time")
@click.pass_context
def time_(ctx: click.Context):
    """Show elapsed time and the total across sessions."""
    timer = _get_timer(ctx)
    with _timer_errors():
        report = timer.status()

    elapsed = format_duration(report.since_last_seconds)
    if report.has_commits:
        console.print(f"⏱️ Time since last commit (this session): {elapsed}")
    else:
        console.print(f"⏱️ No commits in this session yet. Time since timer started: {elapsed}")
    console.print(f"🧩 Total across sessions:  {format_duration(report.history.total_seconds)}")
    console.print(f"       Branches Included: {','.join(report.history.branches)}")


@main.command()
@click.pass_context
def sessions(ctx: click.Context):
    """List session totals recovered from commit history."""
    timer = _get_timer(ctx)
    with _timer_errors():
        history = timer.history()

    if not history.session_totals:
        console.print("[yellow]No timed commits found.[/yellow]")
        return

    table = Table(title="Sessions")
    table.add_column("Session", style="cyan")
    table.add_column("Total", justify="right")
    for session_id, seconds in sorted(
        history.session_totals.items(), key=lambda kv: (-kv[1], kv[0])
    ):
        table.add_row(session_id, format_duration(seconds))
    table.add_row("[bold]All[/bold]", f"[bold]{format_duration(history.total_seconds)}[/bold]")
    console.print(table)


@main.command()
@click.pass_context
def stop(ctx: click.Context):
    """Stop the timer and forget the session."""
    timer = _get_timer(ctx)
    with _timer_errors():
        timer.stop()
    console.print("🛑 Timer stopped.")


if __name__ == "__main__":
    main()
