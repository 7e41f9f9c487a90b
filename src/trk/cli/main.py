"""Main CLI interface for trk."""

import contextlib
import logging
import sys
from pathlib import Path
from typing import Iterator, Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from trk.cli.setup_hooks import install_git_hooks, uninstall_git_hooks
from trk.core import clock, vcs, viewer
from trk.core.clock import format_timestamp
from trk.core.duration import format_duration, parse_ago
from trk.core.repository import TrackerRepository
from trk.errors import FatalTimestampError, StorageError
from trk.models.timesheet import Timesheet

console = Console()


def _ago_to_timestamp(ctx, param, value: Optional[str]) -> Optional[int]:
    """Turn an offset like ``15m`` into an absolute timestamp."""
    if value is None:
        return None
    try:
        return clock.now() - parse_ago(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


ago_option = click.option(
    "--ago",
    "timestamp",
    callback=_ago_to_timestamp,
    metavar="OFFSET",
    help="Record the event this long ago, e.g. 90s, 15m or 2h",
)


def _find_project_root() -> Optional[Path]:
    """Find the project root directory."""
    project_root = vcs.find_project_root()
    if project_root is None:
        console.print("[red]Error: Not in a git repository[/red]")
    return project_root


def get_repo_or_exit() -> TrackerRepository:
    """Get the TrackerRepository of the current project or exit."""
    project_root = _find_project_root()
    if project_root is None:
        raise click.Abort()

    repo = TrackerRepository(project_root)
    try:
        initialized = repo.exists()
    except StorageError as e:
        console.print(f"[red]{e}[/red]")
        raise click.Abort() from e

    if not initialized:
        console.print("[red]trk not initialized. Run 'trk init' first.[/red]")
        raise click.Abort()
    return repo


@contextlib.contextmanager
def tracked_sheet() -> Iterator[Tuple[TrackerRepository, Timesheet]]:
    """Load the timesheet and save it after the block.

    A fatal timestamp error ends the command without saving.
    """
    repo = get_repo_or_exit()
    sheet = repo.load()

    try:
        yield repo, sheet
    except FatalTimestampError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(0)

    try:
        saved = repo.save(sheet)
    except StorageError as e:
        console.print(f"[red]{e}[/red]")
        raise click.Abort() from e
    if not saved:
        console.print("[red]Could not save the timesheet.[/red]")


@click.group()
@click.version_option(package_name="trk")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logs")
def main(verbose: bool):
    """trk - track your working time in a git repository."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)],
    )


@main.command()
@click.argument("name", required=False)
def init(name: Optional[str]):
    """Initialize a timesheet, owned by NAME or the git user."""
    project_root = _find_project_root()
    if project_root is None:
        return

    repo = TrackerRepository(project_root)
    try:
        sheet = repo.init(name)
    except (ValueError, StorageError) as e:
        console.print(f"[red]{e}[/red]")
        return

    console.print(f"[green]✅ Initialized timesheet for {sheet.user} in {project_root}[/green]")
    if repo.add_to_gitignore():
        console.print("[dim]  Added .trk/ to .gitignore[/dim]")


@main.command()
def clear():
    """Delete all sessions and start a fresh timesheet."""
    repo = get_repo_or_exit()
    try:
        sheet = repo.clear()
    except (ValueError, StorageError) as e:
        console.print(f"[red]{e}[/red]")
        return
    console.print(f"[green]Cleared timesheet of {sheet.user}[/green]")


@main.command()
@ago_option
def begin(timestamp: Optional[int]):
    """Start a new session."""
    with tracked_sheet() as (_, sheet):
        if sheet.new_session(timestamp):
            console.print("[green]Started a new session.[/green]")


@main.command()
@ago_option
def end(timestamp: Optional[int]):
    """End the running session."""
    with tracked_sheet() as (_, sheet):
        if sheet.end_session(timestamp):
            session = sheet.last_session
            console.print(
                f"[green]Session ended, worked for "
                f"{format_duration(session.working_time())}.[/green]"
            )


@main.command()
@ago_option
@click.argument("note", nargs=-1)
def pause(timestamp: Optional[int], note: Tuple[str, ...]):
    """Pause the running session, optionally saying why."""
    with tracked_sheet() as (_, sheet):
        if sheet.pause(timestamp, " ".join(note) or None):
            console.print("[yellow]Paused.[/yellow]")


@main.command()
@ago_option
def resume(timestamp: Optional[int]):
    """Resume a paused session."""
    with tracked_sheet() as (_, sheet):
        if sheet.resume(timestamp):
            console.print("[green]Resumed.[/green]")


@main.command()
@ago_option
@click.argument("text", nargs=-1, required=True)
def note(timestamp: Optional[int], text: Tuple[str, ...]):
    """Add a note to the running session."""
    with tracked_sheet() as (_, sheet):
        if sheet.note(" ".join(text), timestamp):
            console.print("[green]Noted.[/green]")


@main.command()
@click.argument("commit_hash")
def commit(commit_hash: str):
    """Record a commit (called from the post-commit hook)."""
    with tracked_sheet() as (repo, sheet):
        message = vcs.commit_message(repo.project_root, commit_hash)
        if sheet.add_commit(commit_hash, message):
            console.print(f"[green]Recorded commit {commit_hash[:8]}[/green]")


@main.command()
@click.argument("name", required=False)
def branch(name: Optional[str]):
    """Record a branch worked on, by default the checked out one.

    Called from the post-checkout hook. A detached HEAD is not recorded.
    """
    with tracked_sheet() as (repo, sheet):
        if name is None:
            name = vcs.current_branch(repo.project_root)
        if name is None:
            console.print("[yellow]Not on a branch.[/yellow]")
            return
        sheet.add_branch(name)


@main.command()
def status():
    """Show the timesheet status."""
    repo = get_repo_or_exit()
    console.print(repo.load().status())


@main.command("session-status")
def session_status():
    """Show the status of the last session."""
    repo = get_repo_or_exit()
    console.print(repo.load().last_session_status())


@main.command()
def sessions():
    """List all sessions."""
    repo = get_repo_or_exit()
    sheet = repo.load()

    if not sheet.sessions:
        console.print("[yellow]No sessions found[/yellow]")
        return

    table = Table(title=f"Sessions of {sheet.user}")
    table.add_column("#", style="cyan", no_wrap=True)
    table.add_column("Start", style="magenta")
    table.add_column("End", style="magenta")
    table.add_column("Worked", style="blue")
    table.add_column("Paused", style="blue")
    table.add_column("Commits", style="yellow")
    table.add_column("Branches", style="green")
    table.add_column("Status", style="red")

    for number, session in enumerate(sheet.sessions, start=1):
        status_text = "🟢 Running" if session.is_running else "⚫ Ended"
        if session.is_paused:
            status_text = "⏸ Paused"

        table.add_row(
            str(number),
            format_timestamp(session.start),
            format_timestamp(session.end),
            format_duration(session.working_time()),
            format_duration(session.pause_time()),
            str(len(session.commits)),
            " ".join(sorted(session.branches)),
            status_text,
        )

    console.print(table)
    console.print(
        f"[bold]Total:[/bold] worked for {format_duration(sheet.working_time())}, "
        f"paused for {format_duration(sheet.pause_time())}"
    )


@main.command()
@click.option(
    "--since",
    "since",
    callback=_ago_to_timestamp,
    metavar="OFFSET",
    help="Only include sessions started within this offset, e.g. 8h",
)
def report(since: Optional[int]):
    """Render the timesheet report and open it."""
    repo = get_repo_or_exit()
    sheet = repo.load()

    if not repo.write_reports(sheet, since):
        console.print("[red]Could not write the report.[/red]")
        return
    _show_report(repo, repo.timesheet_report)


@main.command("report-session")
def report_session():
    """Render the report of the last session and open it."""
    repo = get_repo_or_exit()
    sheet = repo.load()

    if sheet.last_session is None:
        console.print("[yellow]No session yet.[/yellow]")
        return
    if not repo.write_reports(sheet):
        console.print("[red]Could not write the report.[/red]")
        return
    _show_report(repo, repo.session_report)


@main.command("show-commits")
@click.argument("setting", type=click.Choice(["on", "off"]))
def show_commits(setting: str):
    """Show or hide commits in reports."""
    with tracked_sheet() as (_, sheet):
        sheet.toggle_show_commits(setting == "on")
    console.print(f"[green]Commits are {'shown' if setting == 'on' else 'hidden'} in reports.[/green]")


@main.command("repo")
@click.argument("url")
def set_repo(url: str):
    """Set the repository shown in reports."""
    with tracked_sheet() as (_, sheet):
        sheet.set_repo(url)


@main.group("hooks")
def hooks():
    """Manage git hooks that feed trk."""


@hooks.command("install")
@click.option("--force", is_flag=True, help="Overwrite existing hooks without prompting")
def install_hooks(force: bool):
    """Install post-commit and post-checkout hooks."""
    project_root = _find_project_root()
    if project_root is None:
        return

    try:
        results = install_git_hooks(project_root, force=force, confirm=click.confirm)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error installing git hooks: {e}[/red]")
        raise click.Abort() from e

    for hook_name, outcome in results:
        if outcome == "skipped":
            console.print(f"[yellow]Skipped {hook_name}[/yellow]")
        elif outcome == "unchanged":
            console.print(f"[dim]{hook_name} already calls trk[/dim]")
        else:
            console.print(f"[green]✅ {outcome.capitalize()} {hook_name}[/green]")


@hooks.command("uninstall")
def uninstall_hooks():
    """Remove trk from the git hooks."""
    project_root = _find_project_root()
    if project_root is None:
        return

    try:
        results = uninstall_git_hooks(project_root)
    except OSError as e:
        console.print(f"[red]Error uninstalling git hooks: {e}[/red]")
        raise click.Abort() from e

    for hook_name, outcome in results:
        if outcome in ("removed", "cleaned"):
            console.print(f"[green]✅ {outcome.capitalize()} {hook_name}[/green]")
        else:
            console.print(f"[dim]No trk integration found in {hook_name}[/dim]")


def _show_report(repo: TrackerRepository, path: Path) -> None:
    if repo.config.open_reports and viewer.open_document(path):
        return
    console.print(f"Report written to {path}")


if __name__ == "__main__":
    main()
