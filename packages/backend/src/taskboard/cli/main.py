"""Taskboard CLI — set up the database and work with tasks from a terminal.

Usage:
    taskboard init-db                            # Create tables
    taskboard seed                               # Demo admin + user + sample tasks
    taskboard login -e user@example.com          # Prompts for password, saves session
    taskboard whoami                             # Cached identity (verified against /me)
    taskboard tasks -s PENDING                   # List tasks
    taskboard add "write report" -p HIGH         # Create a task
    taskboard stats                              # Task statistics
    taskboard logout                             # End the session, forget it locally
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from pathlib import Path
from typing import Optional

import click

from taskboard import __version__
from taskboard.client import DEFAULT_API_URL, ClientError, TaskboardClient

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


def _api_url() -> str:
    return os.environ.get("TASKBOARD_API_URL", DEFAULT_API_URL).rstrip("/")


def _session_file() -> Path:
    default = Path.home() / ".taskboard" / "session.json"
    return Path(os.environ.get("TASKBOARD_SESSION_FILE", default))


def _load_session() -> dict:
    path = _session_file()
    if not path.exists():
        return {}
    try:
        return json.loads(path.read_text())
    except (OSError, ValueError):
        return {}


def _save_session(token: Optional[str], user: Optional[dict]) -> None:
    path = _session_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"token": token, "user": user}))
    path.chmod(0o600)


def _clear_session() -> None:
    _session_file().unlink(missing_ok=True)


def _client() -> TaskboardClient:
    """Client pointed at TASKBOARD_API_URL, primed with the saved session."""
    saved = _load_session()
    return TaskboardClient(_api_url(), token=saved.get("token"), user=saved.get("user"))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _fail(err: ClientError) -> None:
    click.secho(f"Error: {err.message}", fg="red", err=True)
    for e in err.errors:
        click.secho(f"  {e.get('field')}: {e.get('message')}", fg="red", err=True)
    if err.status_code == 401:
        _clear_session()
        click.echo("Session cleared. Run `taskboard login` again.", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "—")[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


def _status_color(status: str) -> str:
    colors = {
        "PENDING": "white",
        "IN_PROGRESS": "yellow",
        "COMPLETED": "green",
        "CANCELLED": "red",
    }
    return colors.get(status, "white")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="taskboard")
def main():
    """Taskboard — personal task management."""


# ---------------------------------------------------------------------------
# Server-side setup
# ---------------------------------------------------------------------------


@main.command("init-db")
def init_db():
    """Create database tables for TASKBOARD_DATABASE_URL."""
    _run(_init_db_impl())
    click.secho("Tables created.", fg="green")


async def _init_db_impl():
    from taskboard.config import get_settings
    from taskboard.db.engine import Database

    db = Database(get_settings().database_url)
    try:
        await db.create_all()
    finally:
        await db.dispose()


@main.command()
def seed():
    """Create the demo admin/user accounts and sample tasks."""
    created = _run(_seed_impl())
    click.secho(
        f"Seeded: {created['users']} user(s), {created['tasks']} task(s).", fg="green"
    )
    click.echo("\nTest credentials:")
    click.echo("  Admin - Email: admin@example.com, Password: admin123")
    click.echo("  User  - Email: user@example.com, Password: user123")


async def _seed_impl() -> dict:
    from taskboard.config import get_settings
    from taskboard.db.engine import Database
    from taskboard.db.seed import seed as run_seed

    settings = get_settings()
    db = Database(settings.database_url)
    try:
        return await run_seed(db, settings)
    finally:
        await db.dispose()


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


@main.command()
@click.option("--email", "-e", prompt=True, help="Account email")
@click.option("--password", "-p", prompt=True, hide_input=True, help="Account password")
def login(email: str, password: str):
    """Log in and save the session locally."""
    _run(_login_impl(email, password))


async def _login_impl(email: str, password: str):
    async with _client() as c:
        try:
            await c.login(email, password)
        except ClientError as e:
            _fail(e)
        _save_session(c.token, c.user)
        click.secho(f"Logged in as {c.user['username']} ({c.user['role']})", fg="green")


@main.command()
def logout():
    """Log out on the server and forget the local session."""
    _run(_logout_impl())


async def _logout_impl():
    async with _client() as c:
        if not c.is_authenticated:
            click.echo("Not logged in.")
            return
        try:
            await c.logout()
        except ClientError as e:
            click.secho(f"Server logout failed: {e.message}", fg="yellow", err=True)
        finally:
            _clear_session()
    click.secho("Logged out.", fg="green")


@main.command()
def whoami():
    """Show the identity the current access token carries."""
    _run(_whoami_impl())


async def _whoami_impl():
    async with _client() as c:
        if not c.is_authenticated:
            click.echo("Not logged in.")
            sys.exit(1)
        try:
            user = await c.me()
        except ClientError as e:
            _fail(e)
        click.echo(f"{user['email']}  role={user['role']}  id={user['id']}")


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


@main.command()
@click.option("--status", "-s", "status_filter", help="Filter by status (e.g. PENDING)")
@click.option("--priority", "-p", help="Filter by priority (e.g. HIGH)")
@click.option("--page", default=1, help="Page number")
@click.option("--limit", "-l", default=10, help="Page size (max 100)")
def tasks(status_filter: Optional[str], priority: Optional[str], page: int, limit: int):
    """List your tasks (all tasks for admins)."""
    _run(_tasks_impl(status_filter, priority, page, limit))


async def _tasks_impl(status_filter, priority, page, limit):
    async with _client() as c:
        try:
            data = await c.list_tasks(
                status=status_filter, priority=priority, page=page, limit=limit
            )
        except ClientError as e:
            _fail(e)

        rows = data["tasks"]
        meta = data["pagination"]
        if not rows:
            click.echo("No tasks found.")
            return

        click.secho(
            f"Tasks (page {meta['currentPage']}/{meta['totalPages']}, "
            f"{meta['totalTasks']} total):",
            bold=True,
        )
        click.echo()
        _print_table(rows, [
            ("ID", "id", 36),
            ("Status", "status", 12),
            ("Priority", "priority", 8),
            ("Due", "dueDate", 10),
            ("Title", "title", 50),
        ])


@main.command()
@click.argument("title")
@click.option("--description", "-d", help="Longer description")
@click.option("--priority", "-p", type=click.Choice(["LOW", "MEDIUM", "HIGH", "URGENT"]))
@click.option("--status", "-s", type=click.Choice(["PENDING", "IN_PROGRESS", "COMPLETED", "CANCELLED"]))
@click.option("--due", help="Due date, ISO-8601 (e.g. 2025-01-31)")
def add(title: str, description: Optional[str], priority: Optional[str],
        status: Optional[str], due: Optional[str]):
    """Create a task."""
    fields = {"description": description, "priority": priority, "status": status, "dueDate": due}
    _run(_add_impl(title, {k: v for k, v in fields.items() if v is not None}))


async def _add_impl(title: str, fields: dict):
    async with _client() as c:
        try:
            task = await c.create_task(title, **fields)
        except ClientError as e:
            _fail(e)
        click.secho(f"Task {task['id']} created", fg="green")


@main.command()
def stats():
    """Show task counts by status, urgent and overdue."""
    _run(_stats_impl())


async def _stats_impl():
    async with _client() as c:
        try:
            s = await c.stats()
        except ClientError as e:
            _fail(e)

    click.secho("--- Task Stats ---", bold=True)
    click.echo(f"  Total:       {s['total_tasks']}")
    for key, label in (
        ("pending", "PENDING"),
        ("in_progress", "IN_PROGRESS"),
        ("completed", "COMPLETED"),
        ("cancelled", "CANCELLED"),
    ):
        click.echo(f"  {click.style(label, fg=_status_color(label)):<22} {s[key]}")
    click.echo(f"  Urgent:      {s['urgent_tasks']}")
    click.echo(f"  Overdue:     {click.style(s['overdue'], fg='red' if s['overdue'] != '0' else 'green')}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
