"""Custom CLI commands for inspiradraw.

Adds room inspection and task queue commands to the `litestar` CLI.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import TYPE_CHECKING

import rich_click as click
from litestar.plugins import CLIPluginProtocol
from rich.console import Console
from rich.table import Table
from sqlalchemy import create_engine, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

if TYPE_CHECKING:
    from collections.abc import Generator

console = Console()


def get_database_url() -> str:
    """Get a sync database URL for CLI operations."""
    url = os.environ.get("DATABASE_URL", "sqlite:///./data/inspiradraw.db")
    if "+aiosqlite" in url:
        url = url.replace("+aiosqlite", "")
    if "+asyncpg" in url:
        url = url.replace("+asyncpg", "+psycopg2")
    return url


@contextmanager
def get_sync_session() -> Generator[Session, None, None]:
    """Get a sync database session for CLI operations."""
    engine = create_engine(get_database_url())
    session_factory = sessionmaker(bind=engine)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


# ============================================================================
# Rooms
# ============================================================================


@click.group(name="rooms", help="Inspect and manage persisted rooms.")
def rooms_group() -> None:
    """Inspect and manage persisted rooms."""


@rooms_group.command(name="list", help="List persisted rooms.")
@click.option("--limit", "-l", default=50, help="Number of rooms to show")
@click.option("--search", "-s", default=None, help="Filter by room id substring")
def rooms_list(limit: int, search: str | None) -> None:
    """List persisted rooms, newest first."""
    from inspiradraw.storage.db.models import RoomModel

    with get_sync_session() as session:
        stmt = select(RoomModel).order_by(RoomModel.created_at.desc()).limit(limit)
        if search:
            stmt = stmt.where(RoomModel.room_id.ilike(f"%{search}%"))
        try:
            rooms = session.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            console.print(f"[red]Could not read rooms: {e}[/red]")
            raise SystemExit(1) from e

        table = Table(title=f"Rooms (showing {len(rooms)})")
        table.add_column("Room", style="cyan")
        table.add_column("Password", style="yellow")
        table.add_column("Created", style="green")
        table.add_column("Updated", style="magenta")

        for room in rooms:
            table.add_row(
                room.room_id,
                "[green]yes[/green]" if room.password_hash else "[dim]open[/dim]",
                room.created_at.strftime("%Y-%m-%d %H:%M") if room.created_at else "-",
                room.updated_at.strftime("%Y-%m-%d %H:%M") if room.updated_at else "-",
            )

        console.print(table)


@rooms_group.command(name="delete", help="Delete a persisted room.")
@click.argument("room_id")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
def rooms_delete(room_id: str, yes: bool) -> None:
    """Delete a persisted room record.

    Live sessions keep running until their last member leaves.
    """
    from inspiradraw.storage.db.models import RoomModel

    if not yes and not click.confirm(f"Delete room {room_id}?"):
        console.print("[yellow]Cancelled[/yellow]")
        return

    with get_sync_session() as session:
        result = session.execute(delete(RoomModel).where(RoomModel.room_id == room_id))
        session.commit()

    if result.rowcount:
        console.print(f"[green]Deleted room[/green] {room_id}")
    else:
        console.print(f"[yellow]No room named[/yellow] {room_id}")


# ============================================================================
# Tasks
# ============================================================================


@click.group(name="tasks", help="Manage background task queue (Huey).")
def tasks_group() -> None:
    """Manage background task queue (Huey)."""


@tasks_group.command(name="run", help="Start the Huey task consumer.")
@click.option("--workers", "-w", default=1, help="Number of worker threads")
@click.option("--periodic/--no-periodic", default=True, help="Enable periodic tasks")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def tasks_run(workers: int, periodic: bool, verbose: bool) -> None:
    """Start the Huey task consumer to process background tasks."""
    try:
        from huey.consumer import Consumer

        from inspiradraw.core.tasks import get_huey, register_tasks
    except ImportError:
        console.print("[red]Error: Huey is not installed.[/red]")
        console.print("Install with: [cyan]pip install inspiradraw[tasks][/cyan]")
        return

    huey = get_huey()
    if periodic:
        register_tasks()
        console.print("[green]Registered periodic tasks[/green]")

    console.print(f"[cyan]Starting Huey consumer with {workers} workers...[/cyan]")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    try:
        Consumer(huey, workers=workers, periodic=periodic, verbose=verbose).run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Consumer stopped[/yellow]")


@tasks_group.command(name="status", help="Show task queue status.")
def tasks_status() -> None:
    """Show task queue settings and pending task counts."""
    from inspiradraw.core.tasks import TaskQueueSettings, get_huey

    settings = TaskQueueSettings.from_env()

    table = Table(title="Task Queue Status")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Enabled", "[green]Yes[/green]" if settings.enabled else "[red]No[/red]")
    table.add_row("Database", settings.db_path)
    table.add_row("Immediate Mode", "[yellow]Yes[/yellow]" if settings.immediate else "No")
    table.add_row("Room Retention", f"{settings.room_retention_days} days")
    console.print(table)

    if not settings.enabled:
        return

    try:
        huey = get_huey(settings)
    except ImportError as e:
        console.print(f"[red]{e}[/red]")
        return

    queue_table = Table(title="Queue Stats")
    queue_table.add_column("Metric", style="cyan")
    queue_table.add_column("Count", style="green", justify="right")
    queue_table.add_row("Pending Tasks", str(huey.pending_count()))
    queue_table.add_row("Scheduled Tasks", str(huey.scheduled_count()))
    console.print(queue_table)


@tasks_group.command(name="cleanup-rooms", help="Run room cleanup task now.")
@click.option("--retention-days", "-d", default=None, type=int, help="Override retention days")
def tasks_cleanup_rooms(retention_days: int | None) -> None:
    """Manually run the room cleanup task."""
    from inspiradraw.core.tasks import run_cleanup_old_rooms

    console.print("[cyan]Running room cleanup...[/cyan]")
    result = run_cleanup_old_rooms(retention_days=retention_days)
    console.print(
        f"[green]Cleanup complete:[/green] Deleted {result['deleted']} rooms "
        f"(retention: {result['retention_days']} days)"
    )


@tasks_group.command(name="list", help="List registered periodic tasks.")
def tasks_list() -> None:
    """List all registered periodic tasks."""
    table = Table(title="Scheduled Tasks")
    table.add_column("Task", style="cyan")
    table.add_column("Schedule", style="green")
    table.add_column("Description", style="dim")

    table.add_row("cleanup_old_rooms", "Daily @ 4:00 AM", "Remove rooms older than ROOM_RETENTION_DAYS")

    console.print(table)
    console.print("\n[dim]Run 'litestar tasks run' to start the task consumer[/dim]")


class InspiraCLIPlugin(CLIPluginProtocol):
    """CLI plugin that adds room and task queue commands.

    Adds the `rooms` command group with subcommands:
    - list: List persisted rooms
    - delete: Delete a persisted room

    Adds the `tasks` command group with subcommands:
    - run: Start the Huey task consumer
    - status: Show task queue status
    - list: List registered periodic tasks
    - cleanup-rooms: Run room cleanup task now
    """

    def on_cli_init(self, cli: click.Group) -> None:
        """Register the rooms and tasks command groups."""
        cli.add_command(rooms_group)
        cli.add_command(tasks_group)
