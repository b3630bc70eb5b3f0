"""
Cadence CLI - weekly review board in the terminal.

Usage:
    cadence init                          # Create the seven day buckets
    cadence show                          # Board overview
    cadence add "Two Sum" --score 3       # Schedule a new item
    cadence move <item> --before <item>   # Reorder / transfer
    cadence score <item> 5                # Re-score (shifts its day)
    cadence archive <item>                # Retire a mastered item
    cadence archived                      # Archive grouped by category
    cadence columns list|add|edit|delete|move
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

import typer
from loguru import logger
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cadence.board.service import ReviewBoard
from cadence.core.errors import BoardError
from cadence.core.models import Container, DropTarget, Item, MoveResult, Side
from cadence.store.sql_repository import SqlRepository
from config import get_settings

console = Console()

SCORE_STYLES = {1: "red", 2: "red", 3: "yellow", 4: "cyan", 5: "green"}

# ============================================================================
# TYPER APPS
# ============================================================================

app = typer.Typer(
    name="cadence",
    help="Weekly review board: schedule, reorder and archive practice items",
    no_args_is_help=True,
)

columns_app = typer.Typer(
    name="columns",
    help="Manage board columns",
    no_args_is_help=True,
)
app.add_typer(columns_app, name="columns")


# ============================================================================
# HELPERS
# ============================================================================


def open_board() -> ReviewBoard:
    """Load the configured user's board, provisioning day buckets on first use."""
    settings = get_settings()
    repository = SqlRepository(settings.get_database_url(), echo=settings.sql_echo)
    board = ReviewBoard.from_settings(repository, settings).load()
    board.initialize_default_containers()
    return board


@contextmanager
def board_errors() -> Iterator[None]:
    """Render board errors in red and exit non-zero."""
    try:
        yield
    except BoardError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc


def short_id(entity_id: str) -> str:
    return entity_id[:8]


def resolve_item(board: ReviewBoard, ref: str) -> Item:
    """Find an item by id or unique id prefix."""
    matches = [item for item in board.state.items if item.id == ref]
    if not matches:
        matches = [item for item in board.state.items if item.id.startswith(ref)]
    if len(matches) != 1:
        problem = "No" if not matches else "Ambiguous"
        raise typer.BadParameter(f"{problem} item matching {ref!r}")
    return matches[0]


def resolve_container(board: ReviewBoard, ref: str) -> Container:
    """Find a column by id, id prefix or (case-insensitive) name."""
    containers = board.containers()
    for matcher in (
        lambda c: c.id == ref,
        lambda c: c.name.casefold() == ref.casefold(),
        lambda c: c.id.startswith(ref),
    ):
        matches = [c for c in containers if matcher(c)]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            raise typer.BadParameter(f"Ambiguous column {ref!r}")
    raise typer.BadParameter(f"No column matching {ref!r}")


def format_item(item: Item) -> str:
    style = SCORE_STYLES.get(item.score, "white")
    label = f"[{style}]{item.score}[/{style}] {item.title} [dim]{short_id(item.id)}[/dim]"
    if item.category:
        label += f" [magenta]#{item.category}[/magenta]"
    return label


def report(result: MoveResult | None, message: str) -> None:
    if result is None or result.is_noop:
        console.print("[dim]Nothing changed[/dim]")
        return
    console.print(f"[green]✓[/green] {message}")


# ============================================================================
# BOARD COMMANDS
# ============================================================================


@app.command("init")
def init_board():
    """Create the seven day buckets for a new board."""
    with board_errors():
        board = open_board()
    console.print(f"[green]✓[/green] Board ready with {len(board.containers())} columns")


@app.command("show")
def show_board():
    """Display every column and its items in order."""
    with board_errors():
        board = open_board()

    table = Table(box=box.ROUNDED, show_lines=False, expand=True)
    columns = board.containers()
    for container in columns:
        header = container.name if container.slot is None else f"{container.name} ({container.slot})"
        table.add_column(header, overflow="fold")

    stacks = [board.items_by_container(c.id) for c in columns]
    depth = max((len(stack) for stack in stacks), default=0)
    for row in range(depth):
        table.add_row(*(format_item(stack[row]) if row < len(stack) else "" for stack in stacks))

    console.print(table)
    archived = len(board.state.archived_items())
    if archived:
        console.print(f"[dim]{archived} archived item(s) - see `cadence archived`[/dim]")


@app.command("add")
def add_item(
    title: str = typer.Argument(..., help="Item title"),
    score: int = typer.Option(..., "--score", "-s", help="Confidence 1-5 (days until next review)"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Archive category"),
    link: Optional[str] = typer.Option(None, "--link", help="URL of the problem"),
    difficulty: Optional[str] = typer.Option(None, "--difficulty", help="Easy / Medium / Hard"),
    notes: Optional[str] = typer.Option(None, "--notes", help="Free-form notes"),
):
    """Create an item, scheduled SCORE days from today."""
    with board_errors():
        board = open_board()
        item = board.create_item(
            title, score, category=category, link=link, difficulty=difficulty, notes=notes
        )
        container = board.state.get_container(item.container_id)
    console.print(f"[green]✓[/green] Added {format_item(item)} to [bold]{container.name}[/bold]")


@app.command("edit")
def edit_item(
    item_ref: str = typer.Argument(..., help="Item id or id prefix"),
    title: Optional[str] = typer.Option(None, "--title"),
    score: Optional[int] = typer.Option(None, "--score", "-s"),
    category: Optional[str] = typer.Option(None, "--category", "-c"),
    link: Optional[str] = typer.Option(None, "--link"),
    difficulty: Optional[str] = typer.Option(None, "--difficulty"),
    notes: Optional[str] = typer.Option(None, "--notes"),
):
    """Edit an item; a new score shifts its review day by the difference."""
    fields = {
        name: value
        for name, value in {
            "title": title,
            "category": category,
            "link": link,
            "difficulty": difficulty,
            "notes": notes,
        }.items()
        if value is not None
    }
    with board_errors():
        board = open_board()
        item = resolve_item(board, item_ref)
        updated = board.update_item(item.id, score=score, **fields)
        container_name = (
            "archive" if updated.is_archived else board.state.get_container(updated.container_id).name
        )
    console.print(f"[green]✓[/green] Updated {format_item(updated)} ({container_name})")


@app.command("score")
def rescore_item(
    item_ref: str = typer.Argument(..., help="Item id or id prefix"),
    score: int = typer.Argument(..., help="New confidence 1-5"),
):
    """Change an item's score and shift its review day accordingly."""
    with board_errors():
        board = open_board()
        item = resolve_item(board, item_ref)
        result = board.apply_score_change(item.id, score)
        if board.offers_archive(item.id):
            console.print("[cyan]Top score reached - archive it with `cadence archive`[/cyan]")
    report(result, f"Scored {item.title}: {item.score} -> {score}")


@app.command("delete")
def delete_item(
    item_ref: str = typer.Argument(..., help="Item id or id prefix"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete an item permanently."""
    with board_errors():
        board = open_board()
        item = resolve_item(board, item_ref)
        if not yes and not typer.confirm(f"Delete {item.title!r}?"):
            raise typer.Abort()
        result = board.delete_item(item.id)
    report(result, f"Deleted {item.title}")


@app.command("move")
def move_item(
    item_ref: str = typer.Argument(..., help="Item id or id prefix"),
    before: Optional[str] = typer.Option(None, "--before", help="Place before this item"),
    after: Optional[str] = typer.Option(None, "--after", help="Place after this item"),
    to: Optional[str] = typer.Option(None, "--to", help="Append to the end of this column"),
):
    """Move an item next to another item or to the end of a column."""
    if sum(option is not None for option in (before, after, to)) != 1:
        raise typer.BadParameter("Give exactly one of --before, --after or --to")

    with board_errors():
        board = open_board()
        item = resolve_item(board, item_ref)
        if to is not None:
            container = resolve_container(board, to)
            result = board.move_item(item.id, DropTarget(container.id))
        else:
            anchor = resolve_item(board, before or after)
            side = Side.BEFORE if before else Side.AFTER
            result = board.move_item(item.id, DropTarget(anchor.container_id, anchor.id), side)
    report(result, f"Moved {item.title}")


@app.command("archive")
def archive_item(
    item_ref: str = typer.Argument(..., help="Item id or id prefix"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Retire an item into the archive."""
    with board_errors():
        board = open_board()
        item = resolve_item(board, item_ref)
        if not board.offers_archive(item.id) and not item.mastered and not yes:
            if not typer.confirm(f"{item.title!r} is scored {item.score}/5. Archive anyway?"):
                raise typer.Abort()
        result = board.archive(item.id)
    report(result, f"Archived {item.title}")


@app.command("unarchive")
def unarchive_item(item_ref: str = typer.Argument(..., help="Item id or id prefix")):
    """Return an archived item to the board, scheduled from today."""
    with board_errors():
        board = open_board()
        item = resolve_item(board, item_ref)
        result = board.unarchive(item.id)
        placed = result.item(item.id)
        where = board.state.get_container(placed.container_id).name if placed else "board"
    report(result, f"Returned {item.title} to {where}")


@app.command("archived")
def show_archive():
    """List archived items grouped by category."""
    with board_errors():
        board = open_board()
        groups = board.archive_groups()

    if not groups:
        console.print("[dim]The archive is empty[/dim]")
        return

    total = sum(len(group) for group in groups)
    console.print(Panel(f"[bold]{total}[/bold] mastered item(s)", title="Archive", box=box.ROUNDED))
    for group in groups:
        table = Table(title=f"{group.category} ({len(group)})", box=box.SIMPLE, title_justify="left")
        table.add_column("ID", style="dim")
        table.add_column("Title")
        table.add_column("Difficulty")
        for item in group.items:
            table.add_row(short_id(item.id), item.title, item.difficulty or "")
        console.print(table)


# ============================================================================
# COLUMN COMMANDS
# ============================================================================


@columns_app.command("list")
def list_columns():
    """Show columns in display order."""
    with board_errors():
        board = open_board()
        counts = board.count_by_container()

    table = Table(box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Day")
    table.add_column("Color")
    table.add_column("Items", justify="right")
    for container in board.containers():
        table.add_row(
            str(container.order_key),
            short_id(container.id),
            container.name,
            "" if container.slot is None else str(container.slot),
            container.color,
            str(counts.get(container.id, 0)),
        )
    console.print(table)


@columns_app.command("add")
def add_column(
    name: str = typer.Argument(..., help="Column name"),
    color: str = typer.Option("bg-gray-500", "--color", help="Display colour token"),
):
    """Add a custom column at the end of the board."""
    with board_errors():
        board = open_board()
        container = board.create_container(name, color)
    console.print(f"[green]✓[/green] Added column {container.name} [dim]{short_id(container.id)}[/dim]")


@columns_app.command("edit")
def edit_column(
    column_ref: str = typer.Argument(..., help="Column id, prefix or name"),
    name: Optional[str] = typer.Option(None, "--name"),
    color: Optional[str] = typer.Option(None, "--color"),
):
    """Rename or recolour a column (day columns can only be recoloured)."""
    with board_errors():
        board = open_board()
        container = resolve_container(board, column_ref)
        updated = board.update_container(container.id, name=name, color=color)
    console.print(f"[green]✓[/green] Column {updated.name} ({updated.color})")


@columns_app.command("delete")
def delete_column(
    column_ref: str = typer.Argument(..., help="Column id, prefix or name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete an empty custom column."""
    with board_errors():
        board = open_board()
        container = resolve_container(board, column_ref)
        if not yes and not typer.confirm(f"Delete column {container.name!r}?"):
            raise typer.Abort()
        result = board.delete_container(container.id)
    report(result, f"Deleted column {container.name}")


@columns_app.command("move")
def move_column(
    column_ref: str = typer.Argument(..., help="Column id, prefix or name"),
    before: Optional[str] = typer.Option(None, "--before", help="Place before this column"),
    after: Optional[str] = typer.Option(None, "--after", help="Place after this column"),
    index: Optional[int] = typer.Option(None, "--index", help="Move to this position"),
):
    """Reorder a column."""
    if sum(option is not None for option in (before, after, index)) != 1:
        raise typer.BadParameter("Give exactly one of --before, --after or --index")

    with board_errors():
        board = open_board()
        container = resolve_container(board, column_ref)
        if index is not None:
            result = board.move_container_to(container.id, index)
        else:
            target = resolve_container(board, before or after)
            side = Side.BEFORE if before else Side.AFTER
            result = board.reorder_container(container.id, target.id, side)
    report(result, f"Moved column {container.name}")


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level.upper(),
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    app()


if __name__ == "__main__":
    main()
