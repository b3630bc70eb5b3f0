"""
Smoke Tests for the cadence CLI.

These tests drive the Typer app against a temporary SQLite board and check
that commands succeed and leave the board in the expected shape.

Usage:
    pytest tests/smoke/test_board_cli.py -v
    pytest tests/smoke/test_board_cli.py -v -m smoke
"""

import subprocess
import sys
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from cadence.board.schedule import today_ordinal
from cadence.cli import board_cli
from cadence.cli.board_cli import app
from cadence.store.sql_repository import SqlRepository
from config import get_settings

pytestmark = pytest.mark.smoke

PROJECT_ROOT = Path(__file__).parent.parent.parent

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Keep rich tables on one line per row."""
    monkeypatch.setattr(board_cli, "console", Console(width=200))


@pytest.fixture
def database_url(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'board.db'}"
    monkeypatch.setenv("CADENCE_DATABASE_URL", url)
    monkeypatch.setenv("CADENCE_USER_ID", "smoke")
    get_settings.cache_clear()
    yield url
    get_settings.cache_clear()


@pytest.fixture
def repository(database_url):
    repository = SqlRepository(database_url)
    yield repository
    repository.engine.dispose()


def invoke(*args: str, input: str | None = None):
    return runner.invoke(app, list(args), input=input)


def only_item(repository, title):
    matches = [i for i in repository.load_items("smoke") if i.title == title]
    assert len(matches) == 1, matches
    return matches[0]


def slot_of(repository, item):
    containers = {c.id: c for c in repository.load_containers("smoke")}
    return containers[item.container_id].slot


class TestCLIHelp:
    """Help output needs no database."""

    def test_main_help(self):
        result = invoke("--help")
        assert result.exit_code == 0
        assert "columns" in result.output

    def test_columns_help(self):
        result = invoke("columns", "--help")
        assert result.exit_code == 0

    def test_module_entry_point(self):
        completed = subprocess.run(
            [sys.executable, "-m", "cadence", "--help"],
            cwd=PROJECT_ROOT,
            capture_output=True,
            text=True,
            timeout=60,
        )
        assert completed.returncode == 0, completed.stderr
        assert "archive" in completed.stdout


class TestBoardCommands:
    def test_init_creates_day_columns(self, repository):
        result = invoke("init")
        assert result.exit_code == 0, result.output
        assert "7 columns" in result.output
        assert len(repository.load_containers("smoke")) == 7

    def test_add_schedules_from_today(self, repository):
        result = invoke("add", "Two Sum", "--score", "3", "--category", "Arrays")
        assert result.exit_code == 0, result.output

        item = only_item(repository, "Two Sum")
        assert item.category == "Arrays"
        assert slot_of(repository, item) == (today_ordinal() + 3) % 7

    def test_add_rejects_bad_score(self, repository):
        result = invoke("add", "Broken", "--score", "9")
        assert result.exit_code == 1
        assert "Error" in result.output
        assert repository.load_items("smoke") == []

    def test_show_lists_items(self, database_url):
        invoke("add", "Visible", "-s", "2")
        result = invoke("show")
        assert result.exit_code == 0, result.output
        assert "Visible" in result.output

    def test_score_shifts_day(self, repository):
        invoke("add", "Shifty", "-s", "2")
        item = only_item(repository, "Shifty")
        start = slot_of(repository, item)

        result = invoke("score", item.id[:8], "4")

        assert result.exit_code == 0, result.output
        assert slot_of(repository, only_item(repository, "Shifty")) == (start + 2) % 7

    def test_move_before_other_item(self, repository):
        invoke("add", "first", "-s", "1")
        invoke("add", "second", "-s", "1")
        first = only_item(repository, "first")
        second = only_item(repository, "second")

        result = invoke("move", second.id, "--before", first.id)

        assert result.exit_code == 0, result.output
        assert only_item(repository, "second").order_key == 0
        assert only_item(repository, "first").order_key == 1

    def test_move_needs_exactly_one_destination(self, database_url):
        result = invoke("move", "abc")
        assert result.exit_code != 0

    def test_move_to_named_column(self, repository):
        invoke("add", "traveller", "-s", "1")
        item = only_item(repository, "traveller")

        result = invoke("move", item.id, "--to", "sunday")

        assert result.exit_code == 0, result.output
        assert slot_of(repository, only_item(repository, "traveller")) == 0

    def test_archive_and_list(self, repository):
        invoke("add", "Mastered", "-s", "5", "-c", "Graphs")
        item = only_item(repository, "Mastered")

        result = invoke("archive", item.id)
        assert result.exit_code == 0, result.output
        assert only_item(repository, "Mastered").mastered

        listing = invoke("archived")
        assert "Graphs" in listing.output
        assert "Mastered" in listing.output

    def test_archive_below_top_score_asks_first(self, repository):
        invoke("add", "Not yet", "-s", "2")
        item = only_item(repository, "Not yet")

        result = invoke("archive", item.id, input="n\n")

        assert result.exit_code != 0
        assert not only_item(repository, "Not yet").mastered

    def test_unarchive(self, repository):
        invoke("add", "Back again", "-s", "5")
        item = only_item(repository, "Back again")
        invoke("archive", item.id)

        result = invoke("unarchive", item.id)

        assert result.exit_code == 0, result.output
        restored = only_item(repository, "Back again")
        assert not restored.mastered
        assert slot_of(repository, restored) == (today_ordinal() + 5) % 7

    def test_delete_with_yes(self, repository):
        invoke("add", "Doomed", "-s", "3")
        item = only_item(repository, "Doomed")
        result = invoke("delete", item.id, "--yes")
        assert result.exit_code == 0, result.output
        assert repository.load_items("smoke") == []

    def test_unknown_item(self, database_url):
        result = invoke("score", "nope", "3")
        assert result.exit_code != 0


class TestColumnCommands:
    def test_add_and_list(self, repository):
        result = invoke("columns", "add", "Backlog", "--color", "bg-pink-500")
        assert result.exit_code == 0, result.output

        listing = invoke("columns", "list")
        assert "Backlog" in listing.output
        assert len(repository.load_containers("smoke")) == 8

    def test_default_column_cannot_be_renamed(self, database_url):
        result = invoke("columns", "edit", "Monday", "--name", "Moonday")
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_move_column_to_front(self, repository):
        invoke("columns", "add", "Backlog")
        result = invoke("columns", "move", "Backlog", "--before", "Sunday")
        assert result.exit_code == 0, result.output

        first = min(repository.load_containers("smoke"), key=lambda c: c.order_key)
        assert first.name == "Backlog"

    def test_delete_empty_column(self, repository):
        invoke("columns", "add", "Scratch")
        result = invoke("columns", "delete", "Scratch", "--yes")
        assert result.exit_code == 0, result.output
        assert "Scratch" not in [c.name for c in repository.load_containers("smoke")]

    def test_delete_default_column_fails(self, database_url):
        result = invoke("columns", "delete", "Friday", "--yes")
        assert result.exit_code == 1
