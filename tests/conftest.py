"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import date
from pathlib import Path

import pytest

# Add project root (and this directory, for board_helpers) to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))
sys.path.insert(0, str(Path(__file__).parent))

from board_helpers import WEDNESDAY  # noqa: E402
from cadence.board.service import ReviewBoard  # noqa: E402
from cadence.store.memory import InMemoryRepository  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (use a SQLite file)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def repository():
    """Fresh in-memory repository."""
    return InMemoryRepository()


@pytest.fixture
def make_board(repository):
    """Factory for a provisioned board whose 'today' is fixed."""

    def _make(today: date = WEDNESDAY, **kwargs) -> ReviewBoard:
        board = ReviewBoard(repository, user_id="tester", today=lambda: today, **kwargs)
        board.initialize_default_containers()
        return board

    return _make


@pytest.fixture
def board(make_board):
    """Board on a Wednesday (ordinal 3)."""
    return make_board()
