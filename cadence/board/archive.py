"""
Archive Gate.

Mastered items leave the cyclic board for a permanent archive grouped by
category. Reaching the top score only *offers* archiving; the move itself
always needs an explicit user action.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from loguru import logger

from cadence.board.move_engine import MoveEngine
from cadence.board.schedule import today_ordinal
from cadence.board.state import BoardState
from cadence.core.models import (
    ARCHIVE_CONTAINER_ID,
    MAX_SCORE,
    UNCATEGORIZED,
    ArchiveGroup,
    Item,
    MoveKind,
    MoveResult,
)


def category_of(item: Item) -> str:
    category = (item.category or "").strip()
    return category or UNCATEGORIZED


def build_archive_groups(items: Iterable[Item]) -> list[ArchiveGroup]:
    """
    Group archived items by category.

    Real categories sort alphabetically (case-insensitive); the
    Uncategorized group, when present, always comes last. Items keep the
    order they were given in.
    """
    groups: dict[str, ArchiveGroup] = {}
    for item in items:
        name = category_of(item)
        groups.setdefault(name, ArchiveGroup(category=name)).items.append(item)

    return sorted(
        groups.values(),
        key=lambda group: (group.is_uncategorized, group.category.casefold(), group.category),
    )


class ArchiveGate:
    """Mastery offer rule plus archive / unarchive transitions."""

    def __init__(self, state: BoardState, engine: MoveEngine):
        self.state = state
        self.engine = engine

    @staticmethod
    def evaluate_mastery(item: Item) -> bool:
        """Should the UI offer to archive ``item``?"""
        return item.score == MAX_SCORE and not item.mastered

    def archive(self, item_id: str) -> MoveResult:
        """Retire ``item_id`` into the archive. Already-mastered items are left alone."""
        item = self.state.get_item(item_id)
        if item.mastered and item.is_archived:
            return MoveResult.noop(item_id)

        logger.info(f"Archiving {item_id} ({category_of(item)})")
        return self.engine.transfer(item_id, ARCHIVE_CONTAINER_ID, kind=MoveKind.ARCHIVE, mastered=True)

    def unarchive(self, item_id: str, today: date | None = None) -> MoveResult:
        """
        Return ``item_id`` to the board.

        The bucket is computed afresh from the item's score and *today*,
        exactly as if the item were being created now.
        """
        item = self.state.get_item(item_id)
        if not item.mastered and not item.is_archived:
            return MoveResult.noop(item_id)

        slot = self.engine.calculator.target_ordinal(today_ordinal(today), item.score)
        destination = self.engine.slot_container(slot)
        logger.info(f"Unarchiving {item_id} onto {destination.name}")
        return self.engine.transfer(item_id, destination.id, kind=MoveKind.UNARCHIVE, mastered=False)

    def groups(self) -> list[ArchiveGroup]:
        return build_archive_groups(self.state.archived_items())
