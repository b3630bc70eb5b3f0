"""
Container Sequencer.

Orders the board's containers (the seven day buckets plus any user-defined
columns) with the same before/after primitive used for items.
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from cadence.board.ordering import OrderedCollection
from cadence.core.errors import DefaultContainerLocked, OrphanedContainerDeletion
from cadence.core.models import Container, Side


class ContainerSequencer:
    """Display order of containers, backed by an OrderedCollection."""

    def __init__(self, containers: Iterable[Container]):
        self._collection = OrderedCollection.from_members(
            ((c.id, c.order_key) for c in containers), name="containers"
        )

    def __contains__(self, container_id: object) -> bool:
        return container_id in self._collection

    def __len__(self) -> int:
        return len(self._collection)

    def ordered_ids(self) -> list[str]:
        return self._collection.ordered_ids()

    def append(self, container_id: str) -> int:
        return self._collection.append(container_id)

    def remove(self, container_id: str) -> int:
        return self._collection.remove(container_id)

    def insert_relative_to(self, container_id: str, target_id: str, side: Side) -> int:
        return self._collection.insert_relative_to(container_id, target_id, side)

    def renumber(self) -> dict[str, int]:
        return self._collection.renumber()

    def reorder(self, container_id: str, target_id: str, side: Side) -> dict[str, int]:
        """
        Drop ``container_id`` on one side of ``target_id``.

        Returns:
            Dense display keys for every container
        """
        self._collection.insert_relative_to(container_id, target_id, side)
        keys = self._collection.renumber()
        logger.debug(f"Container {container_id} placed {Side(side).value} {target_id}")
        return keys

    def move_to_index(self, container_id: str, new_order: int) -> dict[str, int]:
        """
        Move ``container_id`` to display position ``new_order``.

        Out-of-range positions are clamped to the first or last slot.
        """
        self._collection.move_to_index(container_id, new_order)
        return self._collection.renumber()

    @staticmethod
    def ensure_deletable(container: Container, item_count: int) -> None:
        """
        Refuse deletions that would break the board.

        Raises:
            DefaultContainerLocked: For one of the seven day buckets
            OrphanedContainerDeletion: While the container still holds items
        """
        if not container.removable:
            raise DefaultContainerLocked(f"Cannot delete default container {container.name!r}")
        if item_count:
            raise OrphanedContainerDeletion(container.id, item_count)
