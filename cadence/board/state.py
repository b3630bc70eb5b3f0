"""
Board State.

In-memory snapshot of one user's items and containers. The engine reads from
it to plan a mutation and the facade applies finished MoveResults to it.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from cadence.core.errors import ContainerNotFound, ItemNotFound
from cadence.core.models import ARCHIVE_CONTAINER_ID, Container, Item, MoveResult


class BoardState:
    """Items and containers indexed by id."""

    def __init__(
        self,
        items: Iterable[Item] = (),
        containers: Iterable[Container] = (),
    ):
        self._items: dict[str, Item] = {}
        self._containers: dict[str, Container] = {}
        self.replace_all(items, containers)

    def replace_all(self, items: Iterable[Item], containers: Iterable[Container]) -> None:
        self._items = {item.id: item for item in items}
        self._containers = {container.id: container for container in containers}

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_item(self, item_id: str) -> Item | None:
        return self._items.get(item_id)

    def get_item(self, item_id: str) -> Item:
        item = self._items.get(item_id)
        if item is None:
            raise ItemNotFound(item_id)
        return item

    def find_container(self, container_id: str) -> Container | None:
        return self._containers.get(container_id)

    def get_container(self, container_id: str) -> Container:
        container = self._containers.get(container_id)
        if container is None:
            raise ContainerNotFound(container_id)
        return container

    def has_container(self, container_id: str) -> bool:
        """True for real containers and for the archive pseudo-container."""
        return container_id == ARCHIVE_CONTAINER_ID or container_id in self._containers

    def container_for_slot(self, slot: int) -> Container | None:
        for container in self._containers.values():
            if container.slot == slot:
                return container
        return None

    # ------------------------------------------------------------------
    # Sorted views
    # ------------------------------------------------------------------

    @property
    def items(self) -> list[Item]:
        return list(self._items.values())

    def containers(self) -> list[Container]:
        """Containers in display order."""
        return sorted(self._containers.values(), key=lambda c: (c.order_key, c.created_at))

    def items_in(self, container_id: str) -> list[Item]:
        """Members of ``container_id`` sorted by order key."""
        members = [item for item in self._items.values() if item.container_id == container_id]
        return sorted(members, key=lambda item: (item.order_key, item.created_at))

    def archived_items(self) -> list[Item]:
        return self.items_in(ARCHIVE_CONTAINER_ID)

    def count_by_container(self) -> dict[str, int]:
        counts: dict[str, int] = defaultdict(int)
        for item in self._items.values():
            counts[item.container_id] += 1
        return dict(counts)

    def __len__(self) -> int:
        return len(self._items)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def apply(self, result: MoveResult) -> None:
        """Apply every change carried by ``result`` in one step."""
        for item_id in result.removed_item_ids:
            self._items.pop(item_id, None)
        for container_id in result.removed_container_ids:
            self._containers.pop(container_id, None)
        for item in result.items:
            self._items[item.id] = item
        for container in result.containers:
            self._containers[container.id] = container
