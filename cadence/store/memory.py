"""
In-memory repository.

Stores copies so that callers mutating their own objects never leak into
"persisted" state. Used by tests and throwaway boards.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from cadence.core.models import Container, Item


class InMemoryRepository:
    def __init__(self):
        self.items: dict[str, Item] = {}
        self.containers: dict[str, Container] = {}
        self.writes = 0

    def load_items(self, user_id: str) -> list[Item]:
        return [replace(i) for i in self.items.values() if i.user_id == user_id]

    def load_containers(self, user_id: str) -> list[Container]:
        return [replace(c) for c in self.containers.values() if c.user_id == user_id]

    def save_item(self, item: Item) -> None:
        self.items[item.id] = replace(item)
        self.writes += 1

    def save_container(self, container: Container) -> None:
        self.containers[container.id] = replace(container)
        self.writes += 1

    def delete_item(self, item_id: str) -> None:
        self.items.pop(item_id, None)
        self.writes += 1

    def delete_container(self, container_id: str) -> None:
        self.containers.pop(container_id, None)
        self.writes += 1

    def save_batch(
        self,
        items: Sequence[Item],
        containers: Sequence[Container],
        deleted_item_ids: Sequence[str] = (),
        deleted_container_ids: Sequence[str] = (),
    ) -> None:
        # Stage first so a bad entry cannot leave half a batch behind
        staged_items = dict(self.items)
        staged_containers = dict(self.containers)
        for item_id in deleted_item_ids:
            staged_items.pop(item_id, None)
        for container_id in deleted_container_ids:
            staged_containers.pop(container_id, None)
        for item in items:
            staged_items[item.id] = replace(item)
        for container in containers:
            staged_containers[container.id] = replace(container)

        self.items = staged_items
        self.containers = staged_containers
        self.writes += 1
