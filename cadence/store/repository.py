"""
Persistence interface consumed by the board.

The board never assumes a storage engine. Anything implementing
BoardRepository can back it; repositories that also implement ``save_batch``
get each MoveResult written as one unit.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from cadence.core.models import Container, Item


@runtime_checkable
class BoardRepository(Protocol):
    def load_items(self, user_id: str) -> list[Item]: ...

    def load_containers(self, user_id: str) -> list[Container]: ...

    def save_item(self, item: Item) -> None: ...

    def save_container(self, container: Container) -> None: ...

    def delete_item(self, item_id: str) -> None: ...

    def delete_container(self, container_id: str) -> None: ...


@runtime_checkable
class BatchingRepository(BoardRepository, Protocol):
    def save_batch(
        self,
        items: Sequence[Item],
        containers: Sequence[Container],
        deleted_item_ids: Sequence[str] = (),
        deleted_container_ids: Sequence[str] = (),
    ) -> None: ...
