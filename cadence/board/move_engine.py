"""
Move Engine.

Turns committed intents into MoveResults:

- Same-container reorder: insert next to the hovered item, renumber once.
- Cross-container transfer: remove from the old container, insert (next to
  the hovered item, or at the end for a bare container drop) in the new one,
  renumber both.
- Container reorder: delegated to the ContainerSequencer.
- Score change: routed through the ScheduleCalculator, then a transfer.

The engine never touches BoardState. It plans against throwaway
OrderedCollections and returns new Item/Container snapshots; the caller
applies the whole result at once, so a failed plan leaves nothing behind.
"""

from __future__ import annotations

from datetime import date

from loguru import logger

from cadence.board.gestures import CommittedGesture, DragKind
from cadence.board.ordering import OrderedCollection
from cadence.board.schedule import ScheduleCalculator, today_ordinal
from cadence.board.sequencer import ContainerSequencer
from cadence.board.state import BoardState
from cadence.core.errors import ContainerNotFound, ReferenceNotFound, StaleTarget
from cadence.core.models import (
    ARCHIVE_CONTAINER_ID,
    Container,
    DropTarget,
    Item,
    MoveKind,
    MoveResult,
    Side,
    utcnow,
)


class MoveEngine:
    """Plans every order-affecting board mutation."""

    def __init__(self, state: BoardState, new_items_on_top: bool = False):
        self.state = state
        self.calculator = ScheduleCalculator()
        self.new_items_on_top = new_items_on_top

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _collection(self, container_id: str) -> OrderedCollection:
        return OrderedCollection.from_members(
            ((item.id, item.order_key) for item in self.state.items_in(container_id)),
            name=container_id,
        )

    def _assign(
        self,
        container_id: str,
        keys: dict[str, int],
        overrides: dict[str, Item] | None = None,
    ) -> list[Item]:
        """Snapshots for members whose key or container changed."""
        overrides = overrides or {}
        now = utcnow()
        changed = []
        for item_id, key in keys.items():
            item = overrides.get(item_id) or self.state.get_item(item_id)
            if item_id in overrides or item.order_key != key or item.container_id != container_id:
                changed.append(item.evolve(order_key=key, container_id=container_id, updated_at=now))
        return changed

    def slot_container(self, slot: int) -> Container:
        container = self.state.container_for_slot(slot)
        if container is None:
            raise ContainerNotFound(f"day-{slot}")
        return container

    def _place(self, collection: OrderedCollection, item_id: str, anchor: str | None, side: Side | None) -> None:
        if anchor is None:
            collection.append(item_id)
        else:
            collection.insert_relative_to(item_id, anchor, side or Side.AFTER)

    # ------------------------------------------------------------------
    # Item moves
    # ------------------------------------------------------------------

    def apply_move(self, item_id: str, target: DropTarget, side: Side | None = None) -> MoveResult:
        """
        Move ``item_id`` to ``target``.

        Args:
            item_id: Item being dragged
            target: Hovered item, or bare container for "append to end"
            side: Side of the hovered item (ignored for bare containers)

        Raises:
            StaleTarget: If the item or the target has vanished
        """
        item = self.state.find_item(item_id)
        if item is None or item.is_archived:
            raise StaleTarget(item_id)

        if target.item_id is not None:
            if target.item_id == item_id:
                return MoveResult.noop(item_id)
            reference = self.state.find_item(target.item_id)
            if reference is None or reference.is_archived:
                raise StaleTarget(target.item_id)
            destination = reference.container_id
        else:
            container = self.state.find_container(target.container_id)
            if container is None:
                raise StaleTarget(target.container_id)
            destination = container.id

        if destination == item.container_id:
            return self._reorder(item, destination, target.item_id, side)
        return self._transfer(item, destination, target.item_id, side, kind=MoveKind.TRANSFER)

    def _reorder(self, item: Item, container_id: str, anchor: str | None, side: Side | None) -> MoveResult:
        collection = self._collection(container_id)
        try:
            self._place(collection, item.id, anchor, side)
        except ReferenceNotFound as exc:
            raise StaleTarget(exc.reference_id) from exc
        changed = self._assign(container_id, collection.renumber())

        logger.info(f"Reordered {item.id} within {container_id} ({len(changed)} key(s) changed)")
        return MoveResult(
            kind=MoveKind.REORDER,
            subject_id=item.id,
            items=changed,
            affected_container_ids=[container_id],
        )

    def _transfer(
        self,
        item: Item,
        destination: str,
        anchor: str | None = None,
        side: Side | None = None,
        kind: MoveKind = MoveKind.TRANSFER,
        **updates,
    ) -> MoveResult:
        """Move ``item`` into ``destination``, applying ``updates`` to it."""
        if not self.state.has_container(destination):
            raise StaleTarget(destination)

        source = self._collection(item.container_id)
        if item.id in source:
            source.remove(item.id)
        target = self._collection(destination)
        try:
            self._place(target, item.id, anchor, side)
        except ReferenceNotFound as exc:
            raise StaleTarget(exc.reference_id) from exc

        moved = item.evolve(container_id=destination, **updates)
        changed = self._assign(item.container_id, source.renumber())
        changed += self._assign(destination, target.renumber(), overrides={item.id: moved})

        logger.info(f"Moved {item.id}: {item.container_id} -> {destination} ({kind.value})")
        return MoveResult(
            kind=kind,
            subject_id=item.id,
            items=changed,
            affected_container_ids=[item.container_id, destination],
        )

    def transfer(self, item_id: str, destination: str, kind: MoveKind = MoveKind.TRANSFER, **updates) -> MoveResult:
        """Append ``item_id`` to the end of ``destination``."""
        item = self.state.get_item(item_id)
        if destination == item.container_id:
            if not updates:
                return MoveResult.noop(item_id)
            return MoveResult(
                kind=kind,
                subject_id=item_id,
                items=[item.evolve(**updates)],
                affected_container_ids=[destination],
            )
        return self._transfer(item, destination, kind=kind, **updates)

    def remove_item(self, item_id: str) -> MoveResult:
        """Delete ``item_id`` and close the gap it leaves."""
        item = self.state.get_item(item_id)
        collection = self._collection(item.container_id)
        collection.remove(item_id)
        changed = self._assign(item.container_id, collection.renumber())
        return MoveResult(
            kind=MoveKind.DELETE,
            subject_id=item_id,
            items=changed,
            removed_item_ids=[item_id],
            affected_container_ids=[item.container_id],
        )

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def place_new_item(self, item: Item, today: date | None = None) -> MoveResult:
        """
        Schedule a brand-new item from its score and today's day.

        The item lands at the end of its bucket (or the top, when
        ``new_items_on_top`` is set).
        """
        slot = self.calculator.target_ordinal(today_ordinal(today), item.score)
        container = self.slot_container(slot)

        collection = self._collection(container.id)
        first = collection.ordered_ids()[:1]
        if self.new_items_on_top and first:
            collection.insert_relative_to(item.id, first[0], Side.BEFORE)
        else:
            collection.append(item.id)

        placed = item.evolve(container_id=container.id, mastered=False)
        changed = self._assign(container.id, collection.renumber(), overrides={item.id: placed})
        logger.info(f"Scheduled new item {item.id} (score {item.score}) on {container.name}")
        return MoveResult(
            kind=MoveKind.CREATE,
            subject_id=item.id,
            items=changed,
            affected_container_ids=[container.id],
        )

    def apply_score_change(self, item_id: str, new_score: int, today: date | None = None) -> MoveResult:
        """
        Re-score an item and move it to the bucket the change implies.

        Scheduled items shift from their current bucket by the score delta.
        Items in a column without a day slot are scheduled from today.
        Archived items keep their place; only the score changes.
        """
        self.calculator.validate_score(new_score)
        item = self.state.get_item(item_id)
        if new_score == item.score:
            return MoveResult.noop(item_id)

        if item.is_archived:
            return self.transfer(item_id, ARCHIVE_CONTAINER_ID, kind=MoveKind.EDIT, score=new_score)

        current = self.state.get_container(item.container_id)
        if current.slot is not None:
            slot = self.calculator.shift_ordinal(current.slot, item.score, new_score)
        else:
            slot = self.calculator.target_ordinal(today_ordinal(today), new_score)
        destination = self.slot_container(slot)

        logger.info(f"Score of {item_id}: {item.score} -> {new_score}, due on {destination.name}")
        return self.transfer(item_id, destination.id, kind=MoveKind.RESCHEDULE, score=new_score)

    # ------------------------------------------------------------------
    # Container moves
    # ------------------------------------------------------------------

    def _container_result(self, container_id: str, keys: dict[str, int]) -> MoveResult:
        now = utcnow()
        changed = []
        for cid, key in keys.items():
            container = self.state.get_container(cid)
            if container.order_key != key:
                changed.append(container.evolve(order_key=key, updated_at=now))
        return MoveResult(
            kind=MoveKind.CONTAINER_REORDER,
            subject_id=container_id,
            containers=changed,
        )

    def apply_container_move(self, container_id: str, target_id: str, side: Side) -> MoveResult:
        """Drop a column on one side of another column."""
        if self.state.find_container(container_id) is None:
            raise StaleTarget(container_id)
        if self.state.find_container(target_id) is None:
            raise StaleTarget(target_id)
        if container_id == target_id:
            return MoveResult.noop(container_id)

        sequencer = ContainerSequencer(self.state.containers())
        keys = sequencer.reorder(container_id, target_id, side)
        result = self._container_result(container_id, keys)
        logger.info(f"Moved column {container_id} {Side(side).value} {target_id}")
        return result

    def move_container_to_index(self, container_id: str, new_order: int) -> MoveResult:
        if self.state.find_container(container_id) is None:
            raise StaleTarget(container_id)
        sequencer = ContainerSequencer(self.state.containers())
        return self._container_result(container_id, sequencer.move_to_index(container_id, new_order))

    # ------------------------------------------------------------------
    # Gesture dispatch
    # ------------------------------------------------------------------

    def apply_commit(self, gesture: CommittedGesture) -> MoveResult:
        """Route a committed gesture to the matching move."""
        if gesture.kind is DragKind.CONTAINER:
            return self.apply_container_move(
                gesture.entity_id,
                gesture.target.container_id,
                gesture.side or Side.AFTER,
            )
        return self.apply_move(gesture.entity_id, gesture.target, gesture.side)
