"""
Review Board Service.

The facade the UI (or the CLI) talks to. It owns the in-memory board, the
gesture normalizer, the move engine and the archive gate, and hands every
finished MoveResult to the persistence collaborator.

Flow for every mutation:
1. The engine plans a complete MoveResult (nothing is mutated yet)
2. The result is applied to the in-memory state in one step
3. The result joins the ``pending`` queue, which is flushed in commit
   order, one batch per result. A unit that fails to save stays queued
   (with everything behind it) until a later commit or ``retry_pending()``
   writes it
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from loguru import logger

from cadence.board.archive import ArchiveGate
from cadence.board.gestures import (
    DEFAULT_HOLD_MS,
    DEFAULT_JITTER_PX,
    CommittedGesture,
    DragKind,
    GestureNormalizer,
    Intent,
    PointerDragAdapter,
    TouchLongPressAdapter,
)
from cadence.board.move_engine import MoveEngine
from cadence.board.schedule import ScheduleCalculator
from cadence.board.sequencer import ContainerSequencer
from cadence.board.state import BoardState
from cadence.core.errors import (
    BoardError,
    DefaultContainerLocked,
    PersistenceFailed,
    StaleTarget,
)
from cadence.core.models import (
    DEFAULT_DAY_BUCKETS,
    ArchiveGroup,
    Container,
    DropTarget,
    Item,
    MoveKind,
    MoveResult,
    Side,
    new_id,
)
from cadence.store.repository import BatchingRepository, BoardRepository

EDITABLE_ITEM_FIELDS = frozenset({
    "title",
    "category",
    "link",
    "difficulty",
    "notes",
    "time_complexity",
    "space_complexity",
})


class ReviewBoard:
    """One user's review board."""

    def __init__(
        self,
        repository: BoardRepository,
        user_id: str = "default",
        today: Callable[[], date] | None = None,
        new_items_on_top: bool = False,
        intent_sink: Callable[[Intent], None] | None = None,
        touch_hold_ms: float = DEFAULT_HOLD_MS,
        touch_jitter_px: float = DEFAULT_JITTER_PX,
    ):
        self.repository = repository
        self.user_id = user_id
        self._today = today or date.today
        self.state = BoardState()
        self.engine = MoveEngine(self.state, new_items_on_top=new_items_on_top)
        self.archive_gate = ArchiveGate(self.state, self.engine)
        self.gestures = GestureNormalizer(sink=intent_sink)
        self.pending: list[MoveResult] = []
        self.touch_hold_ms = touch_hold_ms
        self.touch_jitter_px = touch_jitter_px

    @classmethod
    def from_settings(cls, repository: BoardRepository, settings) -> ReviewBoard:
        return cls(
            repository,
            user_id=settings.user_id,
            new_items_on_top=settings.new_items_on_top,
            touch_hold_ms=settings.touch_hold_ms,
            touch_jitter_px=settings.touch_jitter_px,
        )

    def today(self) -> date:
        return self._today()

    # ========================================================================
    # Loading
    # ========================================================================

    def load(self) -> ReviewBoard:
        """Replace the in-memory board with the persisted one."""
        items = self.repository.load_items(self.user_id)
        containers = self.repository.load_containers(self.user_id)
        self.state.replace_all(items, containers)
        logger.info(f"Loaded board for {self.user_id}: {len(containers)} container(s), {len(items)} item(s)")
        return self

    def initialize_default_containers(self) -> list[Container]:
        """
        Provision the seven day buckets for a user with an empty board.

        Does nothing once the user has any container.
        """
        if self.state.containers():
            return []

        created = [
            Container(
                id=new_id(),
                name=name,
                color=color,
                order_key=slot,
                slot=slot,
                is_default=True,
                user_id=self.user_id,
            )
            for slot, (name, color) in enumerate(DEFAULT_DAY_BUCKETS)
        ]
        self._commit(MoveResult(kind=MoveKind.CONTAINER_CREATE, containers=created))
        logger.info(f"Initialized {len(created)} default day buckets for {self.user_id}")
        return created

    # ========================================================================
    # Read views
    # ========================================================================

    def containers(self) -> list[Container]:
        return self.state.containers()

    def get_item(self, item_id: str) -> Item:
        return self.state.get_item(item_id)

    def items_by_container(self, container_id: str) -> list[Item]:
        """Items in ``container_id``, sorted by order key."""
        return self.state.items_in(container_id)

    def archive_groups(self) -> list[ArchiveGroup]:
        return self.archive_gate.groups()

    def count_by_container(self) -> dict[str, int]:
        return self.state.count_by_container()

    def offers_archive(self, item_id: str) -> bool:
        return ArchiveGate.evaluate_mastery(self.state.get_item(item_id))

    # ========================================================================
    # Gesture intents
    # ========================================================================

    def begin_move(self, entity_id: str, kind: DragKind = DragKind.ITEM, source: str = "api"):
        """Start dragging an item or a column."""
        kind = DragKind(kind)
        exists = (
            self.state.find_container(entity_id) is not None
            if kind is DragKind.CONTAINER
            else self.state.find_item(entity_id) is not None
        )
        if not exists:
            raise StaleTarget(entity_id)
        return self.gestures.begin_move(entity_id, kind, source=source)

    def hover(self, target: DropTarget, side: Side | None = None):
        return self.gestures.hover(target, side)

    def pointer_input(self) -> PointerDragAdapter:
        """Adapter for desktop drag events; pass its committed gestures to apply_gesture()."""
        return PointerDragAdapter(self.gestures)

    def touch_input(self) -> TouchLongPressAdapter:
        """Adapter for touch long-press events; pass its committed gestures to apply_gesture()."""
        return TouchLongPressAdapter(self.gestures, hold_ms=self.touch_hold_ms, jitter_px=self.touch_jitter_px)

    def cancel(self, reason: str = "cancelled"):
        return self.gestures.cancel(reason)

    def commit(self) -> MoveResult | None:
        """
        Finish the active gesture.

        Returns None when the gesture had no drop target (it is cancelled).
        """
        gesture = self.gestures.commit()
        if gesture is None:
            return None
        return self.apply_gesture(gesture)

    def apply_gesture(self, gesture: CommittedGesture) -> MoveResult:
        try:
            result = self.engine.apply_commit(gesture)
        except StaleTarget as exc:
            logger.warning(f"Dropped {gesture.entity_id} on a stale target: {exc}")
            raise
        return self._commit(result)

    def move_item(self, item_id: str, target: DropTarget, side: Side | None = None) -> MoveResult:
        """Programmatic drag of an item, through the same intent stream."""
        self.begin_move(item_id, DragKind.ITEM)
        try:
            self.hover(target, side)
        except BoardError:
            self.cancel("hover rejected")
            raise
        if self.gestures.session.last_hover is None:
            # Dropped onto itself
            self.cancel("dropped onto itself")
            return MoveResult.noop(item_id)
        return self.commit()

    def reorder_container(self, container_id: str, target_id: str, side: Side) -> MoveResult:
        """Programmatic drag of a column onto one side of another."""
        self.begin_move(container_id, DragKind.CONTAINER)
        self.hover(DropTarget(target_id), side)
        if self.gestures.session.last_hover is None:
            self.cancel("dropped onto itself")
            return MoveResult.noop(container_id)
        return self.commit()

    def move_container_to(self, container_id: str, new_order: int) -> MoveResult:
        return self._commit(self.engine.move_container_to_index(container_id, new_order))

    # ========================================================================
    # Item lifecycle
    # ========================================================================

    def create_item(self, title: str, score: int, category: str | None = None, **extras) -> Item:
        """
        Create an item and schedule it ``score`` days from today.

        Raises:
            InvalidScore: For scores outside 1..5
        """
        ScheduleCalculator.validate_score(score)
        title = title.strip()
        if not title:
            raise BoardError("Item title is required")
        unknown = set(extras) - EDITABLE_ITEM_FIELDS
        if unknown:
            raise BoardError(f"Unknown item field(s): {', '.join(sorted(unknown))}")

        item = Item(
            id=new_id(),
            title=title,
            score=score,
            container_id="",
            user_id=self.user_id,
            category=category or None,
            **extras,
        )
        result = self._commit(self.engine.place_new_item(item, self.today()))
        return result.item(item.id)

    def apply_score_change(self, item_id: str, new_score: int) -> MoveResult:
        """Re-score an item; scheduled items shift by the score delta."""
        return self._commit(self.engine.apply_score_change(item_id, new_score, self.today()))

    def update_item(self, item_id: str, score: int | None = None, **fields) -> Item:
        """
        Edit an item's fields, rescheduling it when the score changes.

        The field edit and any resulting move are persisted together.
        """
        unknown = set(fields) - EDITABLE_ITEM_FIELDS
        if unknown:
            raise BoardError(f"Unknown item field(s): {', '.join(sorted(unknown))}")
        if "title" in fields and not (fields["title"] or "").strip():
            raise BoardError("Item title is required")

        item = self.state.get_item(item_id)
        if score is not None and score != item.score:
            result = self.engine.apply_score_change(item_id, score, self.today())
            result.items = [
                other.evolve(**fields) if other.id == item_id else other for other in result.items
            ]
        else:
            result = MoveResult(kind=MoveKind.EDIT, subject_id=item_id)
            if fields:
                result.items = [item.evolve(**fields)]

        self._commit(result)
        return self.state.get_item(item_id)

    def delete_item(self, item_id: str) -> MoveResult:
        return self._commit(self.engine.remove_item(item_id))

    def archive(self, item_id: str) -> MoveResult:
        return self._commit(self.archive_gate.archive(item_id))

    def unarchive(self, item_id: str) -> MoveResult:
        return self._commit(self.archive_gate.unarchive(item_id, self.today()))

    # ========================================================================
    # Container lifecycle
    # ========================================================================

    def create_container(self, name: str, color: str = "bg-gray-500") -> Container:
        """Add a custom column at the end of the board."""
        name = name.strip()
        if not name:
            raise BoardError("Column name is required")

        sequencer = ContainerSequencer(self.state.containers())
        container = Container(id=new_id(), name=name, color=color, user_id=self.user_id)
        sequencer.append(container.id)
        keys = sequencer.renumber()

        changed = [
            c.evolve(order_key=keys[c.id]) for c in self.state.containers() if c.order_key != keys[c.id]
        ]
        changed.append(container.evolve(order_key=keys[container.id]))
        self._commit(MoveResult(kind=MoveKind.CONTAINER_CREATE, subject_id=container.id, containers=changed))
        return self.state.get_container(container.id)

    def update_container(self, container_id: str, name: str | None = None, color: str | None = None) -> Container:
        """
        Rename or recolour a column. Day buckets may be recoloured only.
        """
        container = self.state.get_container(container_id)
        changes = {}
        if name is not None and name.strip() != container.name:
            if container.is_default:
                raise DefaultContainerLocked(f"Cannot rename default container {container.name!r}")
            if not name.strip():
                raise BoardError("Column name is required")
            changes["name"] = name.strip()
        if color is not None and color != container.color:
            changes["color"] = color

        if changes:
            self._commit(
                MoveResult(
                    kind=MoveKind.CONTAINER_EDIT,
                    subject_id=container_id,
                    containers=[container.evolve(**changes)],
                )
            )
        return self.state.get_container(container_id)

    def delete_container(self, container_id: str) -> MoveResult:
        """
        Delete an empty custom column and close the gap in column order.

        Raises:
            DefaultContainerLocked: For a day bucket
            OrphanedContainerDeletion: While the column still holds items
        """
        container = self.state.get_container(container_id)
        ContainerSequencer.ensure_deletable(container, len(self.state.items_in(container_id)))

        sequencer = ContainerSequencer(self.state.containers())
        sequencer.remove(container_id)
        keys = sequencer.renumber()
        changed = [
            c.evolve(order_key=keys[c.id])
            for c in self.state.containers()
            if c.id in keys and c.order_key != keys[c.id]
        ]
        return self._commit(
            MoveResult(
                kind=MoveKind.CONTAINER_DELETE,
                subject_id=container_id,
                containers=changed,
                removed_container_ids=[container_id],
            )
        )

    # ========================================================================
    # Commit & persistence
    # ========================================================================

    def _commit(self, result: MoveResult) -> MoveResult:
        """Apply ``result`` in memory, then persist it as one unit."""
        if result.is_noop:
            return result
        self.state.apply(result)
        logger.info(f"Committed {result.summary()}")
        self.pending.append(result)
        self._flush()
        return result

    def _persist(self, result: MoveResult) -> None:
        try:
            if isinstance(self.repository, BatchingRepository):
                self.repository.save_batch(
                    result.items,
                    result.containers,
                    deleted_item_ids=result.removed_item_ids,
                    deleted_container_ids=result.removed_container_ids,
                )
            else:
                # Per-entity writes carry final values, so any order is safe to repeat
                for item_id in result.removed_item_ids:
                    self.repository.delete_item(item_id)
                for container_id in result.removed_container_ids:
                    self.repository.delete_container(container_id)
                for item in result.items:
                    self.repository.save_item(item)
                for container in result.containers:
                    self.repository.save_container(container)
        except Exception as exc:  # Intentionally broad - any storage failure keeps the unit pending
            logger.error(f"Failed to persist {result.kind.value} of {result.subject_id}: {exc}")
            raise PersistenceFailed(result, exc) from exc

    def _flush(self) -> list[MoveResult]:
        """
        Persist queued results oldest first.

        Stops at the first failure, leaving that unit and every later one
        queued so storage never receives a result ahead of an earlier one.
        """
        written = []
        while self.pending:
            result = self.pending[0]
            self._persist(result)
            self.pending.pop(0)
            written.append(result)
        return written

    def retry_pending(self) -> list[MoveResult]:
        """Re-persist every result that failed to save, in commit order."""
        if not self.pending:
            return []
        logger.info(f"Retrying persistence of {len(self.pending)} pending result(s)")
        return self._flush()
