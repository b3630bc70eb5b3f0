"""
Gesture Normalization.

Two physical input paths drive the board:

- Pointer drag-and-drop: the move begins as soon as the drag starts.
- Touch long-press: the move begins once a finger has rested on an item for
  ``hold_ms`` without drifting further than ``jitter_px``.

Each path has its own adapter, and both feed one GestureNormalizer, which
emits the same four intents regardless of where they came from:

    BeginMove(entity_id) -> Hover(target, side)* -> Commit() | Cancel()

The rendering layer reports what is under the pointer as ``Hit`` values
(structured DropTarget plus bounding box), topmost first. Adapters never
inspect presentation markup.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Union

from loguru import logger

from cadence.core.errors import MoveAlreadyInProgress, NoGestureInProgress
from cadence.core.models import DropTarget, Side, utcnow

DEFAULT_HOLD_MS = 300
DEFAULT_JITTER_PX = 10.0


class DragKind(str, Enum):
    """What is being dragged."""

    ITEM = "item"
    CONTAINER = "container"


class GestureState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    HOVERING = "hovering"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


# ============================================================================
# Intents
# ============================================================================


@dataclass(frozen=True)
class BeginMove:
    entity_id: str
    kind: DragKind = DragKind.ITEM


@dataclass(frozen=True)
class Hover:
    target: DropTarget
    side: Side | None = None  # None: bare container, append to end


@dataclass(frozen=True)
class Commit:
    pass


@dataclass(frozen=True)
class Cancel:
    reason: str = ""


Intent = Union[BeginMove, Hover, Commit, Cancel]


@dataclass
class GestureSession:
    """The one gesture currently in flight."""

    entity_id: str
    kind: DragKind
    source: str = "api"
    state: GestureState = GestureState.DRAGGING
    last_hover: Hover | None = None
    started_at: datetime = field(default_factory=utcnow)

    @property
    def active(self) -> bool:
        return self.state in (GestureState.DRAGGING, GestureState.HOVERING)

    @property
    def elapsed_ms(self) -> float:
        return (utcnow() - self.started_at).total_seconds() * 1000


@dataclass(frozen=True)
class CommittedGesture:
    """A finished gesture, ready for the MoveEngine."""

    entity_id: str
    kind: DragKind
    target: DropTarget
    side: Side | None


# ============================================================================
# Normalizer
# ============================================================================


class GestureNormalizer:
    """
    State machine for a single gesture at a time.

    Intents are returned to the caller and also pushed to ``sink`` when one
    is supplied.
    """

    def __init__(self, sink: Callable[[Intent], None] | None = None):
        self._sink = sink
        self._session: GestureSession | None = None
        self.last_session: GestureSession | None = None

    @property
    def session(self) -> GestureSession | None:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None and self._session.active

    @property
    def state(self) -> GestureState:
        if self._session is None:
            return GestureState.IDLE
        return self._session.state

    def _emit(self, intent: Intent) -> Intent:
        if self._sink is not None:
            self._sink(intent)
        return intent

    def _require_session(self) -> GestureSession:
        if self._session is None:
            raise NoGestureInProgress("No gesture is in progress")
        return self._session

    def _finish(self, state: GestureState) -> GestureSession:
        session = self._require_session()
        session.state = state
        self.last_session = session
        self._session = None
        return session

    def begin_move(
        self,
        entity_id: str,
        kind: DragKind = DragKind.ITEM,
        source: str = "api",
    ) -> BeginMove:
        """
        Start a gesture on ``entity_id``.

        Raises:
            MoveAlreadyInProgress: While another gesture is active
        """
        if self.is_active:
            logger.warning(
                f"Rejected {source} move of {entity_id}: "
                f"{self._session.entity_id} is still being dragged"
            )
            raise MoveAlreadyInProgress(self._session.entity_id)

        self._session = GestureSession(entity_id=entity_id, kind=DragKind(kind), source=source)
        logger.debug(f"Gesture started ({source}): {kind} {entity_id}")
        return self._emit(BeginMove(entity_id, DragKind(kind)))

    def hover(self, target: DropTarget, side: Side | None = None) -> Hover | None:
        """
        Record what the gesture is over.

        Returns the emitted Hover, or None when nothing changed or the
        target is the dragged entity itself.
        """
        session = self._require_session()
        hover = self._normalize(session, target, side)
        if hover is None or hover == session.last_hover:
            return None

        session.last_hover = hover
        session.state = GestureState.HOVERING
        return self._emit(hover)

    def clear_hover(self) -> None:
        """Forget the current target (pointer left every drop zone)."""
        session = self._require_session()
        session.last_hover = None
        session.state = GestureState.DRAGGING

    def commit(self) -> CommittedGesture | None:
        """
        Release over the last hovered target.

        A release with no valid target cancels the gesture instead and
        returns None.
        """
        session = self._require_session()
        hover = session.last_hover
        if hover is None:
            self.cancel("released without a drop target")
            return None

        self._finish(GestureState.COMMITTED)
        self._emit(Commit())
        logger.debug(
            f"Gesture committed: {session.entity_id} -> {hover.target.key} "
            f"after {session.elapsed_ms:.0f} ms"
        )
        return CommittedGesture(
            entity_id=session.entity_id,
            kind=session.kind,
            target=hover.target,
            side=hover.side,
        )

    def cancel(self, reason: str = "cancelled") -> Cancel | None:
        """Abandon the active gesture. Without one, this does nothing."""
        if self._session is None:
            return None
        session = self._finish(GestureState.CANCELLED)
        logger.debug(f"Gesture cancelled: {session.entity_id} ({reason}) after {session.elapsed_ms:.0f} ms")
        return self._emit(Cancel(reason))

    @staticmethod
    def _normalize(session: GestureSession, target: DropTarget, side: Side | None) -> Hover | None:
        if session.kind is DragKind.CONTAINER:
            # Columns only ever drop relative to other columns
            if target.container_id == session.entity_id:
                return None
            return Hover(DropTarget(target.container_id), Side(side or Side.AFTER))

        if target.item_id == session.entity_id:
            return None
        if target.item_id is None:
            return Hover(DropTarget(target.container_id), None)
        return Hover(target, Side(side or Side.AFTER))


# ============================================================================
# Input adapters
# ============================================================================


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def mid_x(self) -> float:
        return self.left + self.width / 2

    @property
    def mid_y(self) -> float:
        return self.top + self.height / 2


@dataclass(frozen=True)
class Hit:
    """One tagged element under the pointer, as reported by the renderer."""

    target: DropTarget
    rect: Rect | None = None


def resolve_side(hit: Hit, x: float, y: float, kind: DragKind) -> Side | None:
    """
    Which half of the hit element the pointer is over.

    Items stack vertically, so item targets compare ``y`` with the vertical
    midpoint; columns sit side by side, so container drags compare ``x``.
    """
    if kind is DragKind.CONTAINER:
        if hit.rect is None:
            return Side.AFTER
        return Side.BEFORE if x < hit.rect.mid_x else Side.AFTER
    if hit.target.item_id is None:
        return None
    if hit.rect is None:
        return Side.AFTER
    return Side.BEFORE if y < hit.rect.mid_y else Side.AFTER


class _AdapterBase:
    source = "api"

    def __init__(self, normalizer: GestureNormalizer):
        self.normalizer = normalizer

    def _track(self, hits: Sequence[Hit], x: float, y: float) -> Hover | None:
        session = self.normalizer.session
        if session is None:
            return None

        hit = self._pick(hits, session)
        if hit is None:
            self.normalizer.clear_hover()
            return None
        if hit.target.item_id is not None and hit.target.item_id == session.entity_id:
            # Over the dragged item itself: keep the previous target
            return None

        side = resolve_side(hit, x, y, session.kind)
        return self.normalizer.hover(hit.target, side)

    @staticmethod
    def _pick(hits: Sequence[Hit], session: GestureSession) -> Hit | None:
        if not hits:
            return None
        topmost = hits[0]
        if session.kind is DragKind.CONTAINER:
            # Items inside a column resolve to the column itself
            for hit in hits:
                if hit.target.item_id is None:
                    return hit
            return Hit(DropTarget(topmost.target.container_id), None)
        return topmost


class PointerDragAdapter(_AdapterBase):
    """Desktop drag-and-drop events."""

    source = "pointer"

    def on_drag_start(self, entity_id: str, kind: DragKind = DragKind.ITEM) -> BeginMove:
        return self.normalizer.begin_move(entity_id, kind, source=self.source)

    def on_drag_over(self, hits: Sequence[Hit], x: float, y: float) -> Hover | None:
        return self._track(hits, x, y)

    def on_drop(self) -> CommittedGesture | None:
        if self.normalizer.session is None:
            return None
        return self.normalizer.commit()

    def on_drag_end(self) -> Cancel | None:
        """Drag finished without a drop (or after one, which is harmless)."""
        return self.normalizer.cancel("drag ended without a drop")

    def on_escape(self) -> Cancel | None:
        return self.normalizer.cancel("escape")


@dataclass
class _PendingPress:
    entity_id: str
    kind: DragKind
    x: float
    y: float
    started_ms: float


class TouchLongPressAdapter(_AdapterBase):
    """
    Touch events with long-press activation.

    There is no real timer: the host calls ``poll(now_ms)`` (or any touch
    event does it implicitly) and the press turns into a move once it has
    been held for ``hold_ms``.
    """

    source = "touch"

    def __init__(
        self,
        normalizer: GestureNormalizer,
        hold_ms: float = DEFAULT_HOLD_MS,
        jitter_px: float = DEFAULT_JITTER_PX,
    ):
        super().__init__(normalizer)
        self.hold_ms = hold_ms
        self.jitter_px = jitter_px
        self._pending: _PendingPress | None = None
        self._dragging = False

    @property
    def dragging(self) -> bool:
        return self._dragging

    def on_touch_start(
        self,
        entity_id: str,
        x: float,
        y: float,
        timestamp_ms: float,
        kind: DragKind = DragKind.ITEM,
    ) -> None:
        self._pending = _PendingPress(entity_id, DragKind(kind), x, y, timestamp_ms)
        self._dragging = False

    def poll(self, timestamp_ms: float) -> BeginMove | None:
        """Fire the long-press once the hold threshold has elapsed."""
        pending = self._pending
        if pending is None or self._dragging:
            return None
        if timestamp_ms - pending.started_ms < self.hold_ms:
            return None

        self._pending = None
        intent = self.normalizer.begin_move(pending.entity_id, pending.kind, source=self.source)
        self._dragging = True
        return intent

    def on_touch_move(
        self,
        x: float,
        y: float,
        timestamp_ms: float,
        hits: Sequence[Hit] = (),
    ) -> Hover | None:
        if not self._dragging:
            pending = self._pending
            if pending is None:
                return None
            if self.poll(timestamp_ms) is None:
                if math.hypot(x - pending.x, y - pending.y) > self.jitter_px:
                    # Finger moved too far: this is a scroll, not a press
                    logger.debug(f"Long-press on {pending.entity_id} abandoned (moved)")
                    self._pending = None
                return None
        return self._track(hits, x, y)

    def on_touch_end(self, timestamp_ms: float) -> CommittedGesture | None:
        self.poll(timestamp_ms)
        self._pending = None
        if not self._dragging:
            return None
        self._dragging = False
        if self.normalizer.session is None:
            return None
        return self.normalizer.commit()

    def on_touch_cancel(self) -> Cancel | None:
        self._pending = None
        was_dragging = self._dragging
        self._dragging = False
        if not was_dragging:
            return None
        return self.normalizer.cancel("touch cancelled")
