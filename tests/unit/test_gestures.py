"""
Unit tests for gesture normalization.

Tests:
- GestureNormalizer state machine and hover de-duplication
- PointerDragAdapter and TouchLongPressAdapter hit resolution
- Both input paths producing the same intent stream
"""

from datetime import timedelta

import pytest
from loguru import logger

from cadence.board.gestures import (
    BeginMove,
    Cancel,
    Commit,
    CommittedGesture,
    DragKind,
    GestureNormalizer,
    GestureSession,
    GestureState,
    Hit,
    Hover,
    PointerDragAdapter,
    Rect,
    TouchLongPressAdapter,
    resolve_side,
)
from cadence.core.errors import MoveAlreadyInProgress, NoGestureInProgress
from cadence.core.models import DropTarget, Side, utcnow

ROW = Rect(left=0, top=0, width=100, height=40)
COLUMN = Rect(left=200, top=0, width=100, height=600)


@pytest.fixture
def intents():
    return []


@pytest.fixture
def normalizer(intents):
    return GestureNormalizer(sink=intents.append)


@pytest.fixture
def log_messages():
    messages = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{message}")
    yield messages
    logger.remove(handler_id)


# ============================================================================
# Normalizer
# ============================================================================


class TestGestureNormalizer:
    def test_starts_idle(self, normalizer):
        assert normalizer.state is GestureState.IDLE
        assert not normalizer.is_active

    def test_full_item_gesture(self, normalizer, intents):
        normalizer.begin_move("a")
        normalizer.hover(DropTarget("mon", "b"), Side.BEFORE)
        committed = normalizer.commit()

        assert committed == CommittedGesture("a", DragKind.ITEM, DropTarget("mon", "b"), Side.BEFORE)
        assert intents == [
            BeginMove("a", DragKind.ITEM),
            Hover(DropTarget("mon", "b"), Side.BEFORE),
            Commit(),
        ]
        assert normalizer.state is GestureState.IDLE
        assert normalizer.last_session.state is GestureState.COMMITTED

    def test_hover_moves_to_hovering_state(self, normalizer):
        normalizer.begin_move("a")
        assert normalizer.state is GestureState.DRAGGING
        normalizer.hover(DropTarget("mon"))
        assert normalizer.state is GestureState.HOVERING

    def test_repeated_hover_is_emitted_once(self, normalizer, intents):
        normalizer.begin_move("a")
        first = normalizer.hover(DropTarget("mon", "b"), Side.AFTER)
        second = normalizer.hover(DropTarget("mon", "b"), Side.AFTER)

        assert first is not None
        assert second is None
        assert sum(isinstance(intent, Hover) for intent in intents) == 1

    def test_changing_side_emits_new_hover(self, normalizer, intents):
        normalizer.begin_move("a")
        normalizer.hover(DropTarget("mon", "b"), Side.AFTER)
        normalizer.hover(DropTarget("mon", "b"), Side.BEFORE)
        assert sum(isinstance(intent, Hover) for intent in intents) == 2

    def test_bare_container_hover_has_no_side(self, normalizer):
        normalizer.begin_move("a")
        hover = normalizer.hover(DropTarget("mon"), Side.BEFORE)
        assert hover == Hover(DropTarget("mon"), None)

    def test_hovering_dragged_item_is_ignored(self, normalizer):
        normalizer.begin_move("a")
        assert normalizer.hover(DropTarget("mon", "a"), Side.AFTER) is None
        assert normalizer.session.last_hover is None

    def test_container_drag_normalizes_to_column(self, normalizer):
        normalizer.begin_move("mon", DragKind.CONTAINER)
        hover = normalizer.hover(DropTarget("tue", "some-item"), Side.BEFORE)
        assert hover == Hover(DropTarget("tue"), Side.BEFORE)

    def test_container_drag_over_itself_is_ignored(self, normalizer):
        normalizer.begin_move("mon", DragKind.CONTAINER)
        assert normalizer.hover(DropTarget("mon"), Side.AFTER) is None

    def test_second_begin_is_rejected(self, normalizer):
        normalizer.begin_move("a")
        with pytest.raises(MoveAlreadyInProgress) as exc_info:
            normalizer.begin_move("b")
        assert exc_info.value.active_id == "a"
        assert normalizer.session.entity_id == "a"

    def test_begin_allowed_after_commit(self, normalizer):
        normalizer.begin_move("a")
        normalizer.hover(DropTarget("mon"))
        normalizer.commit()
        normalizer.begin_move("b")
        assert normalizer.session.entity_id == "b"

    def test_commit_without_hover_cancels(self, normalizer, intents):
        normalizer.begin_move("a")
        assert normalizer.commit() is None
        assert isinstance(intents[-1], Cancel)
        assert normalizer.last_session.state is GestureState.CANCELLED

    def test_clear_hover_forgets_target(self, normalizer):
        normalizer.begin_move("a")
        normalizer.hover(DropTarget("mon"))
        normalizer.clear_hover()
        assert normalizer.state is GestureState.DRAGGING
        assert normalizer.commit() is None

    def test_hover_without_gesture_raises(self, normalizer):
        with pytest.raises(NoGestureInProgress):
            normalizer.hover(DropTarget("mon"))

    def test_commit_without_gesture_raises(self, normalizer):
        with pytest.raises(NoGestureInProgress):
            normalizer.commit()

    def test_cancel_without_gesture_is_harmless(self, normalizer, intents):
        assert normalizer.cancel() is None
        assert intents == []

    def test_session_reports_elapsed_time(self):
        session = GestureSession("a", DragKind.ITEM, started_at=utcnow() - timedelta(milliseconds=500))
        assert session.elapsed_ms >= 500

    def test_finished_gestures_log_their_duration(self, normalizer, log_messages):
        normalizer.begin_move("a")
        normalizer.hover(DropTarget("mon"))
        normalizer.commit()
        normalizer.begin_move("b")
        normalizer.cancel("escape")

        finished = [m for m in log_messages if m.startswith(("Gesture committed", "Gesture cancelled"))]
        assert len(finished) == 2
        assert all(m.rstrip().endswith(" ms") for m in finished)


# ============================================================================
# Side resolution
# ============================================================================


class TestResolveSide:
    def test_upper_half_of_item_is_before(self):
        hit = Hit(DropTarget("mon", "b"), ROW)
        assert resolve_side(hit, 50, 5, DragKind.ITEM) is Side.BEFORE

    def test_lower_half_of_item_is_after(self):
        hit = Hit(DropTarget("mon", "b"), ROW)
        assert resolve_side(hit, 50, 35, DragKind.ITEM) is Side.AFTER

    def test_bare_container_has_no_side(self):
        assert resolve_side(Hit(DropTarget("mon"), COLUMN), 250, 5, DragKind.ITEM) is None

    def test_columns_compare_horizontally(self):
        hit = Hit(DropTarget("tue"), COLUMN)
        assert resolve_side(hit, 210, 500, DragKind.CONTAINER) is Side.BEFORE
        assert resolve_side(hit, 290, 5, DragKind.CONTAINER) is Side.AFTER

    def test_missing_geometry_defaults_to_after(self):
        assert resolve_side(Hit(DropTarget("mon", "b")), 0, 0, DragKind.ITEM) is Side.AFTER


# ============================================================================
# Adapters
# ============================================================================


class TestPointerDragAdapter:
    def test_drag_over_item_and_drop(self, normalizer):
        pointer = PointerDragAdapter(normalizer)
        pointer.on_drag_start("a")
        hover = pointer.on_drag_over([Hit(DropTarget("mon", "b"), ROW)], 50, 30)
        committed = pointer.on_drop()

        assert hover == Hover(DropTarget("mon", "b"), Side.AFTER)
        assert committed.target == DropTarget("mon", "b")
        assert committed.side is Side.AFTER
        assert normalizer.last_session.source == "pointer"

    def test_topmost_hit_wins(self, normalizer):
        pointer = PointerDragAdapter(normalizer)
        pointer.on_drag_start("a")
        hits = [Hit(DropTarget("mon", "b"), ROW), Hit(DropTarget("mon"), COLUMN)]
        hover = pointer.on_drag_over(hits, 50, 5)
        assert hover.target == DropTarget("mon", "b")

    def test_column_drag_uses_column_hit(self, normalizer):
        pointer = PointerDragAdapter(normalizer)
        pointer.on_drag_start("mon", DragKind.CONTAINER)
        hits = [Hit(DropTarget("tue", "x"), ROW), Hit(DropTarget("tue"), COLUMN)]
        hover = pointer.on_drag_over(hits, 210, 5)
        assert hover == Hover(DropTarget("tue"), Side.BEFORE)

    def test_over_dragged_item_keeps_previous_target(self, normalizer):
        pointer = PointerDragAdapter(normalizer)
        pointer.on_drag_start("a")
        pointer.on_drag_over([Hit(DropTarget("mon", "b"), ROW)], 50, 5)
        pointer.on_drag_over([Hit(DropTarget("mon", "a"), ROW)], 50, 5)
        assert normalizer.session.last_hover.target == DropTarget("mon", "b")

    def test_leaving_every_zone_clears_target(self, normalizer):
        pointer = PointerDragAdapter(normalizer)
        pointer.on_drag_start("a")
        pointer.on_drag_over([Hit(DropTarget("mon"), COLUMN)], 250, 5)
        pointer.on_drag_over([], 900, 900)
        assert pointer.on_drop() is None

    def test_escape_cancels(self, normalizer, intents):
        pointer = PointerDragAdapter(normalizer)
        pointer.on_drag_start("a")
        pointer.on_escape()
        assert intents[-1] == Cancel("escape")
        assert pointer.on_drag_end() is None

    def test_drop_without_drag_is_ignored(self, normalizer):
        assert PointerDragAdapter(normalizer).on_drop() is None


class TestTouchLongPressAdapter:
    def test_hold_below_threshold_does_not_start(self, normalizer):
        touch = TouchLongPressAdapter(normalizer)
        touch.on_touch_start("a", 10, 10, timestamp_ms=0)
        assert touch.poll(299) is None
        assert normalizer.state is GestureState.IDLE

    def test_long_press_starts_move(self, normalizer):
        touch = TouchLongPressAdapter(normalizer)
        touch.on_touch_start("a", 10, 10, timestamp_ms=0)
        assert touch.poll(300) == BeginMove("a", DragKind.ITEM)
        assert touch.dragging
        assert normalizer.session.source == "touch"

    def test_tap_never_starts_a_move(self, normalizer, intents):
        touch = TouchLongPressAdapter(normalizer)
        touch.on_touch_start("a", 10, 10, timestamp_ms=0)
        assert touch.on_touch_end(120) is None
        assert intents == []

    def test_jitter_within_tolerance_keeps_press(self, normalizer):
        touch = TouchLongPressAdapter(normalizer)
        touch.on_touch_start("a", 10, 10, timestamp_ms=0)
        touch.on_touch_move(16, 16, 100)
        assert touch.poll(300) is not None

    def test_moving_too_far_abandons_press(self, normalizer):
        touch = TouchLongPressAdapter(normalizer)
        touch.on_touch_start("a", 10, 10, timestamp_ms=0)
        touch.on_touch_move(40, 10, 100)
        assert touch.poll(500) is None
        assert normalizer.state is GestureState.IDLE

    def test_custom_thresholds(self, normalizer):
        touch = TouchLongPressAdapter(normalizer, hold_ms=500, jitter_px=2)
        touch.on_touch_start("a", 0, 0, timestamp_ms=0)
        assert touch.poll(400) is None
        touch.on_touch_move(5, 0, 450)
        assert touch.poll(600) is None

    def test_cancel_after_activation(self, normalizer, intents):
        touch = TouchLongPressAdapter(normalizer)
        touch.on_touch_start("a", 0, 0, timestamp_ms=0)
        touch.poll(300)
        assert touch.on_touch_cancel() == Cancel("touch cancelled")
        assert not touch.dragging
        assert normalizer.state is GestureState.IDLE


def test_pointer_and_touch_emit_identical_intents():
    pointer_intents, touch_intents = [], []
    hits = [Hit(DropTarget("mon", "b"), ROW)]

    pointer = PointerDragAdapter(GestureNormalizer(sink=pointer_intents.append))
    pointer.on_drag_start("a")
    pointer.on_drag_over(hits, 50, 10)
    pointer.on_drag_over(hits, 52, 12)
    from_pointer = pointer.on_drop()

    touch = TouchLongPressAdapter(GestureNormalizer(sink=touch_intents.append))
    touch.on_touch_start("a", 0, 0, timestamp_ms=0)
    touch.on_touch_move(2, 1, 150)
    touch.on_touch_move(50, 10, 320, hits)
    touch.on_touch_move(52, 12, 340, hits)
    from_touch = touch.on_touch_end(400)

    assert pointer_intents == touch_intents
    assert pointer_intents == [
        BeginMove("a", DragKind.ITEM),
        Hover(DropTarget("mon", "b"), Side.BEFORE),
        Commit(),
    ]
    assert from_pointer == from_touch
