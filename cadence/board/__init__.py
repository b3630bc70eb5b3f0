"""
Board Module - Scheduling and ordering engine.

Components:
- schedule: score -> review day arithmetic (ScheduleCalculator)
- ordering: integer-keyed total order inside one container (OrderedCollection)
- sequencer: display order of the containers (ContainerSequencer)
- gestures: pointer / touch input normalized to BeginMove, Hover, Commit, Cancel
- move_engine: plans reorders, transfers and rescheduling (MoveEngine)
- archive: mastery offer rule and archive transitions (ArchiveGate)
- service: the facade used by the UI and the CLI (ReviewBoard)
"""

from cadence.board.archive import ArchiveGate, build_archive_groups
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
    Intent,
    PointerDragAdapter,
    Rect,
    TouchLongPressAdapter,
)
from cadence.board.move_engine import MoveEngine
from cadence.board.ordering import OrderedCollection
from cadence.board.schedule import ScheduleCalculator, today_ordinal
from cadence.board.sequencer import ContainerSequencer
from cadence.board.service import ReviewBoard
from cadence.board.state import BoardState

__all__ = [
    # Scheduling & ordering
    "ScheduleCalculator",
    "today_ordinal",
    "OrderedCollection",
    "ContainerSequencer",
    "BoardState",
    "MoveEngine",
    "ArchiveGate",
    "build_archive_groups",
    # Gestures
    "BeginMove",
    "Hover",
    "Commit",
    "Cancel",
    "Intent",
    "CommittedGesture",
    "DragKind",
    "GestureNormalizer",
    "GestureSession",
    "GestureState",
    "Hit",
    "Rect",
    "PointerDragAdapter",
    "TouchLongPressAdapter",
    # Facade
    "ReviewBoard",
]
