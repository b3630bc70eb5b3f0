"""
Core Module - Shared board models and errors.

All engine modules (board/, store/, cli/) import their domain types from here.
"""

from cadence.core.errors import (
    BoardError,
    ContainerNotFound,
    DefaultContainerLocked,
    InvalidOrdinal,
    InvalidScore,
    ItemNotFound,
    MoveAlreadyInProgress,
    NoGestureInProgress,
    OrphanedContainerDeletion,
    PersistenceFailed,
    ReferenceNotFound,
    StaleTarget,
)
from cadence.core.models import (
    ARCHIVE_CONTAINER_ID,
    DAYS_IN_WEEK,
    DEFAULT_DAY_BUCKETS,
    MAX_SCORE,
    MIN_SCORE,
    UNCATEGORIZED,
    ArchiveGroup,
    Container,
    DropTarget,
    Item,
    MoveKind,
    MoveResult,
    Side,
    new_id,
    utcnow,
)

__all__ = [
    # Models
    "ARCHIVE_CONTAINER_ID",
    "DAYS_IN_WEEK",
    "DEFAULT_DAY_BUCKETS",
    "MAX_SCORE",
    "MIN_SCORE",
    "UNCATEGORIZED",
    "ArchiveGroup",
    "Container",
    "DropTarget",
    "Item",
    "MoveKind",
    "MoveResult",
    "Side",
    "new_id",
    "utcnow",
    # Errors
    "BoardError",
    "ContainerNotFound",
    "DefaultContainerLocked",
    "InvalidOrdinal",
    "InvalidScore",
    "ItemNotFound",
    "MoveAlreadyInProgress",
    "NoGestureInProgress",
    "OrphanedContainerDeletion",
    "PersistenceFailed",
    "ReferenceNotFound",
    "StaleTarget",
]
