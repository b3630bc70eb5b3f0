"""
Board error hierarchy.

Every error raised by the engine is local and recoverable: none of them is
raised after in-memory state has been partially mutated.
"""

from __future__ import annotations

from typing import Any


class BoardError(Exception):
    """Base class for all board engine errors."""
    pass


class InvalidScore(BoardError):
    """Raised when a confidence score falls outside 1..5."""

    def __init__(self, score: Any):
        self.score = score
        super().__init__(f"Score must be an integer between 1 and 5, got {score!r}")


class InvalidOrdinal(BoardError):
    """Raised when a day ordinal falls outside 0..6."""

    def __init__(self, ordinal: Any):
        self.ordinal = ordinal
        super().__init__(f"Day ordinal must be between 0 and 6, got {ordinal!r}")


class ReferenceNotFound(BoardError):
    """Raised when an insert references a member that is not in the collection."""

    def __init__(self, reference_id: str):
        self.reference_id = reference_id
        super().__init__(f"Reference {reference_id!r} not found in collection")


class StaleTarget(BoardError):
    """Raised when a drop target vanished between hover and commit."""

    def __init__(self, target_id: str):
        self.target_id = target_id
        super().__init__(f"Drop target {target_id!r} no longer exists; refresh and retry")


class ItemNotFound(BoardError):
    """Raised when an operation names an unknown item."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item {item_id!r} not found")


class ContainerNotFound(BoardError):
    """Raised when an operation names an unknown container."""

    def __init__(self, container_id: str):
        self.container_id = container_id
        super().__init__(f"Container {container_id!r} not found")


class MoveAlreadyInProgress(BoardError):
    """Raised when a gesture begins while another is still active."""

    def __init__(self, active_id: str):
        self.active_id = active_id
        super().__init__(f"A move of {active_id!r} is already in progress")


class NoGestureInProgress(BoardError):
    """Raised when hover/commit arrive without an active gesture."""
    pass


class OrphanedContainerDeletion(BoardError):
    """Raised when deleting a container that still holds items."""

    def __init__(self, container_id: str, item_count: int):
        self.container_id = container_id
        self.item_count = item_count
        super().__init__(
            f"Container {container_id!r} still holds {item_count} item(s); "
            "move or delete them first"
        )


class DefaultContainerLocked(BoardError):
    """Raised when deleting or renaming one of the seven day buckets."""
    pass


class PersistenceFailed(BoardError):
    """
    Raised when persisting a committed result fails.

    The in-memory board already reflects the result; ``result`` is the whole
    unit that must be retried.
    """

    def __init__(self, result: Any, cause: BaseException):
        self.result = result
        self.cause = cause
        super().__init__(f"Failed to persist {result.kind.value} result: {cause}")
