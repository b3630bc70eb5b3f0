"""
Core Board Models.

Plain dataclasses shared by the engine, the persistence adapters and the CLI.

Design:
- Item: a reviewable unit living in exactly one container
- Container: a day bucket (slot 0-6) or a user-defined column
- DropTarget: structured descriptor reported by the rendering layer
- MoveResult: the complete outcome of one logical board mutation
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

DAYS_IN_WEEK = 7
MIN_SCORE = 1
MAX_SCORE = 5

# Pseudo-container holding mastered items
ARCHIVE_CONTAINER_ID = "archive"
UNCATEGORIZED = "Uncategorized"

# Slot 0 is Sunday, matching the default column order
DEFAULT_DAY_BUCKETS: list[tuple[str, str]] = [
    ("Sunday", "bg-red-500"),
    ("Monday", "bg-orange-500"),
    ("Tuesday", "bg-yellow-500"),
    ("Wednesday", "bg-green-500"),
    ("Thursday", "bg-blue-500"),
    ("Friday", "bg-indigo-500"),
    ("Saturday", "bg-purple-500"),
]


def utcnow() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    """Generate a fresh entity id."""
    return uuid4().hex


class Side(str, Enum):
    """Which side of a reference member an insert lands on."""

    BEFORE = "before"
    AFTER = "after"


class MoveKind(str, Enum):
    """Kind of board mutation carried by a MoveResult."""

    NOOP = "noop"
    CREATE = "create"
    EDIT = "edit"
    REORDER = "reorder"
    TRANSFER = "transfer"
    RESCHEDULE = "reschedule"
    ARCHIVE = "archive"
    UNARCHIVE = "unarchive"
    DELETE = "delete"
    CONTAINER_CREATE = "container_create"
    CONTAINER_EDIT = "container_edit"
    CONTAINER_REORDER = "container_reorder"
    CONTAINER_DELETE = "container_delete"


@dataclass
class Item:
    """A reviewable unit (e.g. a practice problem)."""

    id: str
    title: str
    score: int
    container_id: str
    order_key: int = 0
    user_id: str = "default"
    mastered: bool = False
    category: str | None = None

    # Descriptive fields, carried but not interpreted by the engine
    link: str | None = None
    difficulty: str | None = None
    notes: str | None = None
    time_complexity: str | None = None
    space_complexity: str | None = None

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_archived(self) -> bool:
        return self.container_id == ARCHIVE_CONTAINER_ID

    def evolve(self, **changes) -> Item:
        """Return a copy with ``changes`` applied and a fresh timestamp."""
        changes.setdefault("updated_at", utcnow())
        return replace(self, **changes)


@dataclass
class Container:
    """A day bucket or a user-defined column on the board."""

    id: str
    name: str
    order_key: int = 0
    slot: int | None = None  # 0-6 for day buckets
    color: str = "bg-gray-500"
    is_default: bool = False
    user_id: str = "default"
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def removable(self) -> bool:
        """Default day buckets can never be deleted."""
        return not self.is_default

    @property
    def is_day_bucket(self) -> bool:
        return self.slot is not None

    def evolve(self, **changes) -> Container:
        changes.setdefault("updated_at", utcnow())
        return replace(self, **changes)


@dataclass(frozen=True)
class DropTarget:
    """
    Where a dragged entity is hovering.

    ``item_id`` is None when hovering a container with no specific item
    under the pointer, which means "append to the end".
    """

    container_id: str
    item_id: str | None = None

    @property
    def is_container(self) -> bool:
        return self.item_id is None

    @property
    def key(self) -> str:
        return self.item_id or self.container_id


@dataclass
class ArchiveGroup:
    """Mastered items sharing one category."""

    category: str
    items: list[Item] = field(default_factory=list)

    @property
    def is_uncategorized(self) -> bool:
        return self.category == UNCATEGORIZED

    def __len__(self) -> int:
        return len(self.items)


@dataclass
class MoveResult:
    """
    The complete outcome of one logical mutation.

    Every renumbering the mutation requires is already folded in, so a result
    is applied and persisted as a single unit.
    """

    kind: MoveKind
    subject_id: str | None = None
    items: list[Item] = field(default_factory=list)
    containers: list[Container] = field(default_factory=list)
    removed_item_ids: list[str] = field(default_factory=list)
    removed_container_ids: list[str] = field(default_factory=list)
    affected_container_ids: list[str] = field(default_factory=list)

    @classmethod
    def noop(cls, subject_id: str | None = None) -> MoveResult:
        return cls(kind=MoveKind.NOOP, subject_id=subject_id)

    @property
    def is_noop(self) -> bool:
        return not (
            self.items
            or self.containers
            or self.removed_item_ids
            or self.removed_container_ids
        )

    def item(self, item_id: str) -> Item | None:
        """Look up the new snapshot of ``item_id`` in this result."""
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def summary(self) -> str:
        return (
            f"{self.kind.value}: {len(self.items)} item(s), "
            f"{len(self.containers)} container(s) changed"
        )
