"""
Ordered Collection.

Keeps the members of one container (a day bucket, a column, or the archive)
in a total order using integer order keys.

Keys only need to agree with the intended relative order between mutations.
Callers finish every mutation with ``renumber()``, which rewrites the keys to
the dense sequence 0..n-1; that dense form is what gets persisted.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from loguru import logger

from cadence.core.errors import ReferenceNotFound
from cadence.core.models import Side


class OrderedCollection:
    """
    Integer-keyed total order over member ids.

    Insertion relative to a reference shifts every member at or beyond the
    insertion point up by one, so no other pair of members changes order.
    """

    def __init__(self, keys: Mapping[str, int] | None = None, name: str = ""):
        self.name = name
        self._keys: dict[str, int] = dict(keys or {})

    @classmethod
    def from_members(cls, members: Iterable[tuple[str, int]], name: str = "") -> OrderedCollection:
        return cls(dict(members), name=name)

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def __contains__(self, member_id: object) -> bool:
        return member_id in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(self.ordered_ids())

    def ordered_ids(self) -> list[str]:
        """Member ids in current order (ties keep insertion order)."""
        return sorted(self._keys, key=self._keys.__getitem__)

    def keys(self) -> dict[str, int]:
        return dict(self._keys)

    @property
    def is_dense(self) -> bool:
        return sorted(self._keys.values()) == list(range(len(self._keys)))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def append(self, member_id: str) -> int:
        """
        Place ``member_id`` after every other member.

        An existing member is moved to the end.

        Returns:
            The member's new key (max + 1, or 0 when empty)
        """
        self._keys.pop(member_id, None)
        key = max(self._keys.values()) + 1 if self._keys else 0
        self._keys[member_id] = key
        return key

    def insert_relative_to(self, member_id: str, reference_id: str, side: Side) -> int:
        """
        Place ``member_id`` immediately before or after ``reference_id``.

        An existing member is removed from its old position first.
        Inserting a member relative to itself leaves the order untouched.

        Args:
            member_id: Member being placed
            reference_id: Member it should sit next to
            side: Side.BEFORE or Side.AFTER

        Returns:
            The member's new key

        Raises:
            ReferenceNotFound: If ``reference_id`` is not a member
        """
        if reference_id not in self._keys:
            raise ReferenceNotFound(reference_id)
        if member_id == reference_id:
            return self._keys[member_id]

        self._keys.pop(member_id, None)
        if len(set(self._keys.values())) != len(self._keys):
            # Duplicate keys make "at or beyond" ambiguous
            self.renumber()

        anchor = self._keys[reference_id]
        new_key = anchor if Side(side) is Side.BEFORE else anchor + 1

        for other, key in self._keys.items():
            if key >= new_key:
                self._keys[other] = key + 1
        self._keys[member_id] = new_key
        return new_key

    def remove(self, member_id: str) -> int:
        """
        Drop ``member_id`` from the order without renumbering the rest.

        Returns:
            The key the member held
        """
        if member_id not in self._keys:
            raise ReferenceNotFound(member_id)
        return self._keys.pop(member_id)

    def move_to_index(self, member_id: str, index: int) -> int:
        """
        Move an existing member to ``index`` in the dense order.

        The index is clamped to the valid range. Keys come back dense.
        """
        if member_id not in self._keys:
            raise ReferenceNotFound(member_id)
        order = self.ordered_ids()
        order.remove(member_id)
        index = max(0, min(index, len(order)))
        order.insert(index, member_id)
        self._keys = {mid: position for position, mid in enumerate(order)}
        return index

    def renumber(self) -> dict[str, int]:
        """
        Rewrite keys to 0..n-1 in the current order.

        Idempotent: an already dense collection is left as it is.

        Returns:
            Mapping of every member id to its dense key
        """
        dense = {mid: position for position, mid in enumerate(self.ordered_ids())}
        if dense != self._keys:
            logger.debug(f"Renumbered {len(dense)} member(s) in {self.name or 'collection'}")
        self._keys = dense
        return dict(dense)

    def __repr__(self) -> str:
        return f"OrderedCollection({self.name!r}, {self.ordered_ids()!r})"
