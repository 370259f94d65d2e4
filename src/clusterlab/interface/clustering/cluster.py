"""Cluster entities discovered by clustering models."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator, Set
from typing import Any, NoReturn

from ..dataset import Record


class UnsupportedOperation(TypeError):
    """Raised when a read-only view is asked to mutate."""


class MembersView(Set[int]):
    """Read-only view over a cluster's record ids.

    The view reflects later membership changes of its cluster. Iteration can be
    restarted any number of times. Every mutating method raises
    `UnsupportedOperation` and leaves the membership untouched.
    """

    __slots__ = ("_ids",)

    def __init__(self, ids: set[int]) -> None:
        self._ids = ids

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._ids

    def __iter__(self) -> Iterator[int]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    @classmethod
    def _from_iterable(cls, it: Iterable[int]) -> frozenset[int]:
        # set algebra on a view yields a detached snapshot
        return frozenset(it)

    def __repr__(self) -> str:
        return f"MembersView({sorted(self._ids)!r})"

    def _read_only(self, *args: Any, **kwargs: Any) -> NoReturn:
        raise UnsupportedOperation("cluster members can only be changed by the cluster")

    add = remove = discard = pop = clear = update = _read_only
    __ior__ = __iand__ = __isub__ = __ixor__ = _read_only


class Cluster:
    """A single discovered group of records.

    Membership changes go through `add` and `remove`. Cluster variants
    override both to keep running statistics up to date. `label` stays `None`
    until a validation pass assigns the majority gold-standard class.

    Two clusters are equal iff their ids are equal, regardless of membership.
    """

    def __init__(self, cluster_id: Hashable) -> None:
        self._id = cluster_id
        self._members: set[int] = set()
        self._label: Any = None

    @property
    def id(self) -> Hashable:
        return self._id

    @property
    def label(self) -> Any:
        """Majority gold-standard class from the latest validation pass."""
        return self._label

    def size(self) -> int:
        return len(self._members)

    def __len__(self) -> int:
        return self.size()

    def members(self) -> MembersView:
        return MembersView(self._members)

    def __iter__(self) -> Iterator[int]:
        return iter(self.members())

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._members

    def add(self, record_id: int, record: Record | None = None) -> bool:
        """Insert a member. Returns False if it was already present."""
        if record_id in self._members:
            return False
        self._members.add(record_id)
        return True

    def remove(self, record_id: int, record: Record | None = None) -> bool:
        """Remove a member. Returns False if it was not present."""
        if record_id not in self._members:
            return False
        self._members.remove(record_id)
        return True

    def extend(self, records: Iterable[Record]) -> int:
        """Add several records through `add`; returns how many were new."""
        return sum(self.add(r.id, r) for r in records)

    def clear(self) -> None:
        self._members.clear()

    def assign_label(self, label: Any) -> None:
        self._label = label

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cluster):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self._id!r}, size={self.size()}, "
            f"label={self._label!r})"
        )
