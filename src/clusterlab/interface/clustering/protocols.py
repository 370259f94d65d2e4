"""Protocols defining capabilities of clusters and clustering models.

The cluster registry and the validation engine are typed over these
protocols rather than over concrete cluster classes, so cluster variants can
carry their own statistics without joining a fixed class hierarchy.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator, Set
from typing import Any, Protocol, runtime_checkable

from jax import Array

from ..dataset import Record


@runtime_checkable
class MutableCluster(Protocol):
    """Protocol for clusters whose membership can change during training.

    Implementations update any running statistics (centroids, counts, ...)
    inside `add` and `remove`. Both return whether the membership changed.
    """

    @property
    def id(self) -> Hashable: ...

    @property
    def label(self) -> Any: ...

    def size(self) -> int: ...

    def members(self) -> Set[int]: ...

    def __iter__(self) -> Iterator[int]: ...

    def add(self, record_id: int, record: Record | None = None) -> bool: ...

    def remove(self, record_id: int, record: Record | None = None) -> bool: ...

    def assign_label(self, label: Any) -> None: ...


@runtime_checkable
class HasCentroid(Protocol):
    """Protocol for clusters that maintain a centroid of their members.

    Models whose clusters implement this protocol can assign new records to
    the nearest centroid.
    """

    @property
    def centroid(self) -> Array | None:
        """Mean feature vector of the members, or None for an empty cluster."""
        ...
