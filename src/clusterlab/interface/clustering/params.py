"""State of a trained clustering model: the cluster registry."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from .protocols import MutableCluster

C = TypeVar("C", bound=MutableCluster)


class ModelParameters(Generic[C]):
    """All clusters of a model plus the known gold-standard classes.

    Both attributes are replaced wholesale. The registry copies any mapping it
    is given and hands out read-only views, so external code can't desync the
    registry by mutating its own dictionary.

    `gold_standard_classes` keeps first-insertion order. It is empty for pure
    unsupervised use, in which case validation yields no scores.
    """

    def __init__(
        self,
        clusters: Mapping[Hashable, C] | None = None,
        gold_standard_classes: Iterable[Any] = (),
    ) -> None:
        self._clusters: dict[Hashable, C] = {}
        self._gold_standard_classes: tuple[Any, ...] = ()
        if clusters is not None:
            self.clusters = clusters
        self.gold_standard_classes = gold_standard_classes

    @property
    def cluster_count(self) -> int:
        """Number of clusters in the registry."""
        return len(self._clusters)

    @property
    def clusters(self) -> Mapping[Hashable, C]:
        return MappingProxyType(self._clusters)

    @clusters.setter
    def clusters(self, clusters: Mapping[Hashable, C]) -> None:
        for cluster_id, cluster in clusters.items():
            if cluster.id != cluster_id:
                raise ValueError(
                    f"Cluster registered under {cluster_id!r} has id {cluster.id!r}"
                )
        self._clusters = dict(clusters)

    @property
    def gold_standard_classes(self) -> tuple[Any, ...]:
        return self._gold_standard_classes

    @gold_standard_classes.setter
    def gold_standard_classes(self, classes: Iterable[Any]) -> None:
        self._gold_standard_classes = tuple(dict.fromkeys(classes))

    def __contains__(self, cluster_id: object) -> bool:
        return cluster_id in self._clusters

    def __getitem__(self, cluster_id: Hashable) -> C:
        return self._clusters[cluster_id]

    def __repr__(self) -> str:
        return (
            f"ModelParameters(cluster_count={self.cluster_count}, "
            f"gold_standard_classes={self._gold_standard_classes!r})"
        )
