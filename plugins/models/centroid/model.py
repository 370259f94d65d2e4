"""Nearest-centroid assignment over clusters with running centroids."""

from __future__ import annotations

import logging
from collections.abc import Hashable, Sequence
from dataclasses import dataclass
from typing_extensions import override

import jax
import jax.numpy as jnp
from hydra.core.config_store import ConfigStore
from jax import Array

from clusterlab.interface import (
    Cluster,
    ClusteringModel,
    ClusteringModelConfig,
    Dataset,
    Record,
)
from clusterlab.interface.clustering import HasCentroid

log = logging.getLogger(__name__)


@dataclass
class CentroidConfig(ClusteringModelConfig):
    """Configuration for nearest-centroid clustering."""

    _target_: str = "plugins.models.centroid.CentroidModel"


# Register config
cs = ConfigStore.instance()
cs.store(group="model", name="centroid", node=CentroidConfig)


class CentroidCluster(Cluster):
    """Cluster that keeps the mean feature vector of its members."""

    def __init__(self, cluster_id: Hashable) -> None:
        super().__init__(cluster_id)
        self._feature_sum: Array | None = None

    @property
    def centroid(self) -> Array | None:
        if self._feature_sum is None or self.size() == 0:
            return None
        return self._feature_sum / self.size()

    @override
    def add(self, record_id: int, record: Record | None = None) -> bool:
        if record is None:
            raise ValueError("CentroidCluster needs the record to update its centroid")
        changed = super().add(record_id, record)
        if changed:
            features = jnp.asarray(record.features, dtype=jnp.float32)
            self._feature_sum = (
                features if self._feature_sum is None else self._feature_sum + features
            )
        return changed

    @override
    def remove(self, record_id: int, record: Record | None = None) -> bool:
        if record is None:
            raise ValueError("CentroidCluster needs the record to update its centroid")
        changed = super().remove(record_id, record)
        if changed:
            assert self._feature_sum is not None
            self._feature_sum = self._feature_sum - jnp.asarray(
                record.features, dtype=jnp.float32
            )
            if self.size() == 0:
                self._feature_sum = None
        return changed

    @override
    def clear(self) -> None:
        super().clear()
        self._feature_sum = None


def centroid_matrix(clusters: Sequence[HasCentroid]) -> Array:
    """Stack the centroids of non-empty clusters into a (k, data_dim) matrix."""
    centroids = [c.centroid for c in clusters if c.centroid is not None]
    if not centroids:
        raise RuntimeError("Cannot predict: the model has no non-empty clusters")
    return jnp.stack(centroids)


@jax.jit
def nearest_centroid(centroids: Array, data: Array) -> Array:
    """Index of the closest centroid (squared Euclidean) for each row of data."""
    sq_dists = jnp.sum((data[:, None, :] - centroids[None, :, :]) ** 2, axis=-1)
    return jnp.argmin(sq_dists, axis=1)


class CentroidModel(ClusteringModel[CentroidCluster]):
    """Assigns records to the cluster with the nearest centroid.

    Clusters are seeded from each record's `assigned_cluster` when the model
    is populated; their centroids are maintained by `CentroidCluster`.
    Records without an assignment are left out of the clusters.
    """

    @override
    def build_clusters(self, dataset: Dataset) -> list[CentroidCluster]:
        clusters: dict[Hashable, CentroidCluster] = {}
        skipped = 0
        for record in dataset:
            if record.assigned_cluster is None:
                skipped += 1
                continue
            cluster = clusters.setdefault(
                record.assigned_cluster, CentroidCluster(record.assigned_cluster)
            )
            cluster.add(record.id, record)
        if skipped:
            log.warning(f"{skipped} records without an assigned cluster were skipped")
        return list(clusters.values())

    @override
    def predict(self, dataset: Dataset) -> None:
        if len(dataset) == 0:
            return

        candidates = [
            c for c in self.params.clusters.values() if c.centroid is not None
        ]
        centroids = centroid_matrix(candidates)
        assignments = nearest_centroid(centroids, dataset.features.astype(jnp.float32))
        for record, idx in zip(dataset, assignments.tolist()):
            record.predicted_cluster = candidates[idx].id
