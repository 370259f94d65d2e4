"""Clusters taken verbatim from an external assignment column."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing_extensions import override

from hydra.core.config_store import ConfigStore

from clusterlab.interface import (
    Cluster,
    ClusteringModel,
    ClusteringModelConfig,
    Dataset,
)

log = logging.getLogger(__name__)


@dataclass
class AssignedClusterConfig(ClusteringModelConfig):
    """Configuration for externally assigned clusters."""

    _target_: str = "plugins.models.assigned.AssignedClusterModel"


# Register config
cs = ConfigStore.instance()
cs.store(group="model", name="assigned", node=AssignedClusterConfig)


class AssignedClusterModel(ClusteringModel[Cluster]):
    """Model whose clusters come from each record's `assigned_cluster`.

    Use this to score the output of a clustering run performed elsewhere.
    Prediction copies the assignment. An assignment that was not seen when the
    model was populated is registered as a new, empty cluster, so every
    predicted id stays in the registry.
    """

    @override
    def build_clusters(self, dataset: Dataset) -> list[Cluster]:
        clusters: dict[object, Cluster] = {}
        for record in dataset:
            if record.assigned_cluster is None:
                raise ValueError(f"Record {record.id} has no assigned cluster")
            cluster = clusters.setdefault(
                record.assigned_cluster, Cluster(record.assigned_cluster)
            )
            cluster.add(record.id, record)
        log.debug(f"Built {len(clusters)} clusters from assignments")
        return list(clusters.values())

    @override
    def predict(self, dataset: Dataset) -> None:
        clusters = dict(self.params.clusters)
        for record in dataset:
            if record.assigned_cluster is None:
                raise ValueError(f"Record {record.id} has no assigned cluster")
            if record.assigned_cluster not in clusters:
                clusters[record.assigned_cluster] = Cluster(record.assigned_cluster)
            record.predicted_cluster = record.assigned_cluster

        n_new = len(clusters) - self.params.cluster_count
        if n_new:
            log.warning(
                f"Registered {n_new} assignments unseen during population as empty clusters"
            )
            self.params.clusters = clusters
