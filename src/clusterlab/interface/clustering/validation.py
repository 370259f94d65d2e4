"""External validation of a clustering against gold-standard classes."""

from __future__ import annotations

import logging
from collections.abc import Hashable, Sequence
from dataclasses import dataclass
from functools import partial
from typing import Any

import jax
import jax.numpy as jnp
from jax import Array

from ..dataset import Dataset
from .metrics import (
    ContingencyTable,
    ValidationMetrics,
    normalized_mutual_information,
    purity,
)
from .params import ModelParameters

log = logging.getLogger(__name__)


class InvariantViolation(RuntimeError):
    """Raised when the data and the cluster registry have diverged."""


### Counting ###


def _count_pairs(
    cluster_idx: Array,
    class_idx: Array,
    weights: Array,
    n_clusters: int,
    n_classes: int,
) -> Array:
    """Scatter-add one (cluster, class) count per record."""
    table = jnp.zeros((n_clusters, n_classes), dtype=jnp.int32)
    return table.at[cluster_idx, class_idx].add(weights)


def count_contingency(
    cluster_idx: Array,
    class_idx: Array,
    n_clusters: int,
    n_classes: int,
    n_shards: int | None = None,
) -> Array:
    """Build the (n_clusters, n_classes) contingency counts.

    With `n_shards` set, records are split into equally sized shards (padding
    with zero-weight entries), a partial table is counted per shard under
    `jax.vmap`, and the partial tables are summed. Both strategies give the
    same table.
    """
    cluster_idx = jnp.asarray(cluster_idx, dtype=jnp.int32)
    class_idx = jnp.asarray(class_idx, dtype=jnp.int32)
    n = cluster_idx.shape[0]
    weights = jnp.ones(n, dtype=jnp.int32)

    if n_shards is None or n == 0:
        return _count_pairs(cluster_idx, class_idx, weights, n_clusters, n_classes)

    if n_shards < 1:
        raise ValueError(f"n_shards must be positive, got {n_shards}")

    shard_size = -(-n // n_shards)
    pad = n_shards * shard_size - n

    def shard(x: Array) -> Array:
        return jnp.pad(x, (0, pad)).reshape(n_shards, shard_size)

    count_shard = partial(_count_pairs, n_clusters=n_clusters, n_classes=n_classes)
    partials = jax.vmap(count_shard)(shard(cluster_idx), shard(class_idx), shard(weights))
    return jnp.sum(partials, axis=0)


def _index_of(
    values: Sequence[tuple[int, Any]], lookup: dict[Any, int], what: str
) -> list[int]:
    """Map each (record id, value) to the value's position in `lookup`."""
    indices = []
    for record_id, value in values:
        try:
            indices.append(lookup[value])
        except (KeyError, TypeError) as e:
            raise InvariantViolation(
                f"Record {record_id} has {what} {value!r}, which is not registered"
            ) from e
    return indices


### Engine ###


@dataclass(frozen=True)
class ValidationEngine:
    """Scores the clusters of a model against gold-standard classes.

    The engine expects every record to already carry a predicted cluster id.
    It only reads the registry, except for assigning each cluster its majority
    class as `label`, which happens after all scores have been computed.
    """

    parallelized: bool = False
    """Count the contingency table in shards and merge the partial tables."""
    n_shards: int = 4
    reference_class_entropy: bool = False
    """Compute the class entropy over cluster sizes; see
    `normalized_mutual_information`."""

    def contingency_table(
        self, params: ModelParameters[Any], dataset: Dataset
    ) -> ContingencyTable:
        """Cross-tabulate predicted clusters against gold-standard classes.

        Raises:
            InvariantViolation: If a record predicts an unregistered cluster id
                or carries a class outside the gold standard
        """
        cluster_ids: tuple[Hashable, ...] = tuple(params.clusters)
        classes = params.gold_standard_classes
        cluster_lookup = {cid: i for i, cid in enumerate(cluster_ids)}
        class_lookup = {c: j for j, c in enumerate(classes)}

        cluster_idx = _index_of(
            [(r.id, r.predicted_cluster) for r in dataset],
            cluster_lookup,
            "predicted cluster",
        )
        class_idx = _index_of(
            [(r.id, r.true_class) for r in dataset], class_lookup, "class"
        )

        n_shards = self.n_shards if self.parallelized else None
        counts = count_contingency(
            jnp.array(cluster_idx, dtype=jnp.int32),
            jnp.array(class_idx, dtype=jnp.int32),
            len(cluster_ids),
            len(classes),
            n_shards=n_shards,
        )
        log.debug(
            f"Contingency table of {len(dataset)} records: "
            f"{len(cluster_ids)} clusters x {len(classes)} classes"
            + (f" ({n_shards} shards)" if n_shards else "")
        )
        return ContingencyTable(cluster_ids=cluster_ids, classes=classes, counts=counts)

    def validate(
        self, params: ModelParameters[Any], dataset: Dataset
    ) -> ValidationMetrics:
        """Compute purity and NMI of the predicted clustering.

        Returns empty metrics when the model has no gold-standard classes.
        On success, each cluster's `label` is set to its majority class.

        Raises:
            InvariantViolation: If the predictions or labels don't match the
                registry. No label is modified in that case.
        """
        if not params.gold_standard_classes:
            log.debug("No gold-standard classes; skipping external validation")
            return ValidationMetrics()

        if len(dataset) == 0:
            log.warning("Validation dataset is empty; no scores computed")
            return ValidationMetrics()

        if self.reference_class_entropy:
            log.warning(
                "Using the reference class entropy (computed over cluster sizes); "
                "NMI will not match the standard definition"
            )

        table = self.contingency_table(params, dataset)
        metrics = ValidationMetrics(
            purity=purity(table),
            nmi=normalized_mutual_information(
                table, reference_class_entropy=self.reference_class_entropy
            ),
        )

        for cluster_id, label in zip(table.cluster_ids, table.majority_classes()):
            params[cluster_id].assign_label(label)

        log.info(f"Purity: {metrics.purity:.4f}, NMI: {metrics.nmi:.4f}")
        return metrics
