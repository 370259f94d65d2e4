"""Synthetic Gaussian blobs with a perturbed reference clustering."""

from dataclasses import dataclass

import jax
import jax.numpy as jnp
from hydra.core.config_store import ConfigStore

from clusterlab.interface import Dataset, DatasetConfig


@dataclass
class BlobsConfig(DatasetConfig):
    """Configuration for the synthetic blobs dataset.

    Parameters:
        n_samples: Number of records
        n_classes: Number of Gaussian blobs, one gold-standard class each
        data_dim: Dimensionality of the features
        spread: Standard deviation of each blob
        separation: Scale of the blob centers
        noise: Fraction of records whose reference assignment is redrawn at random
        seed: Random seed
    """

    _target_: str = "plugins.datasets.blobs.load_blobs"
    n_samples: int = 300
    n_classes: int = 3
    data_dim: int = 2
    spread: float = 0.5
    separation: float = 5.0
    noise: float = 0.1
    seed: int = 0


# Register config
cs = ConfigStore.instance()
cs.store(group="dataset", name="blobs", node=BlobsConfig)


def load_blobs(
    n_samples: int = 300,
    n_classes: int = 3,
    data_dim: int = 2,
    spread: float = 0.5,
    separation: float = 5.0,
    noise: float = 0.1,
    seed: int = 0,
) -> Dataset:
    """Sample labelled blobs with an imperfect cluster assignment.

    The assignment column starts as the true class of each record; a `noise`
    fraction of records is then reassigned uniformly at random. This stands in
    for the output of an external clustering run of known quality.
    """
    if not 0.0 <= noise <= 1.0:
        raise ValueError(f"noise must be in [0, 1], got {noise}")

    key = jax.random.PRNGKey(seed)
    center_key, label_key, point_key, flip_key, reassign_key = jax.random.split(key, 5)

    centers = separation * jax.random.normal(center_key, (n_classes, data_dim))
    labels = jax.random.randint(label_key, (n_samples,), 0, n_classes)
    features = centers[labels] + spread * jax.random.normal(
        point_key, (n_samples, data_dim)
    )

    flipped = jax.random.uniform(flip_key, (n_samples,)) < noise
    random_clusters = jax.random.randint(reassign_key, (n_samples,), 0, n_classes)
    assignments = jnp.where(flipped, random_clusters, labels)

    return Dataset.from_arrays(features, labels=labels, assignments=assignments)
