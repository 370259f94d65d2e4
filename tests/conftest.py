"""Shared fixtures for clusterlab tests."""

from collections.abc import Callable, Sequence
from typing import Any

import jax.numpy as jnp
import pytest

from clusterlab.interface import Cluster, Dataset, ModelParameters, Record
from plugins import register_plugins

register_plugins()


def make_dataset(
    classes: Sequence[Any], predictions: Sequence[Any] | None = None
) -> Dataset:
    """Build a dataset with one 2-d record per class, predicted clusters optional."""
    records = []
    for i, true_class in enumerate(classes):
        record = Record(id=i, features=jnp.array([float(i), 0.0]), true_class=true_class)
        if predictions is not None:
            record.predicted_cluster = predictions[i]
        records.append(record)
    return Dataset(records=tuple(records))


def make_params(
    cluster_ids: Sequence[Any],
    gold_standard_classes: Sequence[Any],
    dataset: Dataset | None = None,
) -> ModelParameters[Cluster]:
    """Registry with plain clusters, filled from the dataset's predictions."""
    clusters = {cid: Cluster(cid) for cid in cluster_ids}
    if dataset is not None:
        for record in dataset:
            if record.predicted_cluster in clusters:
                clusters[record.predicted_cluster].add(record.id, record)
    return ModelParameters(clusters, gold_standard_classes=gold_standard_classes)


@pytest.fixture
def dataset_factory() -> Callable[..., Dataset]:
    return make_dataset


@pytest.fixture
def params_factory() -> Callable[..., ModelParameters[Cluster]]:
    return make_params


@pytest.fixture
def perfect_case() -> tuple[ModelParameters[Cluster], Dataset]:
    """Two clusters that reproduce two classes exactly."""
    dataset = make_dataset(["A", "A", "B", "B"], [1, 1, 2, 2])
    return make_params([1, 2], ["A", "B"], dataset), dataset


@pytest.fixture
def merged_case() -> tuple[ModelParameters[Cluster], Dataset]:
    """A single cluster holding two balanced classes."""
    dataset = make_dataset(["A", "A", "B", "B"], [1, 1, 1, 1])
    return make_params([1], ["A", "B"], dataset), dataset
