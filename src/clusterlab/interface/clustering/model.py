"""Clustering model abstractions."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar

from ..dataset import Dataset
from .metrics import ValidationMetrics
from .params import ModelParameters
from .protocols import MutableCluster
from .validation import ValidationEngine

log = logging.getLogger(__name__)

C = TypeVar("C", bound=MutableCluster)


@dataclass
class ClusteringModelConfig:
    """Base configuration for clustering models."""

    _target_: str
    parallelized: bool = False
    n_shards: int = 4


class ClusteringModel(ABC, Generic[C]):
    """Abstract base class for clustering models.

    A model owns its `ModelParameters`. Building the clusters is left to
    `build_clusters`; assigning records to clusters is left to `predict`. This
    base class wires both into the validation lifecycle.

    `parallelized` is per-instance configuration read when validating: it
    selects the sharded contingency counting strategy.
    """

    def __init__(self, parallelized: bool = False, n_shards: int = 4) -> None:
        if n_shards < 1:
            raise ValueError(f"n_shards must be positive, got {n_shards}")
        self.parallelized = parallelized
        self.n_shards = n_shards
        self._params: ModelParameters[C] | None = None

    @property
    def params(self) -> ModelParameters[C]:
        if self._params is None:
            raise RuntimeError("Model must be populated before use")
        return self._params

    @params.setter
    def params(self, params: ModelParameters[C]) -> None:
        self._params = params

    @property
    def is_populated(self) -> bool:
        return self._params is not None

    @property
    def n_clusters(self) -> int:
        """Number of clusters in the model, 0 before population."""
        return 0 if self._params is None else self._params.cluster_count

    @abstractmethod
    def build_clusters(self, dataset: Dataset) -> list[C]:
        """Create the model's clusters from a dataset."""

    @abstractmethod
    def predict(self, dataset: Dataset) -> None:
        """Annotate every record with `predicted_cluster`."""

    def populate(self, dataset: Dataset) -> ModelParameters[C]:
        """Fill a fresh registry from `dataset`.

        Gold-standard classes are taken from the dataset labels, in order of
        first appearance, so unlabelled data leaves them empty.
        """
        clusters = {c.id: c for c in self.build_clusters(dataset)}
        self._params = ModelParameters(
            clusters=clusters,
            gold_standard_classes=dataset.classes,
        )
        log.info(
            f"Populated {self._params.cluster_count} clusters from {len(dataset)} "
            f"records ({len(self._params.gold_standard_classes)} gold-standard classes)"
        )
        return self._params

    def validate_model(
        self, dataset: Dataset, reference_class_entropy: bool = False
    ) -> ValidationMetrics:
        """Predict `dataset` and score the result against its classes."""
        params = self.params
        self.predict(dataset)
        engine = ValidationEngine(
            parallelized=self.parallelized,
            n_shards=self.n_shards,
            reference_class_entropy=reference_class_entropy,
        )
        return engine.validate(params, dataset)
