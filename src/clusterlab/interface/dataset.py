"""Dataset and record abstractions consumed by clustering models."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

import jax
import jax.numpy as jnp
from jax import Array


@dataclass
class DatasetConfig:
    """Base configuration for datasets."""

    _target_: str


@dataclass(eq=False)
class Record:
    """A single observation.

    `predicted_cluster` is written by a model's prediction step. Every other
    field is fixed when the dataset is built.
    """

    id: int
    features: Array
    true_class: Any = None
    """Gold-standard class, or None if the record is unlabelled."""
    assigned_cluster: Any = None
    """Cluster assignment produced by an external clustering run, if any."""
    predicted_cluster: Any = None


@dataclass(frozen=True)
class Dataset:
    """Finite, restartable sequence of records."""

    records: tuple[Record, ...]

    @classmethod
    def from_arrays(
        cls,
        features: Array,
        labels: Sequence[Any] | None = None,
        assignments: Sequence[Any] | None = None,
    ) -> Dataset:
        """Build a dataset with one record per row of `features`.

        Args:
            features: Feature matrix with shape (n_samples, data_dim)
            labels: Optional gold-standard class per sample
            assignments: Optional external cluster assignment per sample

        Returns:
            Dataset whose record ids are the row indices
        """
        features = jnp.atleast_2d(jnp.asarray(features))
        n = features.shape[0]
        # jax arrays are unhashable, so classes and cluster ids become python scalars
        labels = _to_list(labels)
        assignments = _to_list(assignments)
        if labels is not None and len(labels) != n:
            raise ValueError(f"Expected {n} labels, got {len(labels)}")
        if assignments is not None and len(assignments) != n:
            raise ValueError(f"Expected {n} assignments, got {len(assignments)}")

        records = tuple(
            Record(
                id=i,
                features=features[i],
                true_class=None if labels is None else labels[i],
                assigned_cluster=None if assignments is None else assignments[i],
            )
            for i in range(n)
        )
        return cls(records=records)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    def __getitem__(self, index: int) -> Record:
        return self.records[index]

    @property
    def data_dim(self) -> int:
        """Dimensionality of each record's features."""
        if not self.records:
            return 0
        return int(self.records[0].features.shape[-1])

    @property
    def features(self) -> Array:
        """Stacked features with shape (n_samples, data_dim)."""
        if not self.records:
            return jnp.zeros((0, 0))
        return jnp.stack([r.features for r in self.records])

    @property
    def has_labels(self) -> bool:
        """Return True if any record carries a gold-standard class."""
        return any(r.true_class is not None for r in self.records)

    @property
    def classes(self) -> tuple[Any, ...]:
        """Distinct gold-standard classes in order of first appearance."""
        seen: dict[Any, None] = {}
        for r in self.records:
            if r.true_class is not None:
                seen.setdefault(r.true_class, None)
        return tuple(seen)

    def subset(self, indices: Sequence[int]) -> Dataset:
        """Return a view over the given positions. Records are shared."""
        return Dataset(records=tuple(self.records[int(i)] for i in indices))

    def folds(self, n_folds: int, key: Array) -> Iterator[tuple[Dataset, Dataset]]:
        """Yield (train, held-out) pairs for k-fold cross-validation.

        Records are shuffled once with `key`, then split into `n_folds` nearly
        equal parts. Each part is held out exactly once.
        """
        if n_folds < 2:
            raise ValueError(f"n_folds must be at least 2, got {n_folds}")
        if n_folds > len(self):
            raise ValueError(
                f"n_folds ({n_folds}) cannot exceed the number of records ({len(self)})"
            )

        order = [int(i) for i in jax.random.permutation(key, len(self))]
        bounds = [len(order) * k // n_folds for k in range(n_folds + 1)]
        for k in range(n_folds):
            held_out = order[bounds[k] : bounds[k + 1]]
            train = order[: bounds[k]] + order[bounds[k + 1] :]
            yield self.subset(train), self.subset(held_out)


def _to_list(values: Sequence[Any] | Array | None) -> list[Any] | None:
    if values is None:
        return None
    if hasattr(values, "tolist"):
        return values.tolist()
    return list(values)
