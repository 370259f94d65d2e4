"""CSV-backed dataset with optional label and assignment columns."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jax.numpy as jnp
import pandas as pd
from hydra.core.config_store import ConfigStore
from omegaconf import MISSING

from clusterlab.interface import Dataset, DatasetConfig

log = logging.getLogger(__name__)


@dataclass
class TabularConfig(DatasetConfig):
    """Configuration for CSV datasets.

    Parameters:
        path: CSV file to load
        label_column: Column holding the gold-standard class, if any
        assignment_column: Column holding an external cluster assignment, if any
        feature_columns: Feature columns; defaults to every numeric column that
            is neither the label nor the assignment
    """

    _target_: str = "plugins.datasets.tabular.load_tabular"
    path: str = MISSING
    label_column: str | None = None
    assignment_column: str | None = None
    feature_columns: list[str] | None = None


# Register config
cs = ConfigStore.instance()
cs.store(group="dataset", name="tabular", node=TabularConfig)


def _column_values(df: pd.DataFrame, column: str | None) -> list[Any] | None:
    """Column as python values with missing entries mapped to None."""
    if column is None:
        return None
    if column not in df.columns:
        raise ValueError(f"Column {column!r} not found; available: {list(df.columns)}")
    series = df[column].astype(object)
    return series.where(series.notna(), None).tolist()


def load_tabular(
    path: str,
    label_column: str | None = None,
    assignment_column: str | None = None,
    feature_columns: list[str] | None = None,
) -> Dataset:
    """Load a CSV file into a Dataset, one record per row."""
    csv_path = Path(path).expanduser()
    if not csv_path.exists():
        raise FileNotFoundError(f"Dataset file not found: {csv_path}")

    df = pd.read_csv(csv_path)

    if feature_columns is None:
        excluded = {label_column, assignment_column}
        feature_columns = [
            c
            for c in df.select_dtypes(include="number").columns
            if c not in excluded
        ]
    else:
        feature_columns = list(feature_columns)
        missing = [c for c in feature_columns if c not in df.columns]
        if missing:
            raise ValueError(f"Feature columns not found: {missing}")

    features = jnp.asarray(df[feature_columns].to_numpy(dtype=float))
    log.info(
        f"Loaded {len(df)} rows with {len(feature_columns)} features from {csv_path}"
    )

    return Dataset.from_arrays(
        features.reshape(len(df), len(feature_columns)),
        labels=_column_values(df, label_column),
        assignments=_column_values(df, assignment_column),
    )
