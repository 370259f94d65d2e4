"""Cross-validation of clustering models."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from jax import Array

from ...runtime import Logger, RunHandler
from ..dataset import Dataset
from .metrics import ValidationMetrics, average_metrics
from .model import ClusteringModel

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrossValidationResult:
    """Per-fold scores and their average."""

    folds: tuple[ValidationMetrics, ...]
    average: ValidationMetrics


def kfold_validate(
    model: ClusteringModel[Any],
    dataset: Dataset,
    n_folds: int,
    key: Array,
    reference_class_entropy: bool = False,
    handler: RunHandler | None = None,
    logger: Logger | None = None,
) -> CrossValidationResult:
    """Populate and validate `model` once per fold.

    Each fold repopulates the model from the remaining folds and validates on
    the held-out one. The gold-standard classes always cover the whole
    dataset, so a rare class that lands in a single fold is still known.

    Only the scalar scores are averaged: every fold yields a fresh set of
    clusters, so the tables behind the scores don't line up.

    Args:
        model: Model to populate and validate
        dataset: Labelled dataset
        n_folds: Number of folds, at least 2
        key: Random key for the fold shuffle
        reference_class_entropy: Passed through to the validation engine
        handler: Optional run handler; fold metrics are saved as artifacts
        logger: Optional run logger; fold metrics are logged with step = fold

    Returns:
        CrossValidationResult with one ValidationMetrics per fold
    """
    results: list[ValidationMetrics] = []
    for fold, (train, held_out) in enumerate(dataset.folds(n_folds, key), start=1):
        log.info(f"Fold {fold}/{n_folds}: {len(train)} train, {len(held_out)} held out")
        params = model.populate(train)
        # a class may be missing from the training split but not from the held-out one
        params.gold_standard_classes = dataset.classes
        metrics = model.validate_model(
            held_out, reference_class_entropy=reference_class_entropy
        )
        results.append(metrics)

        if handler is not None:
            handler.save_artifact(fold, metrics)
        if logger is not None:
            logger.log_metrics(metrics.to_metric_dict(), fold)

    average = average_metrics(results)
    if not average.is_empty:
        log.info(f"Average over {n_folds} folds: purity={average.purity}, nmi={average.nmi}")
    return CrossValidationResult(folds=tuple(results), average=average)
