"""Shared runtime utilities for clusterlab runs."""

from __future__ import annotations

import logging
import math
import re
from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias

import matplotlib.pyplot as plt
from matplotlib.figure import Figure

## Logging ###

log = logging.getLogger(__name__)

# Define a custom level
STATS_NUM = 15  # Between INFO (20) and DEBUG (10)
logging.addLevelName(STATS_NUM, "STATS")


class LogLevel(Enum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    STATS = STATS_NUM
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


### Metrics ###

MetricDict: TypeAlias = dict[str, tuple[int, float]]  # Single snapshot
MetricHistory: TypeAlias = dict[str, list[tuple[int, float]]]  # Series over steps


### Artifacts ###


@dataclass(frozen=True)
class Artifact(ABC):
    """Base class for data that can be logged and saved with a run."""


### Helpers ###


def to_snake_case(name: str) -> str:
    """Convert CamelCase to snake_case."""
    name = re.sub("([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub("([a-z])([A-Z])", r"\1_\2", name)
    return name.lower()


def plot_metrics(metrics: MetricHistory) -> Figure:
    """Create a summary plot of all metrics over validation steps.

    Args:
        metrics: Dictionary mapping metric names to lists of (step, value) pairs

    Returns:
        Figure containing subplots for each metric
    """
    n_metrics = max(len(metrics), 1)
    side_length = math.ceil(math.sqrt(n_metrics))
    fig, axes = plt.subplots(
        side_length,
        side_length,
        figsize=(6 * side_length, 4 * side_length),
        squeeze=False,
    )

    axes = axes.ravel()

    for ax, (name, values) in zip(axes, metrics.items()):
        steps, metric_values = zip(*values)
        ax.plot(steps, metric_values, marker="o")
        ax.set_xlabel("Fold")
        ax.set_ylabel(name)
        ax.grid(True)

    for idx in range(len(metrics), len(axes)):
        axes[idx].set_visible(False)

    plt.tight_layout()
    return fig
