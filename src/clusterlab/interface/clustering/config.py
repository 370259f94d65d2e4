"""Configuration classes for clustering validation runs."""


from dataclasses import dataclass, field

from omegaconf import MISSING

from ..config import RunConfig
from ..dataset import DatasetConfig
from .model import ClusteringModelConfig


@dataclass
class ValidationConfig:
    """Configuration for external validation.

    Parameters:
        n_folds: Number of cross-validation folds. 1 populates and validates on
            the whole dataset.
        seed: Seed for the fold shuffle.
        reference_class_entropy: Compute the class entropy over cluster sizes,
            for comparison with scores computed that way.
    """

    n_folds: int = 1
    seed: int = 0
    reference_class_entropy: bool = False


@dataclass
class ValidationRunConfig(RunConfig):
    """Base configuration for clustering validation runs."""

    dataset: DatasetConfig = MISSING
    model: ClusteringModelConfig = MISSING
    validation: ValidationConfig = field(default_factory=ValidationConfig)
