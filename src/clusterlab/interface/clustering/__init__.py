"""Clustering-specific abstractions for clusterlab.

This package provides the cluster entity model, the cluster registry of a
trained model, and the external validation engine that scores a clustering
against gold-standard classes.
"""

from .cluster import Cluster, MembersView, UnsupportedOperation
from .config import ValidationConfig, ValidationRunConfig
from .experiment import CrossValidationResult, kfold_validate
from .metrics import (
    ContingencyTable,
    ValidationMetrics,
    average_metrics,
    entropy,
    mutual_information,
    normalized_mutual_information,
    purity,
)
from .model import ClusteringModel, ClusteringModelConfig
from .params import ModelParameters
from .protocols import HasCentroid, MutableCluster
from .validation import InvariantViolation, ValidationEngine, count_contingency

__all__ = [
    # Clusters
    "Cluster",
    "MembersView",
    "UnsupportedOperation",
    # Registry
    "ModelParameters",
    # Config
    "ValidationConfig",
    "ValidationRunConfig",
    # Model
    "ClusteringModel",
    "ClusteringModelConfig",
    # Metrics
    "ContingencyTable",
    "ValidationMetrics",
    "average_metrics",
    "entropy",
    "mutual_information",
    "normalized_mutual_information",
    "purity",
    # Validation
    "CrossValidationResult",
    "InvariantViolation",
    "ValidationEngine",
    "count_contingency",
    "kfold_validate",
    # Protocols
    "HasCentroid",
    "MutableCluster",
]
