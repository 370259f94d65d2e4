from .config import RunConfig
from .dataset import Dataset, DatasetConfig, Record

# Re-export clustering for convenience
from .clustering import (
    Cluster,
    ClusteringModel,
    ClusteringModelConfig,
    InvariantViolation,
    ModelParameters,
    UnsupportedOperation,
    ValidationEngine,
    ValidationMetrics,
)

__all__ = [
    # Generic
    "Dataset",
    "DatasetConfig",
    "Record",
    "RunConfig",
    # Clustering (re-exported for convenience)
    "Cluster",
    "ClusteringModel",
    "ClusteringModelConfig",
    "InvariantViolation",
    "ModelParameters",
    "UnsupportedOperation",
    "ValidationEngine",
    "ValidationMetrics",
]
