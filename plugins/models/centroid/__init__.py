"""Nearest-centroid cluster plugins."""

from .model import CentroidCluster, CentroidConfig, CentroidModel

__all__ = ["CentroidCluster", "CentroidConfig", "CentroidModel"]
