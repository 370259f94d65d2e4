"""Externally assigned cluster plugins."""

from .model import AssignedClusterConfig, AssignedClusterModel

__all__ = ["AssignedClusterConfig", "AssignedClusterModel"]
