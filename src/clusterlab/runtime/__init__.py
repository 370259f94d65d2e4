from .handler import RunHandler
from .logger import Logger
from .util import STATS_NUM, Artifact, LogLevel, MetricDict, MetricHistory

__all__ = [
    "STATS_NUM",
    "Artifact",
    "LogLevel",
    "Logger",
    "MetricDict",
    "MetricHistory",
    "RunHandler",
]
