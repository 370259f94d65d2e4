"""Base configuration classes for clusterlab."""

from dataclasses import dataclass

from ..runtime import LogLevel


@dataclass
class RunConfig:
    """Base configuration for a single run."""

    run_name: str
    device: str
    jit: bool
    use_local: bool
    use_wandb: bool
    log_level: LogLevel
    project: str
    group: str | None
    job_type: str | None
    run_id: str | None
