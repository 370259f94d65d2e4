"""Manages file IO and organization for a single validation run."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

import joblib
from matplotlib.figure import Figure

from .util import Artifact, MetricHistory, to_snake_case

T = TypeVar("T", bound=Artifact)

### Logging ###

log = logging.getLogger(__name__)

### Run Handler ###


@dataclass(frozen=True)
class RunHandler:
    """Handles file management and organization for a single run."""

    # Attributes
    run_name: str
    """Name of the run, used for directory naming."""
    project_root: Path
    """Root directory of the project."""
    run_dir: Path
    """Directory for this specific run, containing all artifacts and logs."""

    ### Public Properties ###

    @property
    def metrics_path(self) -> Path:
        """Path to the metrics file for this run."""
        return self.run_dir / "metrics.joblib"

    @property
    def available_steps(self) -> list[int]:
        """List of steps (folds) with saved artifacts in this run."""
        return sorted(
            int(d.name.split("_")[1])
            for d in self.run_dir.glob("step_*")
            if d.is_dir()
        )

    ### Public Methods ###

    def save_metrics(self, metrics: MetricHistory) -> None:
        """Save the metric history."""
        joblib.dump(metrics, self.metrics_path)

    def load_metrics(self) -> MetricHistory:
        """Load the metric history, or an empty one for a fresh run."""
        if not self.metrics_path.exists():
            return {}
        return joblib.load(self.metrics_path)

    def save_metrics_figure(self, fig: Figure) -> None:
        """Save the metrics summary figure."""
        path = self.run_dir / "metrics.png"
        fig.savefig(path, bbox_inches="tight")

    ## Artifact Management
    def save_artifact(self, step: int, artifact: Artifact) -> None:
        """Save an artifact at a given step."""
        path = self._get_artifact_path(step, type(artifact))
        joblib.dump(artifact, path, compress=3)
        log.debug(f"Saved {type(artifact).__name__} to {path}")

    def load_artifact(self, step: int, artifact_class: type[T]) -> T:
        """Load an artifact from a specific step."""
        path = self._get_artifact_path(step, artifact_class)
        return joblib.load(path)

    ### Private Methods ###

    ## Path Management
    def _get_step_dir(self, step: int, create: bool = True) -> Path:
        """Get the directory for a specific step, optionally creating it."""
        step_dir = self.run_dir / f"step_{step}"
        if create:
            step_dir.mkdir(parents=True, exist_ok=True)
        return step_dir

    def _get_artifact_path(
        self, step: int, artifact_class: type[T]
    ) -> Path:
        """Get the path for an artifact file."""
        artifacts_dir = self._get_step_dir(step) / "artifacts"
        artifacts_dir.mkdir(exist_ok=True)
        return artifacts_dir / f"{to_snake_case(artifact_class.__name__)}.joblib"
