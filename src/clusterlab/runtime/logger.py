"""Metric logging for validation runs."""

from __future__ import annotations

import logging
import os

import matplotlib.pyplot as plt
import wandb

from .handler import RunHandler
from .util import MetricDict, MetricHistory, plot_metrics

## Logging ###

log = logging.getLogger(__name__)


class Logger:
    """Logger supporting both local and wandb logging.

    Metrics are buffered locally as a `MetricHistory` keyed by metric name,
    with one (step, value) entry per call to `log_metrics`. A step is usually
    a cross-validation fold.
    """

    use_local: bool
    use_wandb: bool

    # wandb
    run_id: str | None

    def __init__(
        self,
        handler: RunHandler,
        use_wandb: bool,
        use_local: bool,
        project: str,
        group: str | None,
        job_type: str | None,
        run_id: str | None = None,
    ) -> None:
        """Initialize logger with desired logging destinations."""
        self.use_wandb = use_wandb
        self.use_local = use_local
        self._metric_buffer: MetricHistory = {}

        if use_wandb:
            wandb.init(
                project=project,
                name=handler.run_name,
                group=group,
                job_type=job_type,
                dir=handler.run_dir,
                id=run_id,
                resume="allow",
            )
            wandb.define_metric("step")
            wandb.define_metric("*", step_metric="step")

        self.run_id = run_id or os.environ.get("WANDB_RUN_ID")

    def get_metric_buffer(self) -> MetricHistory:
        return self._metric_buffer

    def log_metrics(self, metrics: MetricDict, step: int) -> None:
        """Log a snapshot of metrics at the given step."""
        if self.use_local:
            for key, (level, value) in metrics.items():
                self._metric_buffer.setdefault(key, []).append((step, float(value)))
                log.log(level, "step %4d | %18s | %10.6f", step, key, value)

        if self.use_wandb:
            wandb.log(
                {
                    "step": step,
                    **{key: float(value) for key, (_, value) in metrics.items()},
                }
            )

    def finalize(self, handler: RunHandler) -> None:
        """Persist the metric history and close remote logging."""
        if self.use_local:
            handler.save_metrics(self._metric_buffer)
            if self._metric_buffer:
                fig = plot_metrics(self._metric_buffer)
                handler.save_metrics_figure(fig)
                plt.close(fig)

        if self.use_wandb:
            wandb.finish()
