"""Run initialization: config composition, logging and object construction."""

import logging
import sys
import traceback
from pathlib import Path
from types import TracebackType
from typing import Any

import hydra
import jax
from hydra.core.config_store import ConfigStore
from hydra.utils import instantiate
from omegaconf import DictConfig, OmegaConf
from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from .handler import RunHandler
from .logger import Logger
from .util import LogLevel

### Python Logging ###

logging.getLogger("jax._src.xla_bridge").addFilter(lambda _: False)

log = logging.getLogger(__name__)

# Custom theme for our logging
THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "red",
        "critical": "red reverse",
        "metric": "green",
        "step": "blue",
        "value": "yellow",
    }
)

PROJECT_ROOT = Path(__file__).parents[3]
CONFIG_DIR = PROJECT_ROOT / "config" / "hydra"


### Initialization Helpers ###


def filter_group_defaults(config_dir: Path, overrides: list[str]) -> list[str]:
    """Drop overrides that select a config group, keeping plain value overrides."""
    groups = {d.name for d in config_dir.iterdir() if d.is_dir()} | {
        "dataset",
        "model",
    }
    return [o for o in overrides if "=" not in o or o.split("=", 1)[0] not in groups]


def setup_logging(run_dir: Path, log_level: LogLevel) -> None:
    """Configure logging for the entire application with pretty formatting."""
    # Remove all handlers associated with the root logger object
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    console = Console(theme=THEME)

    console_handler = RichHandler(
        console=console,
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
        tracebacks_width=None,
        markup=True,
    )

    def exception_handler(
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_traceback: TracebackType | None,
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            # Let KeyboardInterrupt exit gracefully
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        log.error("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))
        error_file = run_dir / "errors.log"
        with open(error_file, "a") as f:
            traceback.print_exception(exc_type, exc_value, exc_traceback, file=f)

    sys.excepthook = exception_handler

    # Rich handler already handles the time, so we don't include it in the format
    console_format = "%(name)-20s | %(message)s"
    file_format = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s"

    level = log_level.value

    console_handler.setFormatter(logging.Formatter(console_format))
    console_handler.setLevel(level)

    file_handler = logging.FileHandler(run_dir / "validation.log")
    file_handler.setFormatter(logging.Formatter(file_format))
    file_handler.setLevel(level)

    logging.root.handlers = [console_handler, file_handler]
    logging.root.setLevel(level)


def setup_jax(device: str = "cpu", disable_jit: bool = False) -> None:
    jax.config.update("jax_platform_name", device)
    if disable_jit:
        jax.config.update("jax_disable_jit", True)


def make_run_dir(project_root: Path, run_name: str) -> Path:
    run_dir = project_root / "runs" / "single" / run_name
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def compose_config(
    run_type: type[Any], overrides: list[str], config_dir: Path = CONFIG_DIR
) -> DictConfig:
    """Compose the hydra config for `run_type` with command line overrides."""
    cs = ConfigStore.instance()
    cs.store(name="config_schema", node=run_type)

    with hydra.initialize_config_dir(version_base="1.3", config_dir=str(config_dir)):
        return hydra.compose(config_name="config", overrides=overrides)


### Core Initialization Function ###


def initialize_run(
    run_type: type[Any],
    overrides: list[str],
) -> tuple[RunHandler, Logger, DictConfig]:
    """Initialize a run from hydra config: directories, logging, and JAX.

    Returns the run handler, the metric logger, and the resolved config. The
    caller instantiates the dataset and model from `cfg.dataset` and
    `cfg.model`.
    """
    cfg = compose_config(run_type, overrides)

    run_dir = make_run_dir(project_root=PROJECT_ROOT, run_name=cfg.run_name)

    saved_config_path = run_dir / "config.yaml"

    # overrides > saved config > defaults
    if saved_config_path.exists():
        saved_dict = OmegaConf.load(saved_config_path)
        override_config = OmegaConf.from_dotlist(
            filter_group_defaults(CONFIG_DIR, overrides)
        )
        cfg = OmegaConf.merge(cfg, saved_dict, override_config)  # pyright: ignore[reportAssignmentType]

    OmegaConf.save(cfg, saved_config_path)

    handler = RunHandler(
        run_name=cfg.run_name,
        project_root=PROJECT_ROOT,
        run_dir=run_dir,
    )

    setup_jax(device=cfg.device, disable_jit=not cfg.jit)
    setup_logging(handler.run_dir, log_level=cfg.log_level)

    logger = Logger(
        handler=handler,
        use_wandb=cfg.use_wandb,
        use_local=cfg.use_local,
        project=cfg.project,
        group=cfg.group,
        job_type=cfg.job_type,
        run_id=cfg.run_id,
    )

    log.info(f"Run name: {handler.run_name}")
    log.info(f"Project Root: {handler.project_root}")
    log.info(f"Available devices: {jax.devices()}")
    log.info(f"with JIT: {cfg.jit}")

    return handler, logger, cfg


def instantiate_run_objects(cfg: DictConfig) -> tuple[Any, Any]:
    """Instantiate the dataset and model described by `cfg`."""
    log.info("Loading dataset...")
    dataset = instantiate(cfg.dataset)
    log.info(f"Loaded dataset with {len(dataset)} records.")

    log.info("Loading model...")
    model = instantiate(cfg.model)
    return dataset, model
