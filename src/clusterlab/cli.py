### Imports ###

import logging
from typing import Any

import jax
import typer
from hydra.core.config_store import ConfigNode, ConfigStore
from omegaconf import OmegaConf
from plugins import register_plugins
from rich import print as rprint
from rich.table import Table

from .interface import ClusteringModel, Dataset
from .interface.clustering import ValidationRunConfig, kfold_validate
from .runtime.initialize import instantiate_run_objects, initialize_run
from .util import format_config_table, get_store_groups, print_config_tree

log = logging.getLogger(__name__)

register_plugins()

# CLI configuration
main = typer.Typer(
    help="""CLI for external validation of clustering models against gold-standard classes."""
)
plugins_com = typer.Typer()
main.add_typer(plugins_com, name="plugins", help="Commands for plugin management.")


### Commands ###


overrides = typer.Argument(
    default=None, help="Configuration overrides (e.g., dataset=tabular model=assigned)"
)

validate_dry_run = typer.Option(False, "--dry-run", help="Print hydra config and exit")


@main.command()
def validate(overrides: list[str] = overrides, dry_run: bool = validate_dry_run):
    """Score a clustering against the classes of a labelled dataset.

    Populates the model, predicts a cluster for every record, and reports
    purity and normalized mutual information. With validation.n_folds > 1 the
    model is repopulated on each training split and scored on the held-out
    fold. Results are saved to the runs directory.

    Example:
        clusterlab validate run_name=my_exp dataset=blobs model=centroid
    """
    handler, logger, cfg = initialize_run(ValidationRunConfig, overrides or [])
    if dry_run:
        print_config_tree(OmegaConf.to_container(cfg, resolve=True))
        return

    dataset: Dataset
    model: ClusteringModel[Any]
    dataset, model = instantiate_run_objects(cfg)
    n_folds: int = cfg.validation.n_folds
    reference_class_entropy: bool = cfg.validation.reference_class_entropy

    log.info("Beginning validation...")
    if n_folds <= 1:
        model.populate(dataset)
        metrics = model.validate_model(
            dataset, reference_class_entropy=reference_class_entropy
        )
        handler.save_artifact(1, metrics)
        logger.log_metrics(metrics.to_metric_dict(), 1)
    else:
        key = jax.random.PRNGKey(cfg.validation.seed)
        result = kfold_validate(
            model,
            dataset,
            n_folds,
            key,
            reference_class_entropy=reference_class_entropy,
            handler=handler,
            logger=logger,
        )
        metrics = result.average

    if metrics.is_empty:
        log.warning("No metrics computed: the dataset has no gold-standard classes")
    else:
        log.info(f"Purity: {metrics.purity:.4f} | NMI: {metrics.nmi:.4f}")

    log.info("Validation complete.")
    logger.finalize(handler)
    log.info("Logging complete, exiting.")


# Plugins
plugin = typer.Argument(default=None, help="Name of plugin to inspect")


@plugins_com.command(name="list")
def list_plugins():
    """List all available plugins by group."""
    groups = get_store_groups()
    table = Table(title="Available Plugins")
    table.add_column("Type", style="cyan")
    table.add_column("Plugin", style="green")

    for group in ["dataset", "model"]:
        if group in groups:
            table.add_row(group.title(), ", ".join(sorted(groups[group])))

    rprint(table)


@plugins_com.command()
def inspect(plugin: str = plugin):
    """Inspect plugin configuration parameters."""

    cs = ConfigStore.instance()

    for group_name in ["model", "dataset"]:
        group = cs.repo.get(group_name, {})
        if not isinstance(group, dict):
            continue
        for name, config_node in group.items():  # pyright: ignore[reportUnknownVariableType]
            clean_name: str = name.replace(".yaml", "")  # pyright: ignore[reportUnknownVariableType]
            if clean_name != plugin or not isinstance(config_node, ConfigNode):
                continue
            params: dict[str, Any] = OmegaConf.to_container(config_node.node)  # pyright: ignore[reportAssignmentType]
            if not params:
                continue

            target, table = format_config_table(f"{group_name}/{clean_name}", params)
            if target:
                rprint(f"\nImplementation: [blue]{target}[/blue]\n")
            rprint(table)
            return

    rprint(f"[red]Plugin '{plugin}' not found[/red]")
    raise typer.Exit(code=1)


### Main ###

if __name__ == "__main__":
    main()
