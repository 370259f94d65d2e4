from importlib import import_module
from pathlib import Path


def register_plugins() -> None:
    """Import all plugins so their configs land in the hydra ConfigStore."""
    plugin_types = ["datasets", "models"]

    for plugin_type in plugin_types:
        plugin_dir = Path(__file__).parent / plugin_type
        for item in sorted(plugin_dir.iterdir()):
            if item.name.startswith("_"):
                continue
            # Handle .py files
            if item.is_file() and item.suffix == ".py":
                import_module(f"plugins.{plugin_type}.{item.stem}")
            # Handle directories that contain __init__.py (plugin packages)
            elif item.is_dir() and (item / "__init__.py").exists():
                import_module(f"plugins.{plugin_type}.{item.name}")
