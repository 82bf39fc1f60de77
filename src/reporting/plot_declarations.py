"""
Loads plot declarations from YAML into a PlotRegistry.

Example plots.yaml:

    classes:
      pkg.Bench:
        - axis: size
          type: lines
          log_scale: true
    methods:
      pkg.Bench.run:
        - filters: {impl: "^A$"}
          orientation: horizontal
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from core.errors import ConfigurationError
from core.plot_config import PlotConfiguration, PlotRegistry


def _parse_plot_list(owner: str, declarations: Any) -> List[PlotConfiguration]:
    # A single mapping is accepted as a one-element list
    if isinstance(declarations, dict):
        declarations = [declarations]
    if not isinstance(declarations, list):
        raise ConfigurationError(
            f"Plots of '{owner}' must be a list of plot declarations", key=owner
        )
    return [PlotConfiguration.from_dict(d) for d in declarations]


def registry_from_yaml(yaml_data: Optional[Dict[str, Any]]) -> PlotRegistry:
    """
    Create a PlotRegistry from parsed YAML data.

    Args:
        yaml_data: Dictionary with optional 'classes' and 'methods' sections

    Returns:
        PlotRegistry holding every declared configuration

    Raises:
        ConfigurationError: If the structure or a declaration is invalid
    """
    registry = PlotRegistry()
    if not yaml_data:
        return registry

    if not isinstance(yaml_data, dict):
        raise ConfigurationError("Plot declarations must be a mapping")

    unknown = set(yaml_data) - {"classes", "methods"}
    if unknown:
        raise ConfigurationError(
            f"Unknown section(s): {', '.join(sorted(unknown))}",
            available=["classes", "methods"],
        )

    for section, register in (
        ("classes", registry.register_class),
        ("methods", registry.register_method),
    ):
        entries = yaml_data.get(section) or {}
        if not isinstance(entries, dict):
            raise ConfigurationError(f"Section '{section}' must map names to plot lists", key=section)
        for name, declarations in entries.items():
            register(str(name), _parse_plot_list(str(name), declarations))

    return registry


def load_plot_registry(path: Union[str, Path]) -> PlotRegistry:
    """
    Parse a plot declarations YAML file.

    Args:
        path: Path to the plots.yaml file

    Returns:
        PlotRegistry with the declared configurations

    Raises:
        FileNotFoundError: If the file does not exist
        yaml.YAMLError: If the file contains invalid YAML
        ConfigurationError: If the path is not a file or a declaration is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Plot declarations file not found: {path}")

    if not path.is_file():
        raise ConfigurationError(f"Plot declarations path is not a file: {path}", key=str(path))

    with open(path, "r") as file:
        yaml_data = yaml.safe_load(file)

    return registry_from_yaml(yaml_data)
