"""
Helpers that assemble common configuration layer stacks.
"""

from pathlib import Path
from typing import Mapping, Optional, Union

from .core import HostConfiguration

DEFAULT_ENV_PREFIX = "HOSTCONFIG_"


def _add_file(configuration: HostConfiguration, path: Path, optional: bool, reload_on_change: bool) -> None:
    if path.suffix.lower() == ".json":
        configuration.add_json_file(path, optional=optional, reload_on_change=reload_on_change)
    else:
        configuration.add_yaml_file(path, optional=optional, reload_on_change=reload_on_change)


def load_configuration_from_file(path: Union[str, Path], reload_on_change: bool = False) -> HostConfiguration:
    """
    Configuration backed by a single YAML or JSON file (chosen by extension).

    Args:
        path: File to load; must exist
        reload_on_change: Reload and notify when the file changes
    """
    configuration = HostConfiguration()
    _add_file(configuration, Path(path), optional=False, reload_on_change=reload_on_change)
    return configuration


def load_default_configuration(
    defaults: Optional[Mapping[str, Optional[str]]] = None,
    env_prefix: Optional[str] = DEFAULT_ENV_PREFIX,
    config_file: Optional[Union[str, Path]] = None,
    reload_on_change: bool = False,
) -> HostConfiguration:
    """
    Standard layering: in-memory defaults, then an optional file, then
    environment variables, each overriding the previous.
    """
    configuration = HostConfiguration()
    configuration.add_in_memory_collection(defaults or {})
    if config_file is not None:
        _add_file(configuration, Path(config_file), optional=True, reload_on_change=reload_on_change)
    configuration.add_environment_variables(env_prefix)
    return configuration
