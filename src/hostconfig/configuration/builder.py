"""
Configuration Builder

Fluent registration of configuration sources. ``ConfigurationBuilderMixin``
supplies the convenience ``add_*`` methods to anything with an ``add`` method
and a ``properties`` dictionary; ``ConfigurationBuilder`` collects sources and
creates a ``ConfigurationRoot`` from them in one step.
"""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .providers import ConfigurationProvider
from .root import ConfigurationRoot
from .sources import (
    BASE_PATH_PROPERTY, ConfigurationSource, EnvironmentVariablesConfigurationSource,
    JSONConfigurationSource, MemoryConfigurationSource, YAMLConfigurationSource
)
from ..infrastructure.exceptions import ArgumentError
from ..infrastructure.observability.factory import get_configuration_logger


class ConfigurationBuilderMixin:
    """Convenience registrations shared by builders."""

    properties: Dict[str, Any]

    def set_base_path(self, path: Union[str, Path]):
        """
        Resolve relative file paths of sources added afterwards against ``path``.

        Returns:
            Self for method chaining
        """
        self.properties[BASE_PATH_PROPERTY] = Path(path)
        return self

    def add_in_memory_collection(self, initial_data: Optional[Mapping[str, Optional[str]]] = None):
        """
        Add an in-memory source.

        Args:
            initial_data: Flat key/value pairs, keys using ':' for hierarchy

        Returns:
            Self for method chaining
        """
        return self.add(MemoryConfigurationSource(dict(initial_data or {})))

    def add_environment_variables(self, prefix: Optional[str] = None):
        """
        Add an environment variable source.

        Args:
            prefix: Only variables starting with this prefix are used

        Returns:
            Self for method chaining
        """
        return self.add(EnvironmentVariablesConfigurationSource(prefix))

    def add_yaml_file(
        self,
        path: Union[str, Path],
        optional: bool = False,
        reload_on_change: bool = False,
        reload_interval: float = 1.0,
    ):
        """
        Add a YAML file source.

        Args:
            path: Path to the YAML file
            optional: Do not fail when the file is missing
            reload_on_change: Watch the file and reload it when it changes
            reload_interval: Seconds between change checks

        Returns:
            Self for method chaining
        """
        return self.add(YAMLConfigurationSource(path, optional, reload_on_change, reload_interval))

    def add_json_file(
        self,
        path: Union[str, Path],
        optional: bool = False,
        reload_on_change: bool = False,
        reload_interval: float = 1.0,
    ):
        """Add a JSON file source. Arguments as for ``add_yaml_file``."""
        return self.add(JSONConfigurationSource(path, optional, reload_on_change, reload_interval))


class ConfigurationBuilder(ConfigurationBuilderMixin):
    """
    Collects sources and builds a ConfigurationRoot from them.

    Unlike HostConfiguration nothing is loaded until ``build`` is called.
    """

    def __init__(self):
        self._sources: List[ConfigurationSource] = []
        self.properties: Dict[str, Any] = {}
        self.logger = get_configuration_logger("ConfigurationBuilder")

    @property
    def sources(self) -> List[ConfigurationSource]:
        return list(self._sources)

    def add(self, source: ConfigurationSource) -> 'ConfigurationBuilder':
        """
        Add a configuration source.

        Returns:
            Self for method chaining
        """
        if source is None:
            raise ArgumentError("source must not be None", argument="source")
        self._sources.append(source)
        return self

    def build(self) -> ConfigurationRoot:
        """
        Build and load a provider for every source, in the order they were added.

        Returns:
            ConfigurationRoot: owns the providers and disposes them with itself
        """
        providers: List[ConfigurationProvider] = []
        try:
            for source in self._sources:
                provider = source.build(self)
                providers.append(provider)
                provider.load()
        except Exception:
            for provider in providers:
                try:
                    provider.dispose()
                except Exception as e:
                    self.logger.error("Provider teardown failed after build error", extra={
                        "provider": repr(provider)
                    }, exc_info=e)
            raise

        self.logger.debug("Built configuration root", extra={"providers": len(providers)})
        return ConfigurationRoot(providers)
