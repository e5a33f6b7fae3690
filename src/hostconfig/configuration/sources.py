"""
Configuration Sources

A source is an immutable descriptor that knows how to build its provider.
Sources are handed the builder they are added to, so they can read shared
builder properties such as the base path for relative file names.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from .providers import (
    ConfigurationProvider, EnvironmentVariablesConfigurationProvider,
    FileConfigurationProvider, JSONConfigurationProvider,
    MemoryConfigurationProvider, YAMLConfigurationProvider
)

BASE_PATH_PROPERTY = "base_path"


class ConfigurationSource(ABC):
    """Base class for configuration sources."""

    @abstractmethod
    def build(self, builder: Any) -> ConfigurationProvider:
        """Create the provider for this source."""
        pass


@dataclass(frozen=True, eq=False)
class MemoryConfigurationSource(ConfigurationSource):
    """Key/value pairs held in memory."""

    initial_data: Mapping[str, Optional[str]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "initial_data", MappingProxyType(dict(self.initial_data)))

    def build(self, builder: Any) -> MemoryConfigurationProvider:
        return MemoryConfigurationProvider(self)


@dataclass(frozen=True, eq=False)
class EnvironmentVariablesConfigurationSource(ConfigurationSource):
    """Environment variables, optionally filtered by a name prefix."""

    prefix: Optional[str] = None

    def build(self, builder: Any) -> EnvironmentVariablesConfigurationProvider:
        return EnvironmentVariablesConfigurationProvider(self)


@dataclass(frozen=True, eq=False)
class FileConfigurationSource(ConfigurationSource):
    """
    Common settings of file backed sources.

    Attributes:
        path: File path; relative paths resolve against the builder's base path
        optional: Treat a missing file as empty instead of failing the load
        reload_on_change: Poll the file and reload when it changes
        reload_interval: Seconds between polls
    """

    path: Union[str, Path]
    optional: bool = False
    reload_on_change: bool = False
    reload_interval: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "path", Path(self.path))

    def resolve_path(self, builder: Any) -> Path:
        if self.path.is_absolute():
            return self.path
        properties = getattr(builder, "properties", None) or {}
        base_path = properties.get(BASE_PATH_PROPERTY)
        return Path(base_path) / self.path if base_path else self.path

    @abstractmethod
    def build(self, builder: Any) -> FileConfigurationProvider:
        pass


@dataclass(frozen=True, eq=False)
class YAMLConfigurationSource(FileConfigurationSource):
    """YAML file source."""

    def build(self, builder: Any) -> YAMLConfigurationProvider:
        return YAMLConfigurationProvider(self, self.resolve_path(builder))


@dataclass(frozen=True, eq=False)
class JSONConfigurationSource(FileConfigurationSource):
    """JSON file source."""

    def build(self, builder: Any) -> JSONConfigurationProvider:
        return JSONConfigurationProvider(self, self.resolve_path(builder))
