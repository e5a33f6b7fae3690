"""
hostconfig Configuration System

Layered configuration from multiple providers with hierarchical sections and
reload notification.
"""

from .core import HostConfiguration
from .root import ConfigurationRoot
from .builder import ConfigurationBuilder, ConfigurationBuilderMixin
from .section import ConfigurationSection, as_enumerable
from .sources import (
    ConfigurationSource,
    MemoryConfigurationSource,
    EnvironmentVariablesConfigurationSource,
    FileConfigurationSource,
    YAMLConfigurationSource,
    JSONConfigurationSource,
)
from .providers import (
    ConfigurationData,
    ConfigurationProvider,
    MemoryConfigurationProvider,
    EnvironmentVariablesConfigurationProvider,
    FileConfigurationProvider,
    YAMLConfigurationProvider,
    JSONConfigurationProvider,
)
from .tokens import ReloadToken, ChangeTokenRegistration, on_change, wait_for_reload
from .paths import KEY_DELIMITER
from .models import LoggingConfiguration
from .utils import load_configuration_from_file, load_default_configuration

__all__ = [
    'HostConfiguration',
    'ConfigurationRoot',
    'ConfigurationBuilder',
    'ConfigurationBuilderMixin',
    'ConfigurationSection',
    'as_enumerable',
    'ConfigurationSource',
    'MemoryConfigurationSource',
    'EnvironmentVariablesConfigurationSource',
    'FileConfigurationSource',
    'YAMLConfigurationSource',
    'JSONConfigurationSource',
    'ConfigurationData',
    'ConfigurationProvider',
    'MemoryConfigurationProvider',
    'EnvironmentVariablesConfigurationProvider',
    'FileConfigurationProvider',
    'YAMLConfigurationProvider',
    'JSONConfigurationProvider',
    'ReloadToken',
    'ChangeTokenRegistration',
    'on_change',
    'wait_for_reload',
    'KEY_DELIMITER',
    'LoggingConfiguration',
    'load_configuration_from_file',
    'load_default_configuration',
]
