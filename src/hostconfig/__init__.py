"""
hostconfig: layered, reloadable configuration for hosting code.
"""

from .configuration import (
    HostConfiguration,
    ConfigurationRoot,
    ConfigurationBuilder,
    ConfigurationSection,
    ConfigurationSource,
    ConfigurationProvider,
    MemoryConfigurationSource,
    EnvironmentVariablesConfigurationSource,
    YAMLConfigurationSource,
    JSONConfigurationSource,
    ReloadToken,
    as_enumerable,
    on_change,
    wait_for_reload,
    load_configuration_from_file,
    load_default_configuration,
)
from .infrastructure.exceptions import (
    HostConfigException,
    ArgumentError,
    InvalidStateError,
    ConfigurationError,
    LoadError,
    DisposalError,
)

__version__ = "0.1.0"

__all__ = [
    'HostConfiguration',
    'ConfigurationRoot',
    'ConfigurationBuilder',
    'ConfigurationSection',
    'ConfigurationSource',
    'ConfigurationProvider',
    'MemoryConfigurationSource',
    'EnvironmentVariablesConfigurationSource',
    'YAMLConfigurationSource',
    'JSONConfigurationSource',
    'ReloadToken',
    'as_enumerable',
    'on_change',
    'wait_for_reload',
    'load_configuration_from_file',
    'load_default_configuration',
    'HostConfigException',
    'ArgumentError',
    'InvalidStateError',
    'ConfigurationError',
    'LoadError',
    'DisposalError',
]
