"""
hostconfig infrastructure layer: exceptions and observability.
"""

from .exceptions import (
    HostConfigException, ArgumentError, InvalidStateError,
    ConfigurationError, LoadError, DisposalError
)

__all__ = [
    'HostConfigException',
    'ArgumentError',
    'InvalidStateError',
    'ConfigurationError',
    'LoadError',
    'DisposalError',
]
