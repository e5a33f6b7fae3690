"""
Exception hierarchy for hostconfig.

Every exception carries a machine readable ``error_code``, a ``context``
dictionary with whatever the raising site knew, and the underlying ``cause``
when one exists.
"""

from typing import Any, Dict, List, Optional


class HostConfigException(Exception):
    """Root exception for all hostconfig errors."""

    default_error_code = "HOSTCONFIG_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        base = f"[{self.error_code}] {self.message}"
        if self.cause:
            base += f" (caused by {type(self.cause).__name__}: {self.cause})"
        return base


class ArgumentError(HostConfigException, ValueError):
    """Raised when a required argument is missing or unusable."""

    default_error_code = "ARGUMENT_ERROR"

    def __init__(self, message: str, argument: Optional[str] = None, **kwargs: Any):
        context = kwargs.pop("context", None) or {}
        if argument:
            context["argument"] = argument
        super().__init__(message, context=context, **kwargs)
        self.argument = argument


class InvalidStateError(HostConfigException, RuntimeError):
    """Raised when an operation is not valid for the current object state."""

    default_error_code = "INVALID_STATE"


class ConfigurationError(HostConfigException):
    """Configuration-related issues."""

    default_error_code = "CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str,
        config_path: Optional[str] = None,
        **kwargs: Any,
    ):
        context = kwargs.pop("context", None) or {}
        if config_path:
            context["config_path"] = config_path
        super().__init__(message, context=context, **kwargs)
        self.config_path = config_path


class LoadError(ConfigurationError):
    """Raised by a provider when its origin cannot be read."""

    default_error_code = "CONFIGURATION_LOAD_ERROR"


class DisposalError(ConfigurationError):
    """Raised after disposal finished when one or more providers failed to tear down."""

    default_error_code = "CONFIGURATION_DISPOSAL_ERROR"

    def __init__(self, message: str, errors: List[BaseException], **kwargs: Any):
        context = kwargs.pop("context", None) or {}
        context["failures"] = [f"{type(e).__name__}: {e}" for e in errors]
        super().__init__(message, context=context, cause=errors[0] if errors else None, **kwargs)
        self.errors = list(errors)
