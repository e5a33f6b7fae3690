"""
Configuration Root

Merged, hierarchical view over an ordered list of providers. Later providers
override earlier ones; writes go to every provider; every provider's reload
token is fanned into a single root reload token.
"""

import threading
from typing import Iterable, List, Optional, Sequence

from .paths import combine, normalize_key
from .providers import ConfigurationProvider
from .section import ConfigurationSection
from .tokens import ChangeTokenRegistration, ReloadToken, on_change
from ..infrastructure.exceptions import DisposalError, InvalidStateError
from ..infrastructure.observability.factory import get_configuration_logger


class ConfigurationRoot:
    """
    Root of a configuration hierarchy.

    Reads, writes and child enumeration take no locks; callers serialize
    structural changes themselves. Only the reload token exchange is safe to
    run concurrently, because providers may fire from watcher threads.

    Args:
        providers: Providers in override order, lowest priority first
        owns_providers: Whether ``dispose`` should also dispose the providers
    """

    def __init__(self, providers: Iterable[ConfigurationProvider] = (), owns_providers: bool = True):
        self._providers: Sequence[ConfigurationProvider] = tuple(providers)
        self._owns_providers = owns_providers
        self._change_token_registrations: List[ChangeTokenRegistration] = []
        self._reload_token = ReloadToken()
        self._token_lock = threading.Lock()
        self._disposed = False
        self.logger = get_configuration_logger(type(self).__name__)

        for provider in self._providers:
            self._subscribe(provider)

    @property
    def providers(self) -> List[ConfigurationProvider]:
        """Copy of the provider list, lowest priority first."""
        return list(self._providers)

    def _subscribe(self, provider: ConfigurationProvider) -> None:
        self._change_token_registrations.append(
            on_change(provider.get_reload_token, self._raise_changed)
        )

    # Merge view

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Value of ``key`` from the most recently added provider that has it.

        Missing keys are not an error; ``default`` is returned instead.
        """
        for provider in reversed(self._providers):
            value, found = provider.try_get(key)
            if found:
                return value
        return default

    def set(self, key: str, value: Optional[str]) -> None:
        """
        Write ``key`` to every provider.

        Raises:
            InvalidStateError: if no provider is registered
        """
        if not self._providers:
            raise InvalidStateError(
                "Can only set a value when at least one provider has been added",
                context={"key": key}
            )

        for provider in self._providers:
            provider.set(key, value)

    def __getitem__(self, key: str) -> Optional[str]:
        return self.get(key)

    def __setitem__(self, key: str, value: Optional[str]) -> None:
        self.set(key, value)

    # Section navigation

    def get_section(self, key: str) -> ConfigurationSection:
        """Section rooted at ``key``; never None, possibly empty."""
        return ConfigurationSection(self, key)

    def get_children(self) -> List[ConfigurationSection]:
        """Top-level sections across all providers."""
        return self.get_children_of(None)

    def get_children_of(self, path: Optional[str]) -> List[ConfigurationSection]:
        """
        Immediate child sections of ``path`` (None for the root).

        Each provider adds its own children to the keys gathered so far; the
        result is deduplicated case-insensitively, keeping the first spelling.
        """
        child_keys: List[str] = []
        for provider in self._providers:
            child_keys = provider.get_child_keys(child_keys, path)

        seen = set()
        children = []
        for child_key in child_keys:
            normalized = normalize_key(child_key)
            if normalized in seen:
                continue
            seen.add(normalized)
            section_path = child_key if path is None else combine(path, child_key)
            children.append(self.get_section(section_path))
        return children

    def has_children(self, path: str) -> bool:
        for provider in self._providers:
            if provider.get_child_keys([], path):
                return True
        return False

    # Change notification

    def get_reload_token(self) -> ReloadToken:
        """Token that fires on the next reload of any provider."""
        return self._reload_token

    def _raise_changed(self) -> None:
        with self._token_lock:
            previous, self._reload_token = self._reload_token, ReloadToken()
        self.logger.debug("Configuration changed, firing reload token")
        previous.on_reload()

    def reload(self) -> None:
        """
        Reload every provider in order, then fire the reload token once.

        The first provider failure propagates and the remaining providers are
        not reloaded; providers already reloaded keep their new data.
        """
        for provider in self._providers:
            provider.load()

        self.logger.info("Configuration reloaded", extra={"providers": len(self._providers)})
        self._raise_changed()

    # Lifecycle

    def dispose(self) -> None:
        """
        Detach every provider subscription, then dispose owned providers.

        All providers are disposed even if some fail; the failures are raised
        together as a DisposalError afterwards. Calling dispose twice is a
        no-op. Using the root after disposal is not supported.
        """
        if self._disposed:
            return
        self._disposed = True

        for registration in self._change_token_registrations:
            registration.dispose()
        self._change_token_registrations.clear()

        if not self._owns_providers:
            return

        errors = []
        for provider in self._providers:
            try:
                provider.dispose()
            except Exception as e:
                self.logger.error("Provider teardown failed", extra={
                    "provider": repr(provider)
                }, exc_info=e)
                errors.append(e)

        if errors:
            raise DisposalError(
                f"{len(errors)} provider(s) failed to dispose",
                errors=errors
            )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()

    def __contains__(self, key: str) -> bool:
        return any(provider.try_get(key)[1] for provider in self._providers)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(providers={len(self._providers)})"

