"""
Host Configuration

The configuration aggregator used by hosting code. It is a builder and a
configuration root at once: every source added is built and loaded
immediately, so values can be read while the configuration is still being
assembled.
"""

from typing import Any, Dict, List

from .builder import ConfigurationBuilderMixin
from .providers import ConfigurationProvider
from .root import ConfigurationRoot
from .sources import ConfigurationSource
from ..infrastructure.exceptions import ArgumentError


class HostConfiguration(ConfigurationRoot, ConfigurationBuilderMixin):
    """
    Mutable, reloadable configuration assembled from sources one at a time.

    Providers are consulted last-added-first on reads and all receive every
    write. Any provider reload fires this configuration's reload token.

    Example:
        >>> config = HostConfiguration()
        >>> config.add_in_memory_collection({"color": "blue"})
        HostConfiguration(providers=1)
        >>> config["type"] = "car"
        >>> config["color"], config["type"]
        ('blue', 'car')

    Not thread-safe for concurrent ``add``/``set``/``get``; only the reload
    notification path tolerates providers firing from other threads.
    """

    def __init__(self):
        super().__init__(providers=(), owns_providers=True)
        self._providers: List[ConfigurationProvider] = []
        self._sources: List[ConfigurationSource] = []
        # Shared with sources while they build their providers
        self.properties: Dict[str, Any] = {}

    @property
    def sources(self) -> List[ConfigurationSource]:
        """Copy of the sources in the order they were added."""
        return list(self._sources)

    def add(self, source: ConfigurationSource) -> 'HostConfiguration':
        """
        Build, load and register the provider for ``source``.

        Args:
            source: Configuration source to add

        Returns:
            Self for method chaining

        Raises:
            ArgumentError: if ``source`` is None
            Exception: whatever the provider's initial load raises, unchanged
        """
        if source is None:
            raise ArgumentError("source must not be None", argument="source")

        provider = source.build(self)
        provider.load()

        self._subscribe(provider)
        self._sources.append(source)
        self._providers.append(provider)

        self.logger.debug("Configuration source added", extra={
            "source": type(source).__name__,
            "provider": repr(provider),
            "providers": len(self._providers)
        })
        return self

    def build(self) -> ConfigurationRoot:
        """
        Snapshot of the current provider list as a separate root.

        The snapshot shares the providers but not their ownership: disposing it
        only detaches its own reload subscriptions.
        """
        return ConfigurationRoot(self._providers, owns_providers=False)
