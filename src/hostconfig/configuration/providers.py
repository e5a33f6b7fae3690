"""
Configuration Providers

A provider is a stateful, case-insensitive key-value store built from one
configuration source. The aggregator only relies on the methods of
``ConfigurationProvider``; the concrete classes below are reference
implementations for in-memory data, environment variables and YAML/JSON files.
"""

import json
from abc import ABC, abstractmethod
import os
import threading
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, TextIO, Tuple, TYPE_CHECKING

import yaml

from .paths import KEY_DELIMITER, combine, key_sort_key, normalize_key
from .tokens import ReloadToken
from .watcher import FileChangeWatcher
from ..infrastructure.exceptions import LoadError
from ..infrastructure.observability.factory import get_provider_logger

if TYPE_CHECKING:
    from .sources import (
        EnvironmentVariablesConfigurationSource, FileConfigurationSource,
        MemoryConfigurationSource
    )


class ConfigurationData(MutableMapping):
    """
    Dictionary with case-insensitive string keys.

    The spelling used when a key is first inserted is kept; later writes with
    a different casing update the value only.
    """

    def __init__(self, items: Optional[Mapping[str, Optional[str]]] = None):
        self._store: Dict[str, Tuple[str, Optional[str]]] = {}
        if items:
            self.update(items)

    def __getitem__(self, key: str) -> Optional[str]:
        return self._store[normalize_key(key)][1]

    def __setitem__(self, key: str, value: Optional[str]) -> None:
        normalized = normalize_key(key)
        existing = self._store.get(normalized)
        self._store[normalized] = (existing[0] if existing else key, value)

    def __delitem__(self, key: str) -> None:
        del self._store[normalize_key(key)]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and normalize_key(key) in self._store

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"ConfigurationData({dict(self.items())!r})"


class ConfigurationProvider:
    """
    Base class for configuration providers.

    Subclasses usually only override ``load`` and fill ``self.data``. The
    teardown hook ``dispose`` does nothing unless a provider owns resources.
    """

    def __init__(self):
        self.data = ConfigurationData()
        self._reload_token = ReloadToken()
        self._token_lock = threading.Lock()

    def try_get(self, key: str) -> Tuple[Optional[str], bool]:
        """Return ``(value, found)`` for a case-insensitive key lookup."""
        if key in self.data:
            return self.data[key], True
        return None, False

    def set(self, key: str, value: Optional[str]) -> None:
        self.data[key] = value

    def load(self) -> None:
        """Reload data from the origin. Raises LoadError on failure."""

    def get_child_keys(self, earlier_keys: Iterable[str], parent_path: Optional[str]) -> List[str]:
        """
        Immediate child segments of ``parent_path`` held by this provider,
        concatenated with ``earlier_keys`` and sorted.

        Duplicates are kept; the caller decides how to merge them.
        """
        results: List[str] = []

        if parent_path is None:
            for key in self.data:
                results.append(key.split(KEY_DELIMITER, 1)[0])
        else:
            prefix = normalize_key(parent_path + KEY_DELIMITER)
            for key in self.data:
                if len(key) > len(prefix) and normalize_key(key[:len(prefix)]) == prefix:
                    results.append(key[len(prefix):].split(KEY_DELIMITER, 1)[0])

        results.extend(earlier_keys)
        results.sort(key=key_sort_key)
        return results

    def get_reload_token(self) -> ReloadToken:
        return self._reload_token

    def on_reload(self) -> None:
        """Swap in a fresh reload token and fire the previous one."""
        with self._token_lock:
            previous, self._reload_token = self._reload_token, ReloadToken()
        previous.on_reload()

    def dispose(self) -> None:
        """Release resources owned by the provider."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(keys={len(self.data)})"


class MemoryConfigurationProvider(ConfigurationProvider):
    """Provider seeded from an in-memory mapping."""

    def __init__(self, source: 'MemoryConfigurationSource'):
        super().__init__()
        self.source = source
        for key, value in source.initial_data.items():
            self.data[key] = value

    def add(self, key: str, value: Optional[str]) -> None:
        self.data[key] = value

    def __iter__(self) -> Iterator[Tuple[str, Optional[str]]]:
        return iter(list(self.data.items()))


class EnvironmentVariablesConfigurationProvider(ConfigurationProvider):
    """
    Provider reading ``os.environ``.

    Only variables starting with the prefix (case-insensitive) are kept, with
    the prefix removed. A double underscore in a variable name stands for the
    key delimiter, so ``APP_DATABASE__HOST`` becomes ``DATABASE:HOST`` under
    the prefix ``APP_``.
    """

    def __init__(self, source: 'EnvironmentVariablesConfigurationSource'):
        super().__init__()
        self.source = source
        self._prefix = (source.prefix or "").replace("__", KEY_DELIMITER)

    def load(self) -> None:
        data = ConfigurationData()
        prefix = normalize_key(self._prefix)

        for name, value in os.environ.items():
            key = name.replace("__", KEY_DELIMITER)
            if not normalize_key(key).startswith(prefix):
                continue
            key = key[len(self._prefix):]
            if key:
                data[key] = value

        self.data = data

    def __repr__(self) -> str:
        return f"{type(self).__name__}(prefix={self._prefix!r})"


def flatten_mapping(value: Any, parent: Optional[str] = None) -> Dict[str, str]:
    """
    Flatten nested mappings and sequences into delimiter-joined keys.

    Sequence items are keyed by index. Scalars become strings: ``None`` maps
    to an empty string and booleans to "true"/"false". Keys that collide
    case-insensitively raise ValueError.
    """
    flattened: Dict[str, str] = {}
    seen: Dict[str, str] = {}

    def _visit(node: Any, path: Optional[str]) -> None:
        if isinstance(node, Mapping):
            for key, child in node.items():
                _visit(child, combine(path, str(key)) if path else str(key))
        elif isinstance(node, (list, tuple)):
            for index, child in enumerate(node):
                _visit(child, combine(path, str(index)) if path else str(index))
        elif path is not None:
            normalized = normalize_key(path)
            if normalized in seen:
                raise ValueError(f"Duplicate key '{path}' (already defined as '{seen[normalized]}')")
            seen[normalized] = path
            flattened[path] = _scalar_to_string(node)

    _visit(value, parent)
    return flattened


def _scalar_to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class FileConfigurationProvider(ConfigurationProvider, ABC):
    """
    Base class for file backed providers.

    Subclasses implement ``parse``. With ``reload_on_change`` the first
    successful ``load`` starts a polling watcher; each detected change reloads
    the data and fires the reload token. A failed background reload is logged
    and the previous data stays in place.
    """

    def __init__(self, source: 'FileConfigurationSource', path: Path):
        super().__init__()
        self.source = source
        self.path = path
        self._watcher: Optional[FileChangeWatcher] = None
        self.logger = get_provider_logger(type(self).__name__)

    @abstractmethod
    def parse(self, stream: TextIO) -> Dict[str, str]:
        """Turn the open file into flat key/value pairs. Raises LoadError on bad content."""
        pass

    def load(self) -> None:
        self._load_data()

        if self.source.reload_on_change and self._watcher is None:
            self._watcher = FileChangeWatcher(
                self.path, self._reload_from_watcher, interval=self.source.reload_interval
            )
            self._watcher.start()

    def _load_data(self) -> None:
        if not self.path.exists():
            if self.source.optional:
                self.data = ConfigurationData()
                return
            raise LoadError(
                f"Configuration file not found: {self.path}",
                config_path=str(self.path)
            )

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                parsed = self.parse(f)
        except OSError as e:
            raise LoadError(
                f"Error reading configuration file: {self.path}",
                config_path=str(self.path),
                cause=e
            ) from e
        except UnicodeDecodeError as e:
            raise LoadError(
                f"Configuration file is not valid UTF-8: {self.path}",
                config_path=str(self.path),
                cause=e
            ) from e

        self.data = ConfigurationData(parsed)
        self.logger.debug("Loaded configuration file", extra={
            "path": str(self.path),
            "keys": len(self.data)
        })

    def _reload_from_watcher(self) -> None:
        try:
            self._load_data()
        except LoadError as e:
            self.logger.error("Failed to reload configuration file", extra={
                "path": str(self.path)
            }, exc_info=e)
            return

        self.logger.info("Configuration file changed", extra={"path": str(self.path)})
        self.on_reload()

    def dispose(self) -> None:
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path='{self.path}', optional={self.source.optional})"


class YAMLConfigurationProvider(FileConfigurationProvider):
    """Provider loading a YAML document whose top level is a mapping."""

    def parse(self, stream: TextIO) -> Dict[str, str]:
        try:
            document = yaml.safe_load(stream)
        except yaml.YAMLError as e:
            raise LoadError(
                f"Invalid YAML in configuration file: {self.path}",
                config_path=str(self.path),
                cause=e
            ) from e

        return _flatten_document(document, self.path)


class JSONConfigurationProvider(FileConfigurationProvider):
    """Provider loading a JSON document whose top level is an object."""

    def parse(self, stream: TextIO) -> Dict[str, str]:
        try:
            document = json.load(stream)
        except json.JSONDecodeError as e:
            raise LoadError(
                f"Invalid JSON in configuration file: {self.path}",
                config_path=str(self.path),
                cause=e
            ) from e

        return _flatten_document(document, self.path)


def _flatten_document(document: Any, path: Path) -> Dict[str, str]:
    if document is None:
        return {}
    if not isinstance(document, Mapping):
        raise LoadError(
            f"Top-level element of configuration file must be a mapping: {path}",
            config_path=str(path)
        )
    try:
        return flatten_mapping(document)
    except ValueError as e:
        raise LoadError(str(e), config_path=str(path), cause=e) from e
