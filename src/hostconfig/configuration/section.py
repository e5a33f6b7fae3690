"""
Configuration Sections

A section is a lightweight (root, path) pair. It holds no data of its own:
every read, write and child lookup goes back through the root, so a section
stays valid across reloads and may point at a path nobody has defined yet.
"""

from typing import TYPE_CHECKING, Any, Iterator, List, Optional, Tuple, Union

from .paths import combine, get_section_key

if TYPE_CHECKING:
    from .root import ConfigurationRoot
    from .tokens import ReloadToken


class ConfigurationSection:
    """View of the configuration below ``path``."""

    def __init__(self, root: 'ConfigurationRoot', path: str):
        self._root = root
        self._path = path

    @property
    def path(self) -> str:
        """Absolute key of this section."""
        return self._path

    @property
    def key(self) -> str:
        """Last segment of the path."""
        return get_section_key(self._path)

    @property
    def value(self) -> Optional[str]:
        return self._root.get(self._path)

    @value.setter
    def value(self, value: Optional[str]) -> None:
        self._root.set(self._path, value)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._root.get(combine(self._path, key), default)

    def set(self, key: str, value: Optional[str]) -> None:
        self._root.set(combine(self._path, key), value)

    def __getitem__(self, key: str) -> Optional[str]:
        return self.get(key)

    def __setitem__(self, key: str, value: Optional[str]) -> None:
        self.set(key, value)

    def get_section(self, key: str) -> 'ConfigurationSection':
        return self._root.get_section(combine(self._path, key))

    def get_children(self) -> List['ConfigurationSection']:
        return self._root.get_children_of(self._path)

    def get_reload_token(self) -> 'ReloadToken':
        return self._root.get_reload_token()

    def exists(self) -> bool:
        """True when the section has a value or any children."""
        return self.value is not None or self._root.has_children(self._path)

    def __repr__(self) -> str:
        return f"ConfigurationSection(path={self._path!r}, value={self.value!r})"


def as_enumerable(
    configuration: Union['ConfigurationRoot', ConfigurationSection, Any],
    make_paths_relative: bool = False,
) -> Iterator[Tuple[str, Optional[str]]]:
    """
    Yield ``(path, value)`` for every section below ``configuration``.

    When ``configuration`` is a section it is included itself, unless
    ``make_paths_relative`` is set; in that case the yielded paths are
    relative to it.
    """
    prefix_length = 0
    if make_paths_relative and isinstance(configuration, ConfigurationSection):
        prefix_length = len(configuration.path) + 1

    stack = [configuration]
    while stack:
        current = stack.pop()
        if isinstance(current, ConfigurationSection):
            if not (make_paths_relative and current is configuration):
                yield current.path[prefix_length:], current.value
        stack.extend(current.get_children())
