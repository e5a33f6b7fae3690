from typing import Dict, List, Optional

import pytest

from hostconfig.configuration.core import HostConfiguration
from hostconfig.configuration.providers import ConfigurationData, ConfigurationProvider
from hostconfig.configuration.sources import ConfigurationSource
from hostconfig.infrastructure.exceptions import LoadError
from hostconfig.infrastructure.observability.factory import reset_logging


class RecordingProvider(ConfigurationProvider):
    """Provider that records load/dispose calls and can be told to fail.

    - ``load`` replaces the data with the initial data, like a real origin read
    - ``events`` (optionally shared between providers) records call order
    """

    def __init__(
        self,
        name: str,
        data: Optional[Dict[str, Optional[str]]] = None,
        events: Optional[List[tuple]] = None,
        fail_on_load: bool = False,
        fail_on_dispose: bool = False,
    ) -> None:
        super().__init__()
        self.name = name
        self.initial_data = dict(data or {})
        self.events = events if events is not None else []
        self.fail_on_load = fail_on_load
        self.fail_on_dispose = fail_on_dispose
        self.load_count = 0
        self.disposed = False
        self.load_error = LoadError(f"origin of {name} unavailable")

    def load(self) -> None:
        self.load_count += 1
        self.events.append(("load", self.name))
        if self.fail_on_load:
            raise self.load_error
        self.data = ConfigurationData(self.initial_data)

    def dispose(self) -> None:
        self.events.append(("dispose", self.name))
        self.disposed = True
        if self.fail_on_dispose:
            raise RuntimeError(f"{self.name} teardown failed")


class StaticSource(ConfigurationSource):
    """Source returning a pre-built provider and remembering the builder it saw."""

    def __init__(self, provider: ConfigurationProvider) -> None:
        self.provider = provider
        self.built_with = None

    def build(self, builder):
        self.built_with = builder
        return self.provider


@pytest.fixture
def events() -> List[tuple]:
    return []


@pytest.fixture
def make_source(events):
    def _make(name: str, data: Optional[Dict[str, Optional[str]]] = None, **kwargs) -> StaticSource:
        return StaticSource(RecordingProvider(name, data, events=events, **kwargs))
    return _make


@pytest.fixture
def host_config():
    configuration = HostConfiguration()
    yield configuration
    configuration.dispose()


@pytest.fixture(autouse=True)
def _isolate_logging():
    yield
    reset_logging()
