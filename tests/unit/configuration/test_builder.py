from pathlib import Path

import pytest

from hostconfig.configuration import (
    ConfigurationBuilder,
    ConfigurationRoot,
    MemoryConfigurationSource,
)
from hostconfig.configuration.sources import BASE_PATH_PROPERTY
from hostconfig.infrastructure.exceptions import ArgumentError, LoadError


def test_build_loads_sources_in_order(make_source, events):
    builder = ConfigurationBuilder()
    builder.add(make_source("p1", {"color": "blue"})).add(make_source("p2", {"color": "red"}))
    assert events == []

    root = builder.build()

    assert isinstance(root, ConfigurationRoot)
    assert events == [("load", "p1"), ("load", "p2")]
    assert root["color"] == "red"
    root.dispose()


def test_sources_property_is_a_copy():
    builder = ConfigurationBuilder().add_in_memory_collection({"a": "1"})

    builder.sources.clear()

    assert len(builder.sources) == 1
    assert isinstance(builder.sources[0], MemoryConfigurationSource)


def test_add_none_raises_argument_error():
    with pytest.raises(ArgumentError):
        ConfigurationBuilder().add(None)


def test_set_base_path_is_stored_in_properties(tmp_path: Path):
    builder = ConfigurationBuilder().set_base_path(str(tmp_path))

    assert builder.properties[BASE_PATH_PROPERTY] == tmp_path


def test_failed_build_disposes_providers_already_built(make_source, events):
    builder = ConfigurationBuilder()
    builder.add(make_source("p1")).add(make_source("p2", fail_on_load=True))

    with pytest.raises(LoadError):
        builder.build()

    assert ("dispose", "p1") in events
    assert ("dispose", "p2") in events


def test_teardown_failure_during_rollback_keeps_load_error(make_source, events):
    builder = ConfigurationBuilder()
    builder.add(make_source("p1", fail_on_dispose=True))
    builder.add(make_source("p2"))
    builder.add(make_source("p3", fail_on_load=True))

    with pytest.raises(LoadError):
        builder.build()

    assert [e for e in events if e[0] == "dispose"] == [
        ("dispose", "p1"), ("dispose", "p2"), ("dispose", "p3")
    ]


def test_built_root_owns_its_providers(make_source):
    source = make_source("p1")
    root = ConfigurationBuilder().add(source).build()

    root.dispose()

    assert source.provider.disposed


def test_each_build_creates_new_providers():
    builder = ConfigurationBuilder().add_in_memory_collection({"color": "blue"})

    first = builder.build()
    second = builder.build()
    first["color"] = "red"

    assert second["color"] == "blue"
    assert first.providers[0] is not second.providers[0]
