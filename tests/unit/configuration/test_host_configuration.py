"""
Tests for HostConfiguration: source registration, merged reads, write-through,
sections, snapshots and disposal.
"""

import itertools

import pytest

from hostconfig.configuration import (
    ConfigurationRoot,
    HostConfiguration,
    MemoryConfigurationSource,
    as_enumerable,
)
from hostconfig.infrastructure.exceptions import (
    ArgumentError,
    DisposalError,
    InvalidStateError,
    LoadError,
)


def test_adds_sources_to_public_property(host_config):
    memory_config = MemoryConfigurationSource({"color": "blue"})

    host_config.add(memory_config)

    assert memory_config in host_config.sources
    assert len(host_config.providers) == 1


def test_add_returns_self_for_chaining(host_config):
    result = host_config.add(MemoryConfigurationSource({"a": "1"})).add(MemoryConfigurationSource({"b": "2"}))

    assert result is host_config
    assert host_config["a"] == "1"
    assert host_config["b"] == "2"


def test_add_passes_the_aggregator_to_the_source(host_config, make_source):
    source = make_source("p1")

    host_config.add(source)

    assert source.built_with is host_config


def test_add_loads_provider_immediately(host_config, make_source):
    source = make_source("p1", {"color": "blue"})

    host_config.add(source)

    assert source.provider.load_count == 1
    assert host_config["color"] == "blue"


def test_add_none_raises_and_leaves_state_unchanged(host_config):
    host_config.add(MemoryConfigurationSource({"color": "blue"}))

    with pytest.raises(ArgumentError) as ex:
        host_config.add(None)

    assert ex.value.error_code == "ARGUMENT_ERROR"
    assert isinstance(ex.value, ValueError)
    assert len(host_config.sources) == 1
    assert len(host_config.providers) == 1


def test_add_propagates_load_failure_unmodified(host_config, make_source):
    source = make_source("broken", fail_on_load=True)

    with pytest.raises(LoadError) as ex:
        host_config.add(source)

    assert ex.value is source.provider.load_error
    assert host_config.sources == []
    assert host_config.providers == []


def test_can_set_and_get_configuration_value(host_config):
    host_config.add(MemoryConfigurationSource({"color": "blue"}))

    host_config["type"] = "car"

    assert host_config["type"] == "car"
    assert host_config["color"] == "blue"


def test_setting_value_updates_all_providers(host_config):
    initial_data = {"color": "blue"}
    host_config.add(MemoryConfigurationSource(initial_data))
    host_config.add(MemoryConfigurationSource(initial_data))

    host_config["type"] = "car"

    assert host_config["type"] == "car"
    assert host_config["color"] == "blue"
    assert all(provider.try_get("type") == ("car", True) for provider in host_config.providers)


def test_set_overrides_value_held_by_lower_priority_provider(host_config):
    host_config.add(MemoryConfigurationSource({"color": "blue"}))
    host_config.add(MemoryConfigurationSource({"size": "large"}))

    host_config.set("color", "red")

    assert host_config.get("color") == "red"
    assert [p.try_get("color") for p in host_config.providers] == [("red", True), ("red", True)]


def test_set_without_providers_raises_invalid_state(host_config):
    with pytest.raises(InvalidStateError) as ex:
        host_config["type"] = "car"

    assert ex.value.error_code == "INVALID_STATE"
    assert host_config.providers == []


def test_missing_key_is_not_an_error(host_config):
    assert host_config["missing"] is None
    host_config.add(MemoryConfigurationSource({"color": "blue"}))
    assert host_config["missing"] is None
    assert host_config.get("missing", "fallback") == "fallback"


def test_keys_are_case_insensitive(host_config):
    host_config.add(MemoryConfigurationSource({"Wheels:Brand": "michelin"}))

    assert host_config["wheels:brand"] == "michelin"
    host_config["WHEELS:BRAND"] = "pirelli"
    assert host_config["Wheels:Brand"] == "pirelli"


def test_explicit_none_value_still_counts_as_found(host_config):
    host_config.add(MemoryConfigurationSource({"color": "blue"}))
    host_config.add(MemoryConfigurationSource({"color": None}))

    assert host_config.get("color", "fallback") is None


@pytest.mark.parametrize("order", list(itertools.permutations(range(3))))
def test_last_added_provider_containing_key_wins(order):
    layers = [{"key": "first", "only0": "x"}, {"key": "second"}, {"other": "y"}]
    configuration = HostConfiguration()
    for index in order:
        configuration.add(MemoryConfigurationSource(layers[index]))

    expected = [layers[i]["key"] for i in order if "key" in layers[i]][-1]
    assert configuration["key"] == expected
    assert configuration["only0"] == "x"
    assert configuration["other"] == "y"
    configuration.dispose()


def test_can_get_children(host_config):
    host_config.add(MemoryConfigurationSource({"color": "blue"}))

    children = host_config.get_children()

    assert children
    assert [child.key for child in children] == ["color"]


def test_can_get_section(host_config):
    host_config.add(MemoryConfigurationSource({
        "color": "blue",
        "type": "car",
        "wheels:year": "2008",
        "wheels:count": "4",
        "wheels:brand": "michelin",
        "wheels:brand:type": "rally",
    }))

    section = dict(as_enumerable(host_config.get_section("wheels"), make_paths_relative=True))

    assert section == {
        "year": "2008",
        "count": "4",
        "brand": "michelin",
        "brand:type": "rally",
    }


def test_section_over_missing_prefix_is_empty_not_none(host_config):
    host_config.add(MemoryConfigurationSource({"color": "blue"}))

    section = host_config.get_section("nonexistent")

    assert section is not None
    assert section.get_children() == []
    assert not section.exists()


def test_children_are_deduplicated_case_insensitively(host_config):
    host_config.add(MemoryConfigurationSource({"Color": "red"}))
    host_config.add(MemoryConfigurationSource({"color": "blue"}))

    children = host_config.get_children()

    assert len(children) == 1
    assert children[0].key.lower() == "color"
    assert children[0].value == "blue"


def test_children_merge_across_providers(host_config):
    host_config.add(MemoryConfigurationSource({"db:host": "a", "db:port": "1"}))
    host_config.add(MemoryConfigurationSource({"db:user": "u", "cache:size": "5"}))

    assert [c.key for c in host_config.get_children()] == ["cache", "db"]
    assert [c.key for c in host_config.get_section("db").get_children()] == ["host", "port", "user"]


def test_sources_and_providers_are_copies(host_config):
    host_config.add(MemoryConfigurationSource({"color": "blue"}))

    host_config.sources.clear()
    host_config.providers.clear()

    assert len(host_config.sources) == 1
    assert len(host_config.providers) == 1


def test_build_returns_snapshot_of_current_providers(host_config, make_source):
    host_config.add(make_source("p1", {"color": "blue"}))

    snapshot = host_config.build()
    host_config.add(make_source("p2", {"color": "red"}))

    assert isinstance(snapshot, ConfigurationRoot)
    assert len(snapshot.providers) == 1
    assert snapshot["color"] == "blue"
    assert host_config["color"] == "red"


def test_build_snapshot_does_not_dispose_shared_providers(host_config, make_source):
    source = make_source("p1", {"color": "blue"})
    host_config.add(source)

    snapshot = host_config.build()
    token = snapshot.get_reload_token()
    snapshot.dispose()
    source.provider.on_reload()

    assert not source.provider.disposed
    assert not token.has_changed
    assert host_config["color"] == "blue"


def test_can_dispose_providers(host_config):
    host_config.add(MemoryConfigurationSource({"color": "blue"}))
    assert host_config["color"] == "blue"

    host_config.dispose()


def test_dispose_detaches_subscriptions_before_disposing_providers(host_config, make_source, events):
    source = make_source("p1", {"color": "blue"})
    host_config.add(source)
    token = host_config.get_reload_token()

    host_config.dispose()
    source.provider.on_reload()

    assert source.provider.disposed
    assert not token.has_changed
    assert events[-1] == ("dispose", "p1")


def test_dispose_continues_after_teardown_failure(host_config, make_source):
    failing = make_source("p1", fail_on_dispose=True)
    healthy = make_source("p2")
    host_config.add(failing).add(healthy)

    with pytest.raises(DisposalError) as ex:
        host_config.dispose()

    assert failing.provider.disposed
    assert healthy.provider.disposed
    assert len(ex.value.errors) == 1
    assert isinstance(ex.value.errors[0], RuntimeError)


def test_second_dispose_is_a_no_op(host_config, make_source, events):
    host_config.add(make_source("p1"))

    host_config.dispose()
    host_config.dispose()

    assert events.count(("dispose", "p1")) == 1


def test_context_manager_disposes(make_source):
    source = make_source("p1", {"color": "blue"})

    with HostConfiguration() as configuration:
        configuration.add(source)
        assert configuration["color"] == "blue"

    assert source.provider.disposed
