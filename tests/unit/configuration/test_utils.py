import json
from pathlib import Path

import pytest

from hostconfig.configuration import load_configuration_from_file, load_default_configuration
from hostconfig.infrastructure.exceptions import LoadError


def test_default_configuration_layers_defaults_file_and_environment(tmp_path: Path, monkeypatch):
    cfg_file = tmp_path / "app.json"
    cfg_file.write_text(json.dumps({"app": {"name": "from-file", "port": 8000}}), encoding="utf-8")
    monkeypatch.setenv("HCUTIL_APP__NAME", "from-env")

    configuration = load_default_configuration(
        defaults={"app:name": "default", "app:debug": "false", "app:port": "1"},
        env_prefix="HCUTIL_",
        config_file=cfg_file,
    )

    assert configuration["app:name"] == "from-env"
    assert configuration["app:port"] == "8000"
    assert configuration["app:debug"] == "false"
    assert len(configuration.providers) == 3
    configuration.dispose()


def test_default_configuration_tolerates_missing_file(tmp_path: Path):
    configuration = load_default_configuration(
        defaults={"color": "blue"},
        env_prefix="HCUTIL_",
        config_file=tmp_path / "missing.yaml",
    )

    assert configuration["color"] == "blue"
    configuration.dispose()


def test_load_configuration_from_yaml_file(tmp_path: Path):
    cfg_file = tmp_path / "app.yml"
    cfg_file.write_text("logging:\n  level: debug\n", encoding="utf-8")

    configuration = load_configuration_from_file(cfg_file)

    assert configuration.get_section("logging")["level"] == "debug"
    configuration.dispose()


def test_load_configuration_from_missing_file_raises(tmp_path: Path):
    with pytest.raises(LoadError):
        load_configuration_from_file(tmp_path / "missing.json")
