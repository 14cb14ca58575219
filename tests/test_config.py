"""Tests for settings loading."""

import logging

import pytest

from pipegraph import NodeDefinitionError, as_node
from pipegraph.config import ConfigLoader, GraphSettings, configure, get_settings, setup_logging


def test_defaults():
    settings = GraphSettings()

    assert settings.strict_annotations is False
    assert settings.numeric_promotion is True
    assert settings.log_level == "WARNING"


def test_log_level_normalized():
    assert GraphSettings(log_level="debug").log_level == "DEBUG"


def test_unknown_log_level_rejected():
    with pytest.raises(ValueError):
        GraphSettings(log_level="LOUD")


def test_from_env(monkeypatch):
    monkeypatch.setenv("PIPEGRAPH_STRICT_ANNOTATIONS", "true")
    monkeypatch.setenv("PIPEGRAPH_NUMERIC_PROMOTION", "0")
    monkeypatch.setenv("PIPEGRAPH_LOG_LEVEL", "info")

    settings = GraphSettings.from_env()

    assert settings.strict_annotations is True
    assert settings.numeric_promotion is False
    assert settings.log_level == "INFO"


def test_from_env_custom_prefix(monkeypatch):
    monkeypatch.setenv("MYAPP_STRICT_ANNOTATIONS", "yes")

    assert GraphSettings.from_env(prefix="MYAPP").strict_annotations is True


def test_from_env_invalid_bool(monkeypatch):
    monkeypatch.setenv("PIPEGRAPH_STRICT_ANNOTATIONS", "maybe")

    with pytest.raises(ValueError, match="PIPEGRAPH_STRICT_ANNOTATIONS"):
        GraphSettings.from_env()


def test_load_nested_mapping(tmp_path):
    path = tmp_path / "pipegraph.yaml"
    path.write_text("pipegraph:\n  strict_annotations: true\n  log_level: DEBUG\n")

    settings = ConfigLoader(path).load()

    assert settings.strict_annotations is True
    assert settings.log_level == "DEBUG"


def test_load_bare_mapping(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("numeric_promotion: false\n")

    assert ConfigLoader(path).load().numeric_promotion is False


def test_load_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert ConfigLoader(path).load() == GraphSettings()


def test_load_missing_file(tmp_path):
    with pytest.raises(ValueError, match="not found"):
        ConfigLoader(tmp_path / "missing.yaml").load()


def test_load_non_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- strict_annotations\n")

    with pytest.raises(ValueError, match="Expected a mapping"):
        ConfigLoader(path).load()


def test_load_nested_non_mapping(tmp_path):
    path = tmp_path / "nested.yaml"
    path.write_text("pipegraph:\n  - strict_annotations\n")

    with pytest.raises(ValueError, match="nested.yaml"):
        ConfigLoader(path).load()


def test_load_nested_scalar(tmp_path):
    path = tmp_path / "scalar.yaml"
    path.write_text("pipegraph: strict\n")

    with pytest.raises(ValueError, match="Expected a mapping under 'pipegraph'"):
        ConfigLoader(path).load()


def test_load_misspelled_key_rejected(tmp_path):
    path = tmp_path / "typo.yaml"
    path.write_text("strict_anotations: true\n")

    with pytest.raises(ValueError, match="Invalid settings"):
        ConfigLoader(path).load()


def test_unknown_field_rejected():
    with pytest.raises(ValueError):
        GraphSettings(strict_anotations=True)


def test_load_invalid_value(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("strict_annotations: [1, 2]\n")

    with pytest.raises(ValueError, match="Invalid settings"):
        ConfigLoader(path).load()


def test_load_malformed_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("strict_annotations: [unclosed\n")

    with pytest.raises(ValueError, match="Failed to parse"):
        ConfigLoader(path).load()


def test_configure_sets_process_defaults(restore_settings):
    configure(GraphSettings(strict_annotations=True))

    assert get_settings().strict_annotations is True
    with pytest.raises(NodeDefinitionError):
        as_node(lambda x: x)

    configure()
    assert get_settings() == GraphSettings()


def test_setup_logging(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    setup_logging(GraphSettings(log_level="DEBUG"))

    assert calls[0]["level"] == "DEBUG"
    assert "%(name)s" in calls[0]["format"]
