"""Tests for configuration loading."""

import logging

from doc_seeker.config import Config, configure_logging, get_config, reset_config
from doc_seeker.normalization import ManifestNormalizer


def test_defaults():
    config = get_config()

    assert config.manifest.line_prefix == "searchIndex"
    assert config.index.compression_level == 6
    assert config.search.default_edit_distance == 1
    assert config.search.levenshtein_state_limit == 10_000
    assert config.log_level == "INFO"


def test_get_config_is_cached():
    assert get_config() is get_config()

    first = get_config()
    reset_config()
    assert get_config() is not first


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MANIFEST_LINE_PREFIX", "docIndex")
    monkeypatch.setenv("INDEX_COMPRESSION_LEVEL", "19")
    monkeypatch.setenv("SEARCH_DEFAULT_EDIT_DISTANCE", "2")

    config = Config()

    assert config.manifest.line_prefix == "docIndex"
    assert config.index.compression_level == 19
    assert config.search.default_edit_distance == 2


def test_normalizer_reads_prefix_from_config(monkeypatch):
    monkeypatch.setenv("MANIFEST_LINE_PREFIX", "docIndex")

    assert ManifestNormalizer().line_prefix == "docIndex"


def test_configure_logging(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setenv("LOG_LEVEL", "debug")

    configure_logging()
    configure_logging("warning")

    assert [c["level"] for c in calls] == ["DEBUG", "WARNING"]
