"""Tests for watcher configuration and YAML loading."""

from pathlib import Path

import pytest

from pollwatch.config import (
    DEFAULT_INTERVAL_MS,
    CallbackConfig,
    ConfigError,
    WatchConfig,
    load_config,
)
from pollwatch.events import WatchEvent


class TestWatchConfig:
    """Defaults and validation of WatchConfig."""

    def test_defaults(self, tmp_path):
        config = WatchConfig(tmp_path)
        assert config.root_path == tmp_path
        assert config.recursive is False
        assert config.interval_ms == DEFAULT_INTERVAL_MS == 10000
        assert config.interval == 10.0
        assert config.events == WatchEvent.ALL
        assert config.filters == ()
        assert config.filters_inverted is False
        assert config.emit_initial is False

    def test_string_root_becomes_path(self, tmp_path):
        config = WatchConfig(str(tmp_path))
        assert isinstance(config.root_path, Path)

    @pytest.mark.parametrize("value", [None, 0])
    def test_unset_interval_defaults(self, tmp_path, value):
        assert WatchConfig(tmp_path, interval_ms=value).interval_ms == 10000

    @pytest.mark.parametrize("value", [-1, 1.5, "100", True])
    def test_invalid_interval(self, tmp_path, value):
        with pytest.raises(ConfigError, match="interval_ms"):
            WatchConfig(tmp_path, interval_ms=value)

    @pytest.mark.parametrize("value", [None, WatchEvent.NONE, 0])
    def test_unset_events_default_to_all(self, tmp_path, value):
        assert WatchConfig(tmp_path, events=value).events == WatchEvent.ALL

    def test_events_from_names(self, tmp_path):
        config = WatchConfig(tmp_path, events=["created", "deleted"])
        assert config.events == WatchEvent.CREATED | WatchEvent.DELETED

    def test_events_outside_mask(self, tmp_path):
        with pytest.raises(ConfigError, match="outside"):
            WatchConfig(tmp_path, events=16)

    @pytest.mark.parametrize("value", [-1, -15])
    def test_negative_events(self, tmp_path, value):
        with pytest.raises(ConfigError, match="negative"):
            WatchConfig(tmp_path, events=value)

    def test_invalid_filter_pattern(self, tmp_path):
        with pytest.raises(ConfigError, match="Invalid filter pattern"):
            WatchConfig(tmp_path, filters=["(unclosed"])

    def test_single_filter_string(self, tmp_path):
        config = WatchConfig(tmp_path, filters=r"\.txt$")
        assert config.filters == (r"\.txt$",)
        assert config.build_filter().accepts("a.txt")

    def test_build_filter_polarity(self, tmp_path):
        config = WatchConfig(tmp_path, filters=[r"\.txt$"], filters_inverted=True)
        path_filter = config.build_filter()
        assert not path_filter.accepts("a.txt")
        assert path_filter.accepts("a.csv")

    def test_frozen(self, tmp_path):
        config = WatchConfig(tmp_path)
        with pytest.raises(AttributeError):
            config.recursive = True


class TestLoadConfig:
    """YAML configuration loading."""

    def test_full_config(self, tmp_path):
        config_file = tmp_path / "pollwatch.yaml"
        config_file.write_text(
            """
watch:
  root_path: incoming
  recursive: true
  interval_ms: 2500
  events: [created, modified]
  filters:
    - '\\.fits$'
  filters_inverted: true
  emit_initial: true
callback:
  module: pollwatch.callbacks
  function: summarize_events
  options:
    level: DEBUG
"""
        )

        app = load_config(config_file)

        assert app.watch.root_path == (tmp_path / "incoming").resolve()
        assert app.watch.recursive is True
        assert app.watch.interval_ms == 2500
        assert app.watch.events == WatchEvent.CREATED | WatchEvent.MODIFIED
        assert app.watch.filters == (r"\.fits$",)
        assert app.watch.filters_inverted is True
        assert app.watch.emit_initial is True
        assert app.callback == CallbackConfig(
            module="pollwatch.callbacks",
            function="summarize_events",
            options={"level": "DEBUG"},
        )

    def test_minimal_config(self, tmp_path):
        config_file = tmp_path / "pollwatch.yaml"
        config_file.write_text(f"watch:\n  root_path: {tmp_path}\n")

        app = load_config(config_file)

        assert app.watch.root_path == tmp_path
        assert app.watch.events == WatchEvent.ALL
        assert app.watch.interval_ms == 10000
        assert app.callback is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "pollwatch.yaml"
        config_file.write_text("watch: [unclosed\n")
        with pytest.raises(ConfigError, match="Failed to parse"):
            load_config(config_file)

    def test_root_must_be_mapping(self, tmp_path):
        config_file = tmp_path / "pollwatch.yaml"
        config_file.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(config_file)

    @pytest.mark.parametrize(
        "body, message",
        [
            ("watch:\n  recursive: true\n", "watch.root_path"),
            ("watch:\n  root_path: x\n  recursive: 'yes'\n", "watch.recursive"),
            ("watch:\n  root_path: x\n  interval_ms: fast\n", "watch.interval_ms"),
            ("watch:\n  root_path: x\n  events: [renamed]\n", "watch.events"),
            ("watch:\n  root_path: x\n  filters: 3\n", "watch.filters"),
            ("watch:\n  root_path: x\ncallback:\n  module: m\n", "callback"),
        ],
    )
    def test_invalid_fields(self, tmp_path, body, message):
        config_file = tmp_path / "pollwatch.yaml"
        config_file.write_text(body)
        with pytest.raises(ConfigError, match=message):
            load_config(config_file)
