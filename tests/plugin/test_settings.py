"""Tests for plugin settings and log sink resolution."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from lnplugin.config import DEFAULT_HOST_MARKER, DEFAULT_LOG_FILE, LogSink, PluginSettings


class TestLogSink:
    """Tests for LogSink."""

    def test_default_is_stderr(self) -> None:
        """Test the default sink writes to stderr."""
        sink = LogSink()
        assert sink == LogSink.stderr()
        assert sink.is_file is False
        assert sink.path is None

    def test_file_sink(self) -> None:
        """Test a file sink keeps its path."""
        sink = LogSink.file("plugin.log")
        assert sink.is_file is True
        assert sink.path == Path("plugin.log")

    def test_file_sink_requires_path(self) -> None:
        """Test a file sink without a path is rejected."""
        with pytest.raises(ValidationError, match="requires a path"):
            LogSink(kind="file")

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LogSink(kind="syslog")

    def test_immutable(self) -> None:
        sink = LogSink.stderr()
        with pytest.raises(ValidationError):
            sink.kind = "file"


class TestPluginSettings:
    """Tests for PluginSettings."""

    def test_default_values(self) -> None:
        """Test default settings values."""
        settings = PluginSettings()
        assert settings.log_file == Path(DEFAULT_LOG_FILE)
        assert settings.log_level == "info"
        assert settings.host_marker == DEFAULT_HOST_MARKER

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test LNPLUGIN_* variables override the defaults."""
        monkeypatch.setenv("LNPLUGIN_LOG_FILE", "/var/log/plugin.log")
        monkeypatch.setenv("LNPLUGIN_LOG_LEVEL", "debug")
        monkeypatch.setenv("LNPLUGIN_HOST_MARKER", "MY_HOST")

        settings = PluginSettings()
        assert settings.log_file == Path("/var/log/plugin.log")
        assert settings.log_level == "debug"
        assert settings.host_marker == "MY_HOST"

    def test_invalid_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LNPLUGIN_LOG_LEVEL", "verbose")

        with pytest.raises(ValidationError):
            PluginSettings()

    def test_empty_host_marker_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PluginSettings(host_marker="")

    def test_not_host_managed_by_default(self) -> None:
        """Test a process started by hand is not host managed."""
        settings = PluginSettings()
        assert settings.host_managed is False
        assert settings.resolve_log_sink() == LogSink.stderr()

    def test_host_marker_selects_log_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the host marker switches logging to the log file."""
        monkeypatch.setenv("LIGHTNINGD_PLUGIN", "1")
        settings = PluginSettings(log_file=Path("/tmp/plugin.log"))

        assert settings.host_managed is True
        assert settings.resolve_log_sink() == LogSink.file("/tmp/plugin.log")

    def test_marker_value_is_irrelevant(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test only the presence of the marker counts."""
        monkeypatch.setenv("LIGHTNINGD_PLUGIN", "")
        assert PluginSettings().host_managed is True

    def test_custom_host_marker(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OTHER_HOST_PLUGIN", "1")

        assert PluginSettings().host_managed is False
        assert PluginSettings(host_marker="OTHER_HOST_PLUGIN").host_managed is True
