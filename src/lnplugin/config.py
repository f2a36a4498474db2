"""Plugin process settings.

Settings are read from the environment (``LNPLUGIN_*``) and resolved once,
when the plugin is constructed:

- LNPLUGIN_LOG_FILE: File the logs go to when running under the host
- LNPLUGIN_LOG_LEVEL: Minimum log level (debug/info/warning/error)
- LNPLUGIN_HOST_MARKER: Environment variable the host sets for its plugins
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LOG_FILE = "lnplugin.log"
DEFAULT_HOST_MARKER = "LIGHTNINGD_PLUGIN"


class LogSink(BaseModel):
    """Where the plugin's log output goes.

    ``stderr`` leaves stdout to the protocol. ``file`` appends to ``path``
    and also captures stray writes to ``sys.stdout`` while the plugin runs.
    """

    kind: Literal["stderr", "file"] = "stderr"
    path: Path | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_path(self) -> LogSink:
        """A file sink needs a path."""
        if self.kind == "file" and self.path is None:
            raise ValueError("A file log sink requires a path")
        return self

    @classmethod
    def stderr(cls) -> LogSink:
        return cls(kind="stderr")

    @classmethod
    def file(cls, path: str | Path) -> LogSink:
        return cls(kind="file", path=Path(path))

    @property
    def is_file(self) -> bool:
        return self.kind == "file"


class PluginSettings(BaseSettings):
    """Process-level plugin settings.

    Attributes:
        log_file: Log file used when the host manages this process
        log_level: Minimum log level
        host_marker: Name of the environment variable the host sets

    Example:
        >>> settings = PluginSettings()
        >>> print(settings.log_file)
        lnplugin.log
    """

    log_file: Path = Field(default=Path(DEFAULT_LOG_FILE))
    log_level: Literal["debug", "info", "warning", "error"] = Field(default="info")
    host_marker: str = Field(default=DEFAULT_HOST_MARKER, min_length=1)

    model_config = SettingsConfigDict(
        env_prefix="LNPLUGIN_",
        case_sensitive=False,
    )

    @property
    def host_managed(self) -> bool:
        """True when the host marker is present in the environment."""
        return self.host_marker in os.environ

    def resolve_log_sink(self) -> LogSink:
        """Pick the log sink: the log file under the host, stderr otherwise."""
        if self.host_managed:
            return LogSink.file(self.log_file)
        return LogSink.stderr()
