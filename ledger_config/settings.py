"""
Render settings (``ledger_config.settings``).

Responsibility
--------------
Resolves the few process-level knobs of the command-line renderer: output
encoding and logging. The renderer itself takes no configuration.

Resolution order (later wins):
    1. Built-in defaults
    2. YAML settings file (``--config``), keys ``encoding``, ``log_level``,
       ``log_json``
    3. Environment: ``LEDGER_RENDER_ENCODING``, ``LEDGER_RENDER_LOG_LEVEL``

Failure modes
-------------
* Missing settings file -> ``FileNotFoundError`` propagates.
* Settings file that is not a mapping, unknown encoding or log level
  -> ``ValueError``.
"""

from __future__ import annotations

import codecs
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from ledger_config.loader import load_yaml_file

_logger = logging.getLogger("ledger_kernel.config")

ENV_ENCODING = "LEDGER_RENDER_ENCODING"
ENV_LOG_LEVEL = "LEDGER_RENDER_LOG_LEVEL"


@dataclass(frozen=True, slots=True)
class RenderSettings:
    """Process-level settings for rendering ledgers to files or streams."""

    encoding: str = "utf-8"
    log_level: str = "WARNING"
    log_json: bool = True

    def __post_init__(self) -> None:
        try:
            codecs.lookup(self.encoding)
        except LookupError as exc:
            raise ValueError(f"Unknown encoding: {self.encoding}") from exc
        level = self.log_level.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {self.log_level}")
        object.__setattr__(self, "log_level", level)

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


def _from_mapping(base: RenderSettings, data: dict[str, Any]) -> RenderSettings:
    overrides: dict[str, Any] = {}
    if data.get("encoding") is not None:
        overrides["encoding"] = str(data["encoding"])
    if data.get("log_level") is not None:
        overrides["log_level"] = str(data["log_level"])
    if data.get("log_json") is not None:
        overrides["log_json"] = bool(data["log_json"])
    return replace(base, **overrides) if overrides else base


def get_settings(
    config_path: Path | None = None,
    environ: dict[str, str] | None = None,
) -> RenderSettings:
    """
    Resolve the active settings.

    ``environ`` defaults to ``os.environ``; tests pass their own mapping.
    """
    env = os.environ if environ is None else environ
    settings = RenderSettings()
    if config_path is not None:
        data = load_yaml_file(config_path)
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {config_path} must hold a mapping")
        settings = _from_mapping(settings, data)
    settings = _from_mapping(
        settings,
        {
            "encoding": env.get(ENV_ENCODING),
            "log_level": env.get(ENV_LOG_LEVEL),
        },
    )
    _logger.debug(
        "LEDGER_CONFIG_TRACE",
        extra={
            "trace_type": "LEDGER_CONFIG_TRACE",
            "config_path": str(config_path) if config_path else None,
            "encoding": settings.encoding,
            "log_level": settings.log_level,
            "log_json": settings.log_json,
        },
    )
    return settings
