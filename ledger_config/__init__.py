"""
ledger_config -- inputs for the renderer.

Builds the ledger model from YAML/JSON documents (``load_ledger``) and
resolves the command-line renderer's settings (``get_settings``). The
kernel never imports from this package.
"""

from ledger_config.loader import (
    load_ledger,
    load_yaml_file,
    parse_directive,
    parse_ledger,
)
from ledger_config.settings import RenderSettings, get_settings

__all__ = [
    "RenderSettings",
    "get_settings",
    "load_ledger",
    "load_yaml_file",
    "parse_directive",
    "parse_ledger",
]
