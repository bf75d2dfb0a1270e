"""
Render a ledger document (YAML/JSON) to ledger text.

Usage:
    ledger-render ledger.yaml
    ledger-render ledger.yaml -o ledger.beancount
    ledger-render txn.yaml --single
    ledger-render ledger.yaml --config render.yaml --log-level INFO

Exit codes:
    0  rendered successfully
    1  document or render error (message on stderr)
    2  usage or settings error

The document is loaded in full before any output is opened. Rendering then
streams into the output, so text written before a render error is kept.
"""

import argparse
import io
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

import yaml

from ledger_config.loader import load_ledger, load_yaml_file, parse_directive
from ledger_config.settings import RenderSettings, get_settings
from ledger_kernel.domain import Directive, Ledger
from ledger_kernel.exceptions import LedgerKernelError
from ledger_kernel.logging_config import LogContext, configure_logging
from ledger_render.renderer import BasicRenderer

logger = logging.getLogger("ledger_kernel.cli")

_RENDERER = BasicRenderer()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledger-render",
        description="Render a structured ledger document to ledger text.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  ledger-render ledger.yaml\n"
            "  ledger-render ledger.yaml -o ledger.beancount\n"
            "  ledger-render txn.yaml --single\n"
        ),
    )
    parser.add_argument(
        "input", type=Path,
        help="YAML or JSON ledger document",
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Write to this file instead of stdout",
    )
    parser.add_argument(
        "--single", action="store_true",
        help="Input holds one directive record rather than a 'directives' list",
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help="YAML settings file (encoding, log_level, log_json)",
    )
    parser.add_argument(
        "--log-level", type=str, default=None,
        help="Override the log level (DEBUG, INFO, WARNING, ...)",
    )
    return parser


def _load(args: argparse.Namespace) -> Ledger | Directive:
    if args.single:
        return parse_directive(load_yaml_file(args.input), "document")
    return load_ledger(args.input)


@contextmanager
def _open_output(path: Path | None, encoding: str) -> Iterator[TextIO]:
    """Text sink over the output file, or over stdout's byte buffer."""
    if path is not None:
        with open(path, "w", encoding=encoding, newline="") as f:
            yield f
        return
    stream = io.TextIOWrapper(sys.stdout.buffer, encoding=encoding, newline="")
    try:
        yield stream
    finally:
        stream.flush()
        stream.detach()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return int(exc.code) if isinstance(exc.code, int) else 2

    try:
        settings = get_settings(args.config)
        if args.log_level:
            settings = RenderSettings(
                encoding=settings.encoding,
                log_level=args.log_level,
                log_json=settings.log_json,
            )
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"  ERROR: Invalid settings: {exc}", file=sys.stderr)
        return 2

    configure_logging(level=settings.log_level_number, json_format=settings.log_json)

    with LogContext.bind(source=str(args.input)):
        try:
            node = _load(args)
        except FileNotFoundError:
            print(f"  ERROR: File not found: {args.input}", file=sys.stderr)
            return 1
        except (yaml.YAMLError, UnicodeDecodeError) as exc:
            print(f"  ERROR: Failed to parse document: {exc}", file=sys.stderr)
            return 1
        except LedgerKernelError as exc:
            logger.error("load_failed", exc_info=True)
            print(f"  ERROR: [{exc.code}] {exc}", file=sys.stderr)
            return 1

        try:
            with _open_output(args.output, settings.encoding) as sink:
                _RENDERER.render(node, sink)
        except OSError as exc:
            print(f"  ERROR: Cannot write {args.output or 'stdout'}: {exc}", file=sys.stderr)
            return 1
        except LedgerKernelError as exc:
            logger.error("render_failed", exc_info=True)
            print(f"  ERROR: [{exc.code}] {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
