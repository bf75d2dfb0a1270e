"""
BasicRenderer -- Projects a ledger model onto canonical ledger text.

Responsibility:
    One formatting rule per node type (ledger, directive, posting, account,
    amount, incomplete amount, cost spec, flag), all reached through the
    single ``render(node, sink)`` contract. The renderer reproduces whatever
    the model holds; it never validates, computes or reorders.

Architecture position:
    Rendering layer. Reads ``ledger_kernel.domain`` objects, writes text to
    a caller-owned sink. Holds no state, so one instance may be shared by
    any number of callers as long as each sink has a single writer.

Invariants enforced:
    - Directives are written in stored order, each followed by a blank line.
    - An absent optional field writes nothing (no empty quotes). The tab
      before posting units is always written, even for empty units.
    - Metadata lines follow the mapping's iteration order.

Failure modes:
    - ``RenderIoError`` when the sink rejects a write. Bytes already
      written stay written.
    - ``UnsupportedDirectiveError`` for the ``Unsupported`` sentinel;
      nothing is written for that directive and rendering stops.
    - ``TypeError`` when handed an object that is not a ledger node.

Output grammar:
    <date> open <account>[ <currency>]*[ "<booking>"]
    <date> close <account>
    <date> balance <account>\\t<amount>
    <date> commodity <name>
    <date> custom "<name>"[ <arg>]*
    <date> document <account> "<path>"
    <date> event "<name>" "<description>"
    include <filename>
    <date> note <account> "<comment>"
    <date> pad <account> <source_account>
    plugin "<module>"[ "<config>"]
    <date> price <currency> <amount>
    <date> query "<name>" "<query_string>"
    option "<name>" "<value>"
    <date> <flag>[ "<payee>"] "<narration>"[ #<tag>]*[ ^<link>]*
    \\t[<flag> ]<account>\\t<units>[ @ <price>][ <cost>]
"""

from __future__ import annotations

import io
import time
from collections.abc import Mapping
from decimal import Decimal
from typing import Protocol
from uuid import uuid4

from ledger_kernel.domain.directives import (
    Balance,
    BcOption,
    Close,
    Commodity,
    Custom,
    Directive,
    Document,
    Event,
    Include,
    Ledger,
    Note,
    Open,
    Pad,
    Plugin,
    Posting,
    Price,
    Query,
    Transaction,
    Unsupported,
    directive_kind,
)
from ledger_kernel.domain.values import (
    Account,
    Amount,
    Booking,
    CostSpec,
    Flag,
    IncompleteAmount,
)
from ledger_kernel.exceptions import RenderIoError, UnsupportedDirectiveError
from ledger_kernel.logging_config import LogContext, get_logger

logger = get_logger("render.renderer")

DEFAULT_ENCODING = "utf-8"


class TextSink(Protocol):
    """Anything that accepts ordered text writes."""

    def write(self, text: str, /) -> object: ...


# =========================================================================
# Low-level helpers
# =========================================================================


def _write(sink: TextSink, text: str) -> None:
    """Write to the sink, translating stream failures into RenderIoError."""
    try:
        sink.write(text)
    except (OSError, ValueError) as exc:
        # ValueError: write to a closed stream.
        raise RenderIoError(exc) from exc


def render_key_value(mapping: Mapping[str, str], sink: TextSink) -> None:
    """
    Write one ``\\t<key>: <value>`` line per metadata entry.

    No escaping is applied; keys and values are written verbatim in the
    mapping's iteration order.
    """
    for key, value in mapping.items():
        _write(sink, f"\t{key}: {value}\n")


def incomplete_amount_text(number: Decimal | None, currency: str | None) -> str:
    """Text of a possibly-incomplete amount; empty when both sides are absent."""
    if number is not None and currency is not None:
        return f"{number} {currency}"
    if currency is not None:
        return currency
    if number is not None:
        return str(number)
    return ""


def cost_spec_text(cost: CostSpec) -> str:
    """
    Text of a cost spec, braces included.

    Content is the cost amount (total number over per-unit number), the
    acquisition date and the quoted label, in that order, joined by ", ".
    """
    fields: list[str] = []
    amount = incomplete_amount_text(cost.number, cost.currency)
    if amount:
        fields.append(amount)
    if cost.date is not None:
        fields.append(cost.date.isoformat())
    if cost.label is not None:
        fields.append(f'"{cost.label}"')
    content = ", ".join(fields)
    if cost.is_total:
        return f"{{{{{content}}}}}"
    return f"{{{content}}}"


def _sigil(value: str, sigil: str) -> str:
    return value if value.startswith(sigil) else f"{sigil}{value}"


# =========================================================================
# Renderer
# =========================================================================


class BasicRenderer:
    """
    Stateless renderer for ledger nodes.

    Usage:
        renderer = BasicRenderer()
        with open("out.beancount", "w") as f:
            renderer.render(ledger, f)
    """

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, BasicRenderer)

    def __hash__(self) -> int:
        return hash(BasicRenderer)

    def __repr__(self) -> str:
        return "BasicRenderer()"

    def render(self, node: object, sink: TextSink) -> None:
        """Render any ledger node into ``sink``."""
        match node:
            case Ledger():
                self._render_ledger(node, sink)
            case Posting():
                self._render_posting(node, sink)
            case Account():
                _write(sink, node.name)
            case Amount():
                _write(sink, f"{node.number} {node.currency}")
            case IncompleteAmount():
                _write(sink, incomplete_amount_text(node.number, node.currency))
            case CostSpec():
                _write(sink, cost_spec_text(node))
            case Flag():
                _write(sink, node.symbol)
            case _:
                self._render_directive(node, sink)

    # -----------------------------------------------------------------
    # Ledger and dispatch
    # -----------------------------------------------------------------

    def _render_ledger(self, ledger: Ledger, sink: TextSink) -> None:
        with LogContext.bind(render_id=uuid4().hex):
            logger.info(
                "ledger_render_started",
                extra={"directive_count": len(ledger.directives)},
            )
            t0 = time.monotonic()
            for directive in ledger.directives:
                with LogContext.bind(directive_kind=directive_kind(directive)):
                    self._render_directive(directive, sink)
                _write(sink, "\n")
            logger.info(
                "ledger_render_completed",
                extra={
                    "directive_count": len(ledger.directives),
                    "duration_ms": round((time.monotonic() - t0) * 1000, 3),
                },
            )

    def _render_directive(self, directive: Directive | object, sink: TextSink) -> None:
        match directive:
            case Open():
                self._render_open(directive, sink)
            case Close():
                self._render_close(directive, sink)
            case Balance():
                self._render_balance(directive, sink)
            case BcOption():
                self._render_option(directive, sink)
            case Commodity():
                self._render_commodity(directive, sink)
            case Custom():
                self._render_custom(directive, sink)
            case Document():
                self._render_document(directive, sink)
            case Event():
                self._render_event(directive, sink)
            case Include():
                self._render_include(directive, sink)
            case Note():
                self._render_note(directive, sink)
            case Pad():
                self._render_pad(directive, sink)
            case Plugin():
                self._render_plugin(directive, sink)
            case Price():
                self._render_price(directive, sink)
            case Query():
                self._render_query(directive, sink)
            case Transaction():
                self._render_transaction(directive, sink)
            case Unsupported():
                logger.warning(
                    "unsupported_directive",
                    extra={"kind": directive.kind},
                )
                raise UnsupportedDirectiveError(directive.kind)
            case _:
                raise TypeError(
                    f"Cannot render object of type {type(directive).__name__}"
                )

    # -----------------------------------------------------------------
    # Simple directives
    # -----------------------------------------------------------------

    def _render_open(self, open_: Open, sink: TextSink) -> None:
        _write(sink, f"{open_.date} open ")
        self.render(open_.account, sink)
        for currency in open_.currencies:
            _write(sink, f" {currency}")
        if open_.booking is not Booking.NONE:
            _write(sink, f' "{open_.booking.value}"')
        _write(sink, "\n")
        render_key_value(open_.meta, sink)

    def _render_close(self, close: Close, sink: TextSink) -> None:
        _write(sink, f"{close.date} close ")
        self.render(close.account, sink)
        _write(sink, "\n")
        render_key_value(close.meta, sink)

    def _render_balance(self, balance: Balance, sink: TextSink) -> None:
        _write(sink, f"{balance.date} balance ")
        self.render(balance.account, sink)
        _write(sink, "\t")
        self.render(balance.amount, sink)
        _write(sink, "\n")
        render_key_value(balance.meta, sink)

    def _render_option(self, option: BcOption, sink: TextSink) -> None:
        _write(sink, f'option "{option.name}" "{option.value}"\n')

    def _render_commodity(self, commodity: Commodity, sink: TextSink) -> None:
        _write(sink, f"{commodity.date} commodity {commodity.name}\n")
        render_key_value(commodity.meta, sink)

    def _render_custom(self, custom: Custom, sink: TextSink) -> None:
        line = f'{custom.date} custom "{custom.name}"'
        if custom.args:
            line += " " + " ".join(custom.args)
        _write(sink, line + "\n")
        render_key_value(custom.meta, sink)

    def _render_document(self, document: Document, sink: TextSink) -> None:
        _write(sink, f"{document.date} document ")
        self.render(document.account, sink)
        _write(sink, f' "{document.path}"\n')
        render_key_value(document.meta, sink)

    def _render_event(self, event: Event, sink: TextSink) -> None:
        _write(sink, f'{event.date} event "{event.name}" "{event.description}"\n')
        render_key_value(event.meta, sink)

    def _render_include(self, include: Include, sink: TextSink) -> None:
        _write(sink, f"include {include.filename}\n")
        render_key_value(include.meta, sink)

    def _render_note(self, note: Note, sink: TextSink) -> None:
        _write(sink, f"{note.date} note ")
        self.render(note.account, sink)
        _write(sink, f' "{note.comment}"\n')
        render_key_value(note.meta, sink)

    def _render_pad(self, pad: Pad, sink: TextSink) -> None:
        _write(sink, f"{pad.date} pad ")
        self.render(pad.account, sink)
        _write(sink, " ")
        self.render(pad.source_account, sink)
        _write(sink, "\n")
        render_key_value(pad.meta, sink)

    def _render_plugin(self, plugin: Plugin, sink: TextSink) -> None:
        line = f'plugin "{plugin.module}"'
        if plugin.config is not None:
            line += f' "{plugin.config}"'
        _write(sink, line + "\n")
        render_key_value(plugin.meta, sink)

    def _render_price(self, price: Price, sink: TextSink) -> None:
        _write(sink, f"{price.date} price {price.currency} ")
        self.render(price.amount, sink)
        _write(sink, "\n")
        render_key_value(price.meta, sink)

    def _render_query(self, query: Query, sink: TextSink) -> None:
        _write(sink, f'{query.date} query "{query.name}" "{query.query_string}"\n')
        render_key_value(query.meta, sink)

    # -----------------------------------------------------------------
    # Transactions
    # -----------------------------------------------------------------

    def _render_transaction(self, txn: Transaction, sink: TextSink) -> None:
        _write(sink, f"{txn.date} ")
        self.render(txn.flag, sink)
        if txn.payee is not None:
            _write(sink, f' "{txn.payee}"')
        _write(sink, f' "{txn.narration}"')
        for tag in txn.tags:
            _write(sink, " " + _sigil(tag, "#"))
        for link in txn.links:
            _write(sink, " " + _sigil(link, "^"))
        _write(sink, "\n")
        for posting in txn.postings:
            self._render_posting(posting, sink)
        render_key_value(txn.meta, sink)

    def _render_posting(self, posting: Posting, sink: TextSink) -> None:
        _write(sink, "\t")
        if posting.flag is not None:
            self.render(posting.flag, sink)
            _write(sink, " ")
        self.render(posting.account, sink)
        _write(sink, "\t")
        self.render(posting.units, sink)
        if posting.price is not None:
            _write(sink, " @ ")
            self.render(posting.price, sink)
        if posting.cost is not None:
            _write(sink, " ")
            self.render(posting.cost, sink)
        _write(sink, "\n")
        render_key_value(posting.meta, sink)


# =========================================================================
# Entry points
# =========================================================================

_RENDERER = BasicRenderer()


def _encode(text: str, encoding: str) -> bytes:
    try:
        return text.encode(encoding)
    except UnicodeEncodeError as exc:
        raise RenderIoError(exc) from exc


def render_to_string(node: object) -> str:
    """Render any ledger node to a string."""
    buffer = io.StringIO()
    _RENDERER.render(node, buffer)
    return buffer.getvalue()


def render_ledger(ledger: Ledger, *, encoding: str = DEFAULT_ENCODING) -> bytes:
    """Render a whole ledger to bytes, one blank line after each directive."""
    return _encode(render_to_string(ledger), encoding)


def render_document(directive: Directive, *, encoding: str = DEFAULT_ENCODING) -> bytes:
    """Render a single top-level directive to bytes, without the trailing blank line."""
    if isinstance(directive, Ledger):
        raise TypeError("render_document takes a single directive; use render_ledger")
    buffer = io.StringIO()
    _RENDERER.render(directive, buffer)
    return _encode(buffer.getvalue(), encoding)
