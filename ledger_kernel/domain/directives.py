"""
Directives -- One frozen dataclass per ledger directive kind.

Responsibility:
    Defines the closed set of top-level statements a ledger document holds
    (Open, Close, Balance, BcOption, Commodity, Custom, Document, Event,
    Include, Note, Pad, Plugin, Price, Query, Transaction), the Posting
    lines inside a Transaction, the ``Unsupported`` sentinel and the Ledger
    container.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.
    Built by ``ledger_config.loader`` (or any other upstream model
    producer) and consumed read-only by ``ledger_render``.

Invariants enforced:
    - All directives are frozen dataclasses; the renderer never mutates them.
    - Ledger order is document order and is preserved on output.
    - Metadata is an insertion-ordered ``Mapping[str, str]``.

Non-goals:
    - Does NOT check that postings balance or that accounts are open.
    - Does NOT resolve ``include`` files or run ``plugin`` modules.
"""

from __future__ import annotations

import datetime
from collections.abc import Mapping
from dataclasses import dataclass, field

from ledger_kernel.domain.values import (
    Account,
    Amount,
    Booking,
    CostSpec,
    Flag,
    IncompleteAmount,
)

Metadata = Mapping[str, str]
"""Key/value annotations attached to a directive or posting."""


def _no_meta() -> dict[str, str]:
    return {}


# =========================================================================
# Simple directives
# =========================================================================


@dataclass(frozen=True, slots=True)
class Open:
    """Opens an account, optionally constraining currencies and booking."""

    date: datetime.date
    account: Account
    currencies: tuple[str, ...] = ()
    booking: Booking = Booking.NONE
    meta: Metadata = field(default_factory=_no_meta)


@dataclass(frozen=True, slots=True)
class Close:
    date: datetime.date
    account: Account
    meta: Metadata = field(default_factory=_no_meta)


@dataclass(frozen=True, slots=True)
class Balance:
    """Asserts the balance of an account at the start of a date."""

    date: datetime.date
    account: Account
    amount: Amount
    meta: Metadata = field(default_factory=_no_meta)


@dataclass(frozen=True, slots=True)
class BcOption:
    """A global ``option "name" "value"`` line. Carries no date or metadata."""

    name: str
    value: str


@dataclass(frozen=True, slots=True)
class Commodity:
    date: datetime.date
    name: str
    meta: Metadata = field(default_factory=_no_meta)


@dataclass(frozen=True, slots=True)
class Custom:
    """A user-defined directive: a quoted type name plus free arguments."""

    date: datetime.date
    name: str
    args: tuple[str, ...] = ()
    meta: Metadata = field(default_factory=_no_meta)


@dataclass(frozen=True, slots=True)
class Document:
    date: datetime.date
    account: Account
    path: str
    meta: Metadata = field(default_factory=_no_meta)


@dataclass(frozen=True, slots=True)
class Event:
    date: datetime.date
    name: str
    description: str
    meta: Metadata = field(default_factory=_no_meta)


@dataclass(frozen=True, slots=True)
class Include:
    """Names another ledger file. The file is never opened here."""

    filename: str
    meta: Metadata = field(default_factory=_no_meta)


@dataclass(frozen=True, slots=True)
class Note:
    date: datetime.date
    account: Account
    comment: str
    meta: Metadata = field(default_factory=_no_meta)


@dataclass(frozen=True, slots=True)
class Pad:
    """Pads ``account`` from ``source_account`` up to the next balance."""

    date: datetime.date
    account: Account
    source_account: Account
    meta: Metadata = field(default_factory=_no_meta)


@dataclass(frozen=True, slots=True)
class Plugin:
    """Names a plugin module and its optional config string. Never executed."""

    module: str
    config: str | None = None
    meta: Metadata = field(default_factory=_no_meta)


@dataclass(frozen=True, slots=True)
class Price:
    """The price of one unit of ``currency`` on a date."""

    date: datetime.date
    currency: str
    amount: Amount
    meta: Metadata = field(default_factory=_no_meta)


@dataclass(frozen=True, slots=True)
class Query:
    date: datetime.date
    name: str
    query_string: str
    meta: Metadata = field(default_factory=_no_meta)


# =========================================================================
# Transactions
# =========================================================================


@dataclass(frozen=True, slots=True)
class Posting:
    """
    One account/amount leg of a transaction.

    ``units`` may be incomplete; ``price`` is the ``@`` per-unit price and
    ``cost`` the ``{...}`` lot cost. Both are optional.
    """

    account: Account
    units: IncompleteAmount = field(default_factory=IncompleteAmount)
    flag: Flag | None = None
    price: Amount | None = None
    cost: CostSpec | None = None
    meta: Metadata = field(default_factory=_no_meta)


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    A dated, flagged transaction and its postings.

    Tags and links are kept in stored order; duplicates are the
    producer's concern.
    """

    date: datetime.date
    flag: Flag
    narration: str
    payee: str | None = None
    tags: tuple[str, ...] = ()
    links: tuple[str, ...] = ()
    postings: tuple[Posting, ...] = ()
    meta: Metadata = field(default_factory=_no_meta)


# =========================================================================
# Sentinel and container
# =========================================================================


@dataclass(frozen=True, slots=True)
class Unsupported:
    """
    A node the model could not classify.

    Rendering it fails with ``UnsupportedDirectiveError`` instead of
    silently dropping it. ``kind`` names what the producer saw, if known.
    """

    kind: str | None = None


Directive = (
    Open
    | Close
    | Balance
    | BcOption
    | Commodity
    | Custom
    | Document
    | Event
    | Include
    | Note
    | Pad
    | Plugin
    | Price
    | Query
    | Transaction
    | Unsupported
)

SUPPORTED_DIRECTIVES: tuple[type, ...] = (
    Open,
    Close,
    Balance,
    BcOption,
    Commodity,
    Custom,
    Document,
    Event,
    Include,
    Note,
    Pad,
    Plugin,
    Price,
    Query,
    Transaction,
)


@dataclass(frozen=True, slots=True)
class Ledger:
    """An ordered sequence of directives."""

    directives: tuple[Directive, ...] = ()

    def __len__(self) -> int:
        return len(self.directives)

    def __iter__(self):
        return iter(self.directives)


def directive_kind(directive: object) -> str:
    """Lowercase kind name used in logs (``open``, ``transaction``, ...)."""
    if isinstance(directive, Unsupported):
        return directive.kind or "unsupported"
    if isinstance(directive, BcOption):
        return "option"
    return type(directive).__name__.lower()


__all__ = [
    "Balance",
    "BcOption",
    "Close",
    "Commodity",
    "Custom",
    "Directive",
    "Document",
    "Event",
    "Include",
    "Ledger",
    "Metadata",
    "Note",
    "Open",
    "Pad",
    "Plugin",
    "Posting",
    "Price",
    "Query",
    "SUPPORTED_DIRECTIVES",
    "Transaction",
    "Unsupported",
    "directive_kind",
]
