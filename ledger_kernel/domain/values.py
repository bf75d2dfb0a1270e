"""
Values -- Immutable ledger value objects.

Responsibility:
    Provides the small value types that directives are built from:
    AccountType, Account, Amount, IncompleteAmount, CostSpec, Flag and
    Booking. These mirror the shapes a ledger parser produces; they are
    inputs to the renderer, never computed by it.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.
    Imported by ``ledger_kernel.domain.directives`` and by the renderer.

Invariants enforced:
    - All value objects are frozen (immutable and hashable).
    - Numbers are ``Decimal`` -- never ``float``.
    - An absent optional field is ``None``, never an empty placeholder.

Failure modes:
    - ValueError from ``Account.parse`` on an unknown account type.
    - ValueError from ``Flag.other`` on an empty flag string.

Non-goals:
    - Does NOT validate currency codes or account names beyond their shape.
    - Does NOT perform any arithmetic on amounts or costs.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class AccountType(str, Enum):
    """The five root account types, valued by their canonical name."""

    ASSETS = "Assets"
    LIABILITIES = "Liabilities"
    EQUITY = "Equity"
    INCOME = "Income"
    EXPENSES = "Expenses"


@dataclass(frozen=True, slots=True)
class Account:
    """
    A ledger account: a root type plus ordered path segments.

    Guarantees:
        - ``name`` joins the type name and the segments with ``:`` and never
          ends with a separator.
    """

    type: AccountType
    parts: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return ":".join((self.type.value, *self.parts))

    @classmethod
    def parse(cls, text: str) -> Account:
        """
        Build an Account from its colon-joined text form.

        Raises:
            ValueError: if the first segment is not an AccountType name.
        """
        head, *parts = text.split(":")
        return cls(type=AccountType(head), parts=tuple(parts))

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Amount:
    """A number paired with a currency; both always present."""

    number: Decimal
    currency: str

    def __str__(self) -> str:
        return f"{self.number} {self.currency}"


@dataclass(frozen=True, slots=True)
class IncompleteAmount:
    """
    A posting amount whose number and currency may each be omitted.

    Either side left out is inferred later by the ledger model.
    """

    number: Decimal | None = None
    currency: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.number is None and self.currency is None


@dataclass(frozen=True, slots=True)
class CostSpec:
    """
    The ``{...}`` cost annotation on a posting.

    ``is_total`` is the double-bracket marker: a total number means the
    cost was given for the whole lot (``{{...}}``) rather than per unit.
    """

    number_per: Decimal | None = None
    number_total: Decimal | None = None
    currency: str | None = None
    date: datetime.date | None = None
    label: str | None = None

    @property
    def is_total(self) -> bool:
        return self.number_total is not None

    @property
    def number(self) -> Decimal | None:
        """Display number: the total when given, else the per-unit number."""
        if self.number_total is not None:
            return self.number_total
        return self.number_per


class FlagKind(str, Enum):
    """Kinds of transaction and posting flags."""

    OKAY = "okay"
    WARNING = "warning"
    OTHER = "other"


_RESERVED_SYMBOLS = {
    FlagKind.OKAY: "*",
    FlagKind.WARNING: "!",
}


@dataclass(frozen=True, slots=True)
class Flag:
    """
    Transaction or posting flag.

    OKAY renders ``*``, WARNING renders ``!``; OTHER carries its own text
    so flags used elsewhere in the ecosystem (``P``, ``S``, ...) survive.
    """

    kind: FlagKind
    text: str | None = None

    @classmethod
    def okay(cls) -> Flag:
        return cls(FlagKind.OKAY)

    @classmethod
    def warning(cls) -> Flag:
        return cls(FlagKind.WARNING)

    @classmethod
    def other(cls, text: str) -> Flag:
        if not text:
            raise ValueError("Flag text must not be empty")
        return cls(FlagKind.OTHER, text)

    @classmethod
    def from_symbol(cls, symbol: str) -> Flag:
        """Map ``*`` and ``!`` to their reserved kinds, anything else to OTHER."""
        for kind, reserved in _RESERVED_SYMBOLS.items():
            if symbol == reserved:
                return cls(kind)
        return cls.other(symbol)

    @property
    def symbol(self) -> str:
        if self.kind is FlagKind.OTHER:
            return self.text or ""
        return _RESERVED_SYMBOLS[self.kind]

    def __str__(self) -> str:
        return self.symbol


class Booking(str, Enum):
    """Inventory booking method attached to an Open directive."""

    NONE = "none"
    STRICT = "strict"
    AVERAGE = "average"
    FIFO = "fifo"
    LIFO = "lifo"
