"""
Ledger domain model -- pure value objects and directives, zero I/O.
"""

from ledger_kernel.domain.directives import (
    SUPPORTED_DIRECTIVES,
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
    Metadata,
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
    AccountType,
    Amount,
    Booking,
    CostSpec,
    Flag,
    FlagKind,
    IncompleteAmount,
)

__all__ = [
    # Values
    "Account",
    "AccountType",
    "Amount",
    "Booking",
    "CostSpec",
    "Flag",
    "FlagKind",
    "IncompleteAmount",
    # Directives
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
