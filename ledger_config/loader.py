"""
Document Loader (``ledger_config.loader``).

Responsibility
--------------
Loads a YAML (or JSON) ledger document and builds the immutable
``ledger_kernel.domain`` model from it. This is the upstream model producer
the command-line renderer uses; it reads structured records, never ledger
text.

Architecture position
---------------------
**Config layer** -- input tooling. Consumed by ``ledger_render.cli`` and by
tests. Depends on the kernel only.

Document shape
--------------
::

    directives:
      - type: open
        date: 2023-01-01
        account: Assets:Bank:Checking
        currencies: [USD]
        booking: strict
        meta: {bank: "First Bank"}
      - type: transaction
        date: 2023-01-05
        flag: "*"
        narration: Coffee
        postings:
          - account: Expenses:Food
            units: "5.00 USD"

Amounts are either ``"<number> <currency>"`` strings or
``{number: ..., currency: ...}`` mappings. Quote numbers to keep their
exact scale (YAML reads ``100.00`` as the float ``100.0``).

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``ledger_kernel.domain``.
* Directive and metadata order follow the document.
* A record whose ``type`` is not a known directive becomes ``Unsupported``
  so the renderer reports it instead of it being dropped here.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required key, bad account type, bad number or date, or a
  field of the wrong shape (a scalar where a list or mapping belongs)
  -> ``InvalidDocumentError`` naming the record path.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

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
)
from ledger_kernel.domain.values import (
    Account,
    Amount,
    Booking,
    CostSpec,
    Flag,
    IncompleteAmount,
)
from ledger_kernel.exceptions import InvalidDocumentError
from ledger_kernel.logging_config import get_logger

logger = get_logger("config.loader")


def load_yaml_file(path: Path) -> Any:
    """
    Load a single YAML file and return its parsed contents (``{}`` if empty).

    The top-level shape is checked by the caller.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


# =========================================================================
# Scalar parsers
# =========================================================================


def _require(data: dict[str, Any], key: str, path: str) -> Any:
    if key not in data or data[key] is None:
        raise InvalidDocumentError(path, f"missing required key '{key}'")
    return data[key]


def parse_date(value: Any, path: str = "date") -> date:
    """Parse a date from YAML (string or date object)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError as exc:
            raise InvalidDocumentError(path, f"bad date {value!r}") from exc
    raise InvalidDocumentError(path, f"cannot parse date from {value!r}")


def parse_decimal(value: Any, path: str = "number") -> Decimal:
    """Parse a number without going through float formatting."""
    if isinstance(value, bool):
        raise InvalidDocumentError(path, f"bad number {value!r}")
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise InvalidDocumentError(path, f"bad number {value!r}") from exc


def parse_account(value: Any, path: str = "account") -> Account:
    if not isinstance(value, str):
        raise InvalidDocumentError(path, f"account must be a string, got {value!r}")
    try:
        return Account.parse(value)
    except ValueError as exc:
        raise InvalidDocumentError(path, f"bad account {value!r}") from exc


def parse_meta(value: Any, path: str = "meta") -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidDocumentError(path, "meta must be a mapping")
    return {str(k): str(v) for k, v in value.items()}


def _split_amount(value: Any, path: str) -> tuple[Decimal | None, str | None]:
    if isinstance(value, dict):
        number = value.get("number")
        currency = value.get("currency")
        return (
            parse_decimal(number, f"{path}.number") if number is not None else None,
            str(currency) if currency is not None else None,
        )
    text = str(value).strip()
    if not text:
        return None, None
    head, _, tail = text.partition(" ")
    tail = tail.strip()
    if tail:
        return parse_decimal(head, path), tail
    try:
        return Decimal(head), None
    except InvalidOperation:
        return None, head


def parse_amount(value: Any, path: str = "amount") -> Amount:
    """Parse a complete amount; both number and currency are required."""
    number, currency = _split_amount(value, path)
    if number is None or currency is None:
        raise InvalidDocumentError(path, f"amount needs number and currency, got {value!r}")
    return Amount(number=number, currency=currency)


def parse_incomplete_amount(value: Any, path: str = "units") -> IncompleteAmount:
    if value is None:
        return IncompleteAmount()
    number, currency = _split_amount(value, path)
    return IncompleteAmount(number=number, currency=currency)


def parse_cost(data: Any, path: str = "cost") -> CostSpec:
    if not isinstance(data, dict):
        raise InvalidDocumentError(path, "cost must be a mapping")
    return CostSpec(
        number_per=(
            parse_decimal(data["number_per"], f"{path}.number_per")
            if data.get("number_per") is not None else None
        ),
        number_total=(
            parse_decimal(data["number_total"], f"{path}.number_total")
            if data.get("number_total") is not None else None
        ),
        currency=str(data["currency"]) if data.get("currency") is not None else None,
        date=parse_date(data["date"], f"{path}.date") if data.get("date") is not None else None,
        label=str(data["label"]) if data.get("label") is not None else None,
    )


def parse_booking(value: Any, path: str = "booking") -> Booking:
    if value is None:
        return Booking.NONE
    try:
        return Booking(str(value).lower())
    except ValueError as exc:
        raise InvalidDocumentError(path, f"bad booking method {value!r}") from exc


def _strings(value: Any, path: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list):
        raise InvalidDocumentError(path, f"expected a string or a list, got {value!r}")
    return tuple(str(v) for v in value)


# =========================================================================
# Directive parsers
# =========================================================================


def parse_open(data: dict[str, Any], path: str) -> Open:
    return Open(
        date=parse_date(_require(data, "date", path), f"{path}.date"),
        account=parse_account(_require(data, "account", path), f"{path}.account"),
        currencies=_strings(data.get("currencies"), f"{path}.currencies"),
        booking=parse_booking(data.get("booking"), f"{path}.booking"),
        meta=parse_meta(data.get("meta"), f"{path}.meta"),
    )


def parse_close(data: dict[str, Any], path: str) -> Close:
    return Close(
        date=parse_date(_require(data, "date", path), f"{path}.date"),
        account=parse_account(_require(data, "account", path), f"{path}.account"),
        meta=parse_meta(data.get("meta"), f"{path}.meta"),
    )


def parse_balance(data: dict[str, Any], path: str) -> Balance:
    return Balance(
        date=parse_date(_require(data, "date", path), f"{path}.date"),
        account=parse_account(_require(data, "account", path), f"{path}.account"),
        amount=parse_amount(_require(data, "amount", path), f"{path}.amount"),
        meta=parse_meta(data.get("meta"), f"{path}.meta"),
    )


def parse_option(data: dict[str, Any], path: str) -> BcOption:
    return BcOption(
        name=str(_require(data, "name", path)),
        value=str(_require(data, "value", path)),
    )


def parse_commodity(data: dict[str, Any], path: str) -> Commodity:
    return Commodity(
        date=parse_date(_require(data, "date", path), f"{path}.date"),
        name=str(_require(data, "name", path)),
        meta=parse_meta(data.get("meta"), f"{path}.meta"),
    )


def parse_custom(data: dict[str, Any], path: str) -> Custom:
    return Custom(
        date=parse_date(_require(data, "date", path), f"{path}.date"),
        name=str(_require(data, "name", path)),
        args=_strings(data.get("args"), f"{path}.args"),
        meta=parse_meta(data.get("meta"), f"{path}.meta"),
    )


def parse_document(data: dict[str, Any], path: str) -> Document:
    return Document(
        date=parse_date(_require(data, "date", path), f"{path}.date"),
        account=parse_account(_require(data, "account", path), f"{path}.account"),
        path=str(_require(data, "path", path)),
        meta=parse_meta(data.get("meta"), f"{path}.meta"),
    )


def parse_event(data: dict[str, Any], path: str) -> Event:
    return Event(
        date=parse_date(_require(data, "date", path), f"{path}.date"),
        name=str(_require(data, "name", path)),
        description=str(_require(data, "description", path)),
        meta=parse_meta(data.get("meta"), f"{path}.meta"),
    )


def parse_include(data: dict[str, Any], path: str) -> Include:
    return Include(
        filename=str(_require(data, "filename", path)),
        meta=parse_meta(data.get("meta"), f"{path}.meta"),
    )


def parse_note(data: dict[str, Any], path: str) -> Note:
    return Note(
        date=parse_date(_require(data, "date", path), f"{path}.date"),
        account=parse_account(_require(data, "account", path), f"{path}.account"),
        comment=str(_require(data, "comment", path)),
        meta=parse_meta(data.get("meta"), f"{path}.meta"),
    )


def parse_pad(data: dict[str, Any], path: str) -> Pad:
    return Pad(
        date=parse_date(_require(data, "date", path), f"{path}.date"),
        account=parse_account(_require(data, "account", path), f"{path}.account"),
        source_account=parse_account(
            _require(data, "source_account", path), f"{path}.source_account"
        ),
        meta=parse_meta(data.get("meta"), f"{path}.meta"),
    )


def parse_plugin(data: dict[str, Any], path: str) -> Plugin:
    config = data.get("config")
    return Plugin(
        module=str(_require(data, "module", path)),
        config=str(config) if config is not None else None,
        meta=parse_meta(data.get("meta"), f"{path}.meta"),
    )


def parse_price(data: dict[str, Any], path: str) -> Price:
    return Price(
        date=parse_date(_require(data, "date", path), f"{path}.date"),
        currency=str(_require(data, "currency", path)),
        amount=parse_amount(_require(data, "amount", path), f"{path}.amount"),
        meta=parse_meta(data.get("meta"), f"{path}.meta"),
    )


def parse_query(data: dict[str, Any], path: str) -> Query:
    return Query(
        date=parse_date(_require(data, "date", path), f"{path}.date"),
        name=str(_require(data, "name", path)),
        query_string=str(_require(data, "query_string", path)),
        meta=parse_meta(data.get("meta"), f"{path}.meta"),
    )


def parse_flag(value: Any, path: str = "flag") -> Flag:
    text = str(value)
    if not text:
        raise InvalidDocumentError(path, "flag must not be empty")
    return Flag.from_symbol(text)


def parse_posting(data: dict[str, Any], path: str) -> Posting:
    if not isinstance(data, dict):
        raise InvalidDocumentError(path, "posting must be a mapping")
    flag = data.get("flag")
    price = data.get("price")
    cost = data.get("cost")
    return Posting(
        account=parse_account(_require(data, "account", path), f"{path}.account"),
        units=parse_incomplete_amount(data.get("units"), f"{path}.units"),
        flag=parse_flag(flag, f"{path}.flag") if flag is not None else None,
        price=parse_amount(price, f"{path}.price") if price is not None else None,
        cost=parse_cost(cost, f"{path}.cost") if cost is not None else None,
        meta=parse_meta(data.get("meta"), f"{path}.meta"),
    )


def parse_transaction(data: dict[str, Any], path: str) -> Transaction:
    payee = data.get("payee")
    postings = data.get("postings") or []
    if not isinstance(postings, list):
        raise InvalidDocumentError(f"{path}.postings", "postings must be a list")
    return Transaction(
        date=parse_date(_require(data, "date", path), f"{path}.date"),
        flag=parse_flag(data.get("flag", "*"), f"{path}.flag"),
        payee=str(payee) if payee is not None else None,
        narration=str(data.get("narration", "")),
        tags=tuple(dict.fromkeys(_strings(data.get("tags"), f"{path}.tags"))),
        links=tuple(dict.fromkeys(_strings(data.get("links"), f"{path}.links"))),
        postings=tuple(
            parse_posting(p, f"{path}.postings[{i}]")
            for i, p in enumerate(postings)
        ),
        meta=parse_meta(data.get("meta"), f"{path}.meta"),
    )


_DIRECTIVE_PARSERS: dict[str, Callable[[dict[str, Any], str], Directive]] = {
    "open": parse_open,
    "close": parse_close,
    "balance": parse_balance,
    "option": parse_option,
    "commodity": parse_commodity,
    "custom": parse_custom,
    "document": parse_document,
    "event": parse_event,
    "include": parse_include,
    "note": parse_note,
    "pad": parse_pad,
    "plugin": parse_plugin,
    "price": parse_price,
    "query": parse_query,
    "transaction": parse_transaction,
    "txn": parse_transaction,
}


def parse_directive(data: dict[str, Any], path: str = "directive") -> Directive:
    """
    Parse one directive record, dispatching on its ``type`` key.

    An unknown ``type`` yields ``Unsupported(kind=type)``.
    """
    if not isinstance(data, dict):
        raise InvalidDocumentError(path, "directive must be a mapping")
    kind = str(_require(data, "type", path)).lower()
    parser = _DIRECTIVE_PARSERS.get(kind)
    if parser is None:
        logger.warning(
            "unknown_directive_type",
            extra={"kind": kind, "path": path},
        )
        return Unsupported(kind=kind)
    return parser(data, path)


def parse_ledger(data: dict[str, Any]) -> Ledger:
    """Parse a whole document: a mapping with a ``directives`` list."""
    if not isinstance(data, dict):
        raise InvalidDocumentError("document", "document must be a mapping")
    records = data.get("directives") or []
    if not isinstance(records, list):
        raise InvalidDocumentError("directives", "directives must be a list")
    return Ledger(
        directives=tuple(
            parse_directive(record, f"directives[{i}]")
            for i, record in enumerate(records)
        )
    )


def load_ledger(path: Path) -> Ledger:
    """Load and parse a ledger document file."""
    ledger = parse_ledger(load_yaml_file(path))
    logger.info(
        "ledger_document_loaded",
        extra={"path": str(path), "directive_count": len(ledger.directives)},
    )
    return ledger
