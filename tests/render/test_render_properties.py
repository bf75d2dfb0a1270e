"""
Property-based tests for the structural emitters using Hypothesis.

Properties:
- IncompleteAmount renders one of four shapes depending on which sides exist.
- CostSpec braces are doubled exactly when a total number is present.
- Open renders at most one quoted booking suffix, none for Booking.NONE.
- Account text splits back into its type name and segments.
"""

from datetime import date
from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from ledger_kernel.domain import (
    Account,
    AccountType,
    Booking,
    CostSpec,
    IncompleteAmount,
    Open,
)
from ledger_render import render_to_string

decimals = st.decimals(allow_nan=False, allow_infinity=False, places=4)
currencies = st.from_regex(r"[A-Z][A-Z0-9]{1,5}", fullmatch=True)
segments = st.from_regex(r"[A-Z][A-Za-z0-9-]{0,10}", fullmatch=True)
labels = st.text(
    alphabet=st.characters(categories=("L", "N")), min_size=1, max_size=8
)


@settings(max_examples=100)
@given(number=st.one_of(st.none(), decimals), currency=st.one_of(st.none(), currencies))
def test_incomplete_amount_shapes(number, currency):
    text = render_to_string(IncompleteAmount(number, currency))
    if number is not None and currency is not None:
        assert text == f"{number} {currency}"
    elif currency is not None:
        assert text == currency
    elif number is not None:
        assert text == str(number)
    else:
        assert text == ""


@settings(max_examples=100)
@given(
    number_per=st.one_of(st.none(), decimals),
    number_total=st.one_of(st.none(), decimals),
    currency=st.one_of(st.none(), currencies),
    cost_date=st.one_of(st.none(), st.dates(min_value=date(1900, 1, 1))),
    label=st.one_of(st.none(), labels),
)
def test_cost_braces_follow_total(number_per, number_total, currency, cost_date, label):
    cost = CostSpec(number_per, number_total, currency, cost_date, label)
    text = render_to_string(cost)
    if number_total is not None:
        assert text.startswith("{{") and text.endswith("}}")
        assert text[2:-2].startswith(str(number_total))
    else:
        assert text.startswith("{") and not text.startswith("{{")
        assert text.endswith("}") and not text.endswith("}}")
    inner = text.strip("{}")
    assert not inner.startswith(",")
    assert not inner.endswith(",")


@given(booking=st.sampled_from(list(Booking)))
def test_open_booking_suffix(booking):
    account = Account(AccountType.ASSETS, ("Cash",))
    text = render_to_string(Open(date(2023, 1, 1), account, ("USD",), booking))
    line = text.rstrip("\n")
    if booking is Booking.NONE:
        assert line == "2023-01-01 open Assets:Cash USD"
    else:
        assert line.endswith(f' "{booking.value}"')
        assert line.count('"') == 2
        assert booking.value in {"strict", "average", "fifo", "lifo"}


@given(
    account_type=st.sampled_from(list(AccountType)),
    parts=st.lists(segments, max_size=5).map(tuple),
)
def test_account_text_splits_back(account_type, parts):
    text = render_to_string(Account(account_type, parts))
    head, *tail = text.split(":")
    assert head == account_type.value
    assert tuple(tail) == parts
    assert not text.endswith(":")


@given(number=decimals, currency=currencies)
def test_amount_number_text_round_trips(number, currency):
    text = render_to_string(IncompleteAmount(number, currency))
    number_text, currency_text = text.split(" ")
    assert Decimal(number_text) == number
    assert currency_text == currency
