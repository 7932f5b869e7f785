"""Unit tests for currency parsing."""

import math

import pytest

from grant_search.normalizer import parse_money


@pytest.mark.parametrize(
    "value, expected",
    [
        ("$1,200,000", 1200000),
        ("50K", 50000),
        ("2.5M", 2500000),
        ("$2.5 million", 2500000),
        ("1.2B", 1200000000),
        ("Up to $500,000 per award", 500000),
        ("750000", 750000),
        ("USD500000", 500000),
        ("1.5 mil", 1500000),
        ("EUR 2 mn", 2000000),
        (125000, 125000),
        (99.5, 99.5),
    ],
)
def test_parse_money_values(value, expected):
    assert parse_money(value) == pytest.approx(expected)


@pytest.mark.parametrize("value", ["N/A", "", "   ", "TBD", None, True, False, {"amount": 5}, [1, 2]])
def test_parse_money_without_a_number_is_none(value):
    assert parse_money(value) is None


def test_parse_money_rejects_nan_and_infinity():
    assert parse_money(math.nan) is None
    assert parse_money(math.inf) is None


def test_parse_money_zero_is_not_none():
    """An explicit zero is a real amount, distinct from 'unknown'."""
    assert parse_money("$0") == 0
    assert parse_money(0) == 0
