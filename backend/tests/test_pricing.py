from decimal import Decimal

import pytest

from app.core.exceptions import ParseError
from app.core.pricing import currency_from_symbol, normalize_price, parse_price_text


def test_parse_grouped_dollar_price():
    price, symbol = parse_price_text("$1,234.56 list price")

    assert price == Decimal("1234.56")
    assert symbol == "$"
    assert currency_from_symbol(symbol) == "USD"


@pytest.mark.parametrize(
    "text, expected_price, expected_currency",
    [
        ("£19.99", Decimal("19.99"), "GBP"),
        ("€12.00", Decimal("12.00"), "EUR"),
        ("¥1,200", Decimal("1200.00"), "JPY"),
        ("$5", Decimal("5.00"), "USD"),
        ("  $ 49.50  ", Decimal("49.50"), "USD"),
    ],
)
def test_normalize_price_maps_symbols(text, expected_price, expected_currency):
    assert normalize_price(text) == (expected_price, expected_currency)


def test_unmapped_symbol_defaults_to_usd():
    price, symbol = parse_price_text("CHF 12.00")

    assert symbol == "C"
    assert currency_from_symbol(symbol) is None
    assert normalize_price("CHF 12.00") == (Decimal("12.00"), "USD")


def test_price_is_quantized_to_cents():
    price, _ = parse_price_text("$12.345")
    assert price == Decimal("12.35")
    assert price.as_tuple().exponent == -2


@pytest.mark.parametrize("text", ["Currently unavailable", "", "   ", None])
def test_text_without_digits_raises(text):
    with pytest.raises(ParseError):
        parse_price_text(text)


def test_unparseable_literal_raises():
    with pytest.raises(ParseError):
        parse_price_text("$1.234.56")


@pytest.mark.parametrize("digits", [17, 20, 30])
def test_oversized_price_raises(digits):
    with pytest.raises(ParseError):
        parse_price_text("$" + "9" * digits)


def test_largest_storable_price_parses():
    price, _ = parse_price_text("$" + "9" * 16 + ".99")
    assert price == Decimal("9999999999999999.99")
