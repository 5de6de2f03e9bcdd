import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from app.core.exceptions import ParseError

DEFAULT_CURRENCY = "USD"

CURRENCY_SYMBOLS = {
    "$": "USD",
    "£": "GBP",
    "€": "EUR",
    "¥": "JPY",
}

SYMBOL_PATTERN = re.compile(r"[^0-9.,\s]")
NUMBER_PATTERN = re.compile(r"[0-9](?:[0-9,.]*[0-9])?")

CENTS = Decimal("0.01")

# Numeric(18, 2) column
MAX_INTEGER_DIGITS = 16


def currency_from_symbol(symbol: str | None) -> str | None:
    if not symbol:
        return None
    return CURRENCY_SYMBOLS.get(symbol)


def parse_price_text(text: str | None) -> tuple[Decimal, str | None]:
    """
    Pull the amount and currency symbol out of a rendered price label.

    "$1,234.56 list price" -> (Decimal("1234.56"), "$")
    """
    if not text or not text.strip():
        raise ParseError("Unable to parse numeric price: empty price text")

    symbol_match = SYMBOL_PATTERN.search(text)
    symbol = symbol_match.group(0) if symbol_match else None

    number_match = NUMBER_PATTERN.search(text)
    if not number_match:
        raise ParseError(f"Unable to parse numeric price from {text!r}")

    literal = number_match.group(0).replace(",", "")
    try:
        price = Decimal(literal).quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ParseError(f"Unable to parse numeric price from {text!r}") from exc

    if price.adjusted() >= MAX_INTEGER_DIGITS:
        raise ParseError(f"Price out of range in {text!r}")

    return price, symbol


def normalize_price(text: str | None) -> tuple[Decimal, str]:
    price, symbol = parse_price_text(text)
    return price, currency_from_symbol(symbol) or DEFAULT_CURRENCY
