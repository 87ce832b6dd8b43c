"""
Tick payload parsers.

Converts raw feed payloads into Tick records and extracts the trailing
price digit. Both flat payloads ({"symbol", "quote"}) and Deriv-style
payloads ({"tick": {"symbol", "quote"}}) are accepted.
"""

import re
from decimal import Decimal
from typing import Any

from ..errors import MalformedDataError, MissingDataError
from .models import Tick

PRICE_PATTERN = re.compile(r"^[+-]?\d+(\.\d+)?$")


def normalize_price(price: Any) -> str:
    """
    Render a quoted price as its decimal string.

    Raises:
        MalformedDataError: price is not a plain decimal number
    """
    if isinstance(price, bool) or not isinstance(price, (str, int, float, Decimal)):
        raise MalformedDataError(
            f"Unsupported price type {type(price).__name__}",
            raw_data=str(price)[:100],
            expected_format="decimal string"
        )

    text = price.strip() if isinstance(price, str) else str(price)

    if not PRICE_PATTERN.match(text):
        raise MalformedDataError(
            f"Malformed price: {text[:32]!r}",
            raw_data=text[:100],
            expected_format="decimal string"
        )

    return text


def extract_last_digit(price: Any) -> int:
    """Least-significant decimal digit of the price as quoted."""
    return int(normalize_price(price)[-1])


def parse_tick_payload(payload: Any) -> Tick:
    """
    Parse a feed payload into a Tick.

    Raises:
        MissingDataError: symbol or quote is absent
        MalformedDataError: payload is not a mapping or the quote is malformed
    """
    if isinstance(payload, Tick):
        return Tick(symbol=payload.symbol, price=normalize_price(payload.price))

    if not isinstance(payload, dict):
        raise MalformedDataError(
            f"Tick payload must be dict, got {type(payload).__name__}",
            raw_data=str(payload)[:100]
        )

    body = payload.get("tick", payload)
    if not isinstance(body, dict):
        raise MalformedDataError("Tick body must be dict", raw_data=str(body)[:100])

    symbol = body.get("symbol")
    if not symbol or not isinstance(symbol, str):
        raise MissingDataError("Tick payload missing symbol", data_type="symbol")

    quote = body.get("quote", body.get("price"))
    if quote is None:
        raise MissingDataError(
            "Tick payload missing quote",
            data_type="quote",
            context={"symbol": symbol}
        )

    return Tick(symbol=symbol, price=normalize_price(quote))
