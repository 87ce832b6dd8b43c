"""Tests for tick payload parsing."""

from decimal import Decimal

import pytest

from signalgen_app.data.models import Tick
from signalgen_app.data.parsers import extract_last_digit, normalize_price, parse_tick_payload
from signalgen_app.errors import DataQualityError, MalformedDataError, MissingDataError


class TestNormalizePrice:
    """Test price normalization."""

    @pytest.mark.parametrize("price,expected", [
        ("1234.56", "1234.56"),
        (" 1234.56 ", "1234.56"),
        (1234, "1234"),
        (12.5, "12.5"),
        (Decimal("7.10"), "7.10"),
        ("-3.2", "-3.2"),
    ])
    def test_valid_prices(self, price, expected):
        """Test accepted price representations."""
        assert normalize_price(price) == expected

    @pytest.mark.parametrize("price", ["", "  ", "1.", ".5", "abc", "1,5", "NaN", False, None, {}])
    def test_invalid_prices(self, price):
        """Test rejected price representations."""
        with pytest.raises(MalformedDataError):
            normalize_price(price)

    def test_trailing_zero_kept_in_string(self):
        """Test the quoted string decides the digit, not the float value."""
        assert extract_last_digit("100.10") == 0
        assert extract_last_digit("100.1") == 1


class TestParseTickPayload:
    """Test tick payload parsing."""

    def test_flat_payload(self):
        tick = parse_tick_payload({"symbol": "R_75", "quote": "5123.45"})
        assert tick == Tick(symbol="R_75", price="5123.45")

    def test_deriv_style_payload(self):
        """Test the nested {"tick": {...}} shape."""
        tick = parse_tick_payload({"msg_type": "tick", "tick": {"symbol": "R_10", "quote": 6543.2}})
        assert tick.symbol == "R_10"
        assert tick.price == "6543.2"

    def test_price_key_accepted(self):
        tick = parse_tick_payload({"symbol": "R_10", "price": "1.5"})
        assert tick.price == "1.5"

    def test_tick_instance_passthrough(self):
        tick = parse_tick_payload(Tick(symbol="R_10", price=" 1.5 "))
        assert tick.price == "1.5"

    def test_missing_symbol(self):
        with pytest.raises(MissingDataError) as exc_info:
            parse_tick_payload({"quote": "1.5"})
        assert exc_info.value.data_type == "symbol"

    def test_missing_quote(self):
        with pytest.raises(MissingDataError) as exc_info:
            parse_tick_payload({"symbol": "R_10"})
        assert exc_info.value.context == {"symbol": "R_10"}

    def test_non_mapping_payload(self):
        with pytest.raises(MalformedDataError):
            parse_tick_payload("R_10 1.5")

    def test_non_mapping_tick_body(self):
        with pytest.raises(MalformedDataError):
            parse_tick_payload({"tick": [1, 2]})

    def test_errors_are_data_quality_errors(self):
        """Test all parse failures are recoverable data quality errors."""
        with pytest.raises(DataQualityError) as exc_info:
            parse_tick_payload({"symbol": "R_10", "quote": "bad"})
        assert exc_info.value.recoverable is True
