"""
Tests for Input Validators (defibuddy/validators/validators.py)
"""

import pytest
from decimal import Decimal

from defibuddy.exceptions import InvalidAddressError
from defibuddy.validators import (
    classify_query,
    is_wallet_address,
    sanitize_string,
    shorten_address,
    validate_buddy_name,
    validate_chat_message,
    validate_contribution,
    validate_eth_address,
    validate_person_name,
    validate_symbol,
    validate_symbols,
)

pytestmark = pytest.mark.unit

VITALIK = "0xD8dA6BF26964aF9D7eEd9e03E53415D37aA96045"


class TestQueryClassification:

    def test_checksummed_address_is_wallet(self):
        assert classify_query(VITALIK) == "wallet"

    def test_name_is_personality(self):
        assert classify_query("Elon Musk") == "personality"

    def test_surrounding_whitespace_ignored(self):
        assert classify_query(f"  {VITALIK}  ") == "wallet"

    @pytest.mark.parametrize("query", [
        VITALIK[:-1],           # 39 hex characters
        VITALIK + "0",          # 41 hex characters
        "0x" + "g" * 40,        # not hex
        VITALIK[2:],            # no prefix
        "0X" + VITALIK[2:],     # uppercase prefix
    ])
    def test_near_misses_are_personality(self, query):
        assert not is_wallet_address(query)
        assert classify_query(query) == "personality"

    def test_non_string(self):
        assert is_wallet_address(None) is False


class TestValidateEthAddress:

    def test_returns_stripped_address_case_preserved(self):
        assert validate_eth_address(f" {VITALIK}\n") == VITALIK

    def test_lowercase_accepted(self):
        assert validate_eth_address(VITALIK.lower()) == VITALIK.lower()

    def test_empty_rejected(self):
        with pytest.raises(InvalidAddressError) as exc_info:
            validate_eth_address("")
        assert exc_info.value.status_code == 400

    def test_malformed_rejected(self):
        with pytest.raises(InvalidAddressError) as exc_info:
            validate_eth_address("0x1234")
        assert exc_info.value.details["address"] == "0x1234"


class TestShortenAddress:

    def test_shortens(self):
        assert shorten_address(VITALIK) == "0xD8dA...6045"

    def test_short_value_untouched(self):
        assert shorten_address("0x1234") == "0x1234"


class TestStrings:

    def test_sanitize_strips_html_and_newlines(self):
        assert sanitize_string("  <b>Vitalik</b>\nButerin ") == "Vitalik Buterin"

    def test_sanitize_rejects_overlong(self):
        with pytest.raises(ValueError):
            sanitize_string("x" * 11, max_length=10)

    def test_person_name(self):
        assert validate_person_name("  Elon Musk ") == "Elon Musk"

    @pytest.mark.parametrize("name", ["", "   ", None, "<i></i>"])
    def test_person_name_required(self, name):
        with pytest.raises(ValueError):
            validate_person_name(name)

    def test_buddy_name_length(self):
        assert validate_buddy_name("a" * 100) == "a" * 100
        with pytest.raises(ValueError):
            validate_buddy_name("a" * 101)

    def test_chat_message_keeps_newlines_and_markup(self):
        message = "Add 20% LINK\nand <remove> DOGE"
        assert validate_chat_message(message) == message

    def test_chat_message_required(self):
        with pytest.raises(ValueError):
            validate_chat_message("   ")


class TestSymbols:

    @pytest.mark.parametrize("symbol", ["ETH", "USDC.e", "1INCH", "stETH", "BTC-B", "USD+"])
    def test_valid(self, symbol):
        assert validate_symbol(symbol) == symbol

    @pytest.mark.parametrize("symbol", ["", "E TH", "ETH$", "A" * 21])
    def test_invalid(self, symbol):
        with pytest.raises(ValueError):
            validate_symbol(symbol)

    def test_list(self):
        assert validate_symbols([" ETH", "UNI "]) == ["ETH", "UNI"]

    def test_list_limit(self):
        with pytest.raises(ValueError):
            validate_symbols(["ETH"] * 51)

    def test_empty_list_allowed(self):
        assert validate_symbols([]) == []


class TestContribution:

    @pytest.mark.parametrize("value,expected", [
        ("250.50", Decimal("250.50")),
        (250.5, Decimal("250.50")),
        (100, Decimal("100.00")),
        ("0.005", Decimal("0.01")),
        ("0", Decimal("0.00")),
    ])
    def test_quantized_to_cents(self, value, expected):
        assert validate_contribution(value) == expected

    @pytest.mark.parametrize("value", ["abc", "-1", "NaN", "Infinity", True, None, "10000000000.00"])
    def test_rejected(self, value):
        with pytest.raises(ValueError):
            validate_contribution(value)
