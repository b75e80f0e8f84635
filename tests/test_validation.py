"""Tests for input validation utilities."""

import pytest
from walletguard.validation import (
    is_hex_data,
    is_valid_address,
    parse_uint,
    validate_address,
)


class TestAddressValidation:
    def test_valid_address(self):
        assert is_valid_address("0x742d35Cc6634C0532925a3b844Bc9e7595f2bD60")

    def test_valid_address_lowercase(self):
        assert is_valid_address("0x742d35cc6634c0532925a3b844bc9e7595f2bd60")

    def test_valid_address_uppercase(self):
        assert is_valid_address("0x742D35CC6634C0532925A3B844BC9E7595F2BD60")

    def test_invalid_no_prefix(self):
        assert not is_valid_address("742d35Cc6634C0532925a3b844Bc9e7595f2bD60")

    def test_invalid_too_short(self):
        assert not is_valid_address("0x742d35Cc")

    def test_invalid_too_long(self):
        assert not is_valid_address("0x742d35Cc6634C0532925a3b844Bc9e7595f2bD6000")

    def test_invalid_non_hex(self):
        assert not is_valid_address("0xZZZd35Cc6634C0532925a3b844Bc9e7595f2bD60")

    def test_invalid_empty(self):
        assert not is_valid_address("")

    def test_invalid_non_string(self):
        assert not is_valid_address(None)
        assert not is_valid_address(0x742D35CC6634C0532925A3B844BC9E7595F2BD60)

    def test_validate_address_returns_lowercase(self):
        result = validate_address("0x742D35CC6634C0532925A3B844BC9E7595F2BD60")
        assert result == "0x742d35cc6634c0532925a3b844bc9e7595f2bd60"

    def test_validate_address_raises_on_invalid(self):
        with pytest.raises(ValueError, match="Invalid address format"):
            validate_address("not-an-address")


class TestHexData:
    def test_empty_calldata(self):
        assert is_hex_data("0x")

    def test_selector(self):
        assert is_hex_data("0xa9059cbb")

    def test_odd_length(self):
        assert not is_hex_data("0xabc")

    def test_no_prefix(self):
        assert not is_hex_data("a9059cbb")


class TestParseUint:
    def test_decimal_string(self):
        assert parse_uint("1000000000000000000") == 10**18

    def test_beyond_64_bits(self):
        assert parse_uint("340282366920938463463374607431768211456") == 2**128

    def test_hex_string(self):
        assert parse_uint("0x2105") == 8453

    def test_int(self):
        assert parse_uint(137) == 137

    def test_surrounding_whitespace(self):
        assert parse_uint(" 42 ") == 42

    def test_rejects_negative(self):
        assert parse_uint(-1) is None
        assert parse_uint("-1") is None

    def test_rejects_garbage(self):
        assert parse_uint("abc") is None
        assert parse_uint("1.5") is None
        assert parse_uint("") is None

    def test_rejects_other_types(self):
        assert parse_uint(1.0) is None
        assert parse_uint(True) is None
        assert parse_uint(None) is None
        assert parse_uint(["1"]) is None
