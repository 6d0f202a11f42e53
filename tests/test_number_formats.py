"""Tests for per-country VAT number format validation."""
import pytest

from euvat.domain.number_formats import NUMBER_PATTERNS, split_number, validate_number_format


@pytest.mark.parametrize("number", [
    "ATU12345678",
    "BE0123456789",
    "BE1234567891",
    "BE0999999999",
    "BG123456789",
    "BG1234567890",
    "CHE-156.730.098 MWST",
    "CHE-156.730.098",
    "CHE156730098MWST",
    "CHE156730098",
    "CY12345678X",
    "CZ12345678",
    "DE123456789",
    "DK12345678",
    "EE123456789",
    "EL123456789",
    "ESX12345678",
    "ES12345678X",
    "FI12345678",
    "FR12345678901",
    "FRAB123456789",
    "GB999999973",
    "GB156730098481",
    "GBGD549",
    "GBHA549",
    "XI999999973",
    "HR12345678901",
    "HU12345678",
    "IE1234567X",
    "IE1234567WA",
    "IT12345678901",
    "LT123456789",
    "LT123456789012",
    "LU26375245",
    "LV12345678901",
    "MT12345678",
    "NL123456789B01",
    "PL1234567890",
    "PT123456789",
    "RO123456789",
    "SE123456789012",
    "SI12345678",
    "SK1234567890",
])
def test_valid_formats(number):
    assert validate_number_format(number) is True


@pytest.mark.parametrize("number", [
    "",
    None,
    "A",
    "NL",
    "AB123A01",
    "ATU1234567",
    "BE012345678",
    "BG1234567",
    "CY1234567X",
    "DE12345678",
    "ESX1234567",
    "FR1234567890",
    "GB99999997",
    "IE123456X",
    "NL12345678B12",
    "RO1",
    "SE12345678901",
    "PO1234567890",
    "KL123456789B12",
])
def test_invalid_formats(number):
    assert validate_number_format(number) is False


class TestNormalization:
    def test_lowercase_accepted(self):
        assert validate_number_format("nl123456789b01") is True

    def test_surrounding_whitespace_ignored(self):
        assert validate_number_format("  DE123456789\n") is True

    def test_whole_number_must_match(self):
        # 9 cyfr dla DK (wymagane 8) i śmieci na końcu
        assert validate_number_format("DK123365678") is False
        assert validate_number_format("DE123456789XYZ") is False

    def test_split_number(self):
        assert split_number(" nl123456789b01 ") == ("NL", "123456789B01")


def test_every_eu_prefix_has_a_pattern():
    for code in ("AT", "BE", "BG", "CY", "CZ", "DE", "DK", "EE", "EL", "ES", "FI", "FR", "HR",
                 "HU", "IE", "IT", "LT", "LU", "LV", "MT", "NL", "PL", "PT", "RO", "SE", "SI", "SK"):
        assert code in NUMBER_PATTERNS
