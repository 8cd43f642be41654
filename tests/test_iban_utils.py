from __future__ import annotations

import pytest

from iban_utils import (
    COUNTRY_RULES,
    IBAN_LENGTHS,
    calculate_check_digits,
    format_iban,
    iban_mod97,
    iban_to_numeric,
    normalize_iban,
    validate_iban,
    validate_iban_checksum,
)

VALID_DE = "DE89370400440532013000"

CHECKSUM_REASON = "Invalid checksum (mod-97 validation failed)"


def test_country_rules_are_consistent() -> None:
    assert IBAN_LENGTHS == {"DE": 22, "AT": 20, "PL": 28}
    for code, rule in COUNTRY_RULES.items():
        assert rule.country_code == code
        assert rule.bban_length == rule.bank_code_length + rule.account_length


def test_normalize_iban_strips_whitespace_and_uppercases() -> None:
    assert normalize_iban(" de89 3704\t0044\n0532 0130 00 ") == VALID_DE


def test_iban_to_numeric_letters() -> None:
    assert iban_to_numeric("AZ09") == "103509"
    with pytest.raises(ValueError):
        iban_to_numeric("A-1")


def test_iban_mod97_iterative() -> None:
    assert iban_mod97("0") == 0
    assert iban_mod97("97") == 0
    assert iban_mod97("98") == 1
    long_number = "3704004405320130001314" + "89"
    assert iban_mod97(long_number) == int(long_number) % 97


@pytest.mark.parametrize(
    "country, bban, expected",
    [
        ("DE", "370400440532013000", "89"),
        ("AT", "1904300234573201", "61"),
        ("PL", "109010140000071219812874", "61"),
        ("de", "370400440532013000", "89"),
    ],
)
def test_calculate_check_digits(country: str, bban: str, expected: str) -> None:
    assert calculate_check_digits(country, bban) == expected


def test_calculate_check_digits_round_trips_through_validator() -> None:
    for country, bban in (("DE", "000000000000000001"), ("AT", "9999999999999999")):
        digits = calculate_check_digits(country, bban)
        assert len(digits) == 2
        assert validate_iban(country + digits + bban) == {"valid": True}


@pytest.mark.parametrize(
    "iban",
    [
        VALID_DE,
        "AT611904300234573201",
        "PL61109010140000071219812874",
        "DE89 3704 0044 0532 0130 00",
        "de89370400440532013000",
        " de 89 37 04 00 44 05 32 01 30 00 ",
        "GB82WEST12345698765432",
        "NL91ABNA0417164300",
    ],
)
def test_validate_accepts_valid_ibans(iban: str) -> None:
    assert validate_iban(iban) == {"valid": True}


@pytest.mark.parametrize(
    "iban, reason",
    [
        ("", "IBAN is too short (minimum 15 characters)"),
        ("   ", "IBAN is too short (minimum 15 characters)"),
        ("DE893704004405", "IBAN is too short (minimum 15 characters)"),
        ("DE89" + "0" * 31, "IBAN is too long (maximum 34 characters)"),
        ("1239370400440532013000", "Invalid country code (must be 2 letters)"),
        ("D@89370400440532013000", "Invalid country code (must be 2 letters)"),
        ("DEAB370400440532013000", "Invalid check digits (must be 2 digits)"),
        ("DEA8370400440532013000", "Invalid check digits (must be 2 digits)"),
        ("DE893704004405320130", "Invalid length for DE (expected 22, got 20)"),
        ("DE893704004405320130001", "Invalid length for DE (expected 22, got 23)"),
        ("AT61190430023457320", "Invalid length for AT (expected 20, got 19)"),
        ("PL611090101400000712198128741", "Invalid length for PL (expected 28, got 29)"),
        ("DE89 3704 0044 0532 013@ 00", "BBAN contains invalid characters (must be alphanumeric)"),
        ("DE89370400440532013A00", CHECKSUM_REASON),
        ("DE89370400440532013001", CHECKSUM_REASON),
        ("DE00370400440532013000", CHECKSUM_REASON),
        ("GB82WEST12345698765433", CHECKSUM_REASON),
    ],
)
def test_validate_rejects_with_reason(iban: str, reason: str) -> None:
    assert validate_iban(iban) == {"valid": False, "reason": reason}


def test_validate_boundary_lengths() -> None:
    assert "too short" in validate_iban("X" * 14)["reason"]
    assert "too long" in validate_iban("X" * 35)["reason"]


def test_unknown_country_only_bounds_and_checksum() -> None:
    # XX is not in the rule table, so any length in 15..34 reaches the checksum
    result = validate_iban("XX12345678901234")
    assert result == {"valid": False, "reason": CHECKSUM_REASON}


def test_single_digit_change_in_bban_fails_checksum() -> None:
    for position in range(4, len(VALID_DE)):
        digit = int(VALID_DE[position])
        altered = VALID_DE[:position] + str((digit + 1) % 10) + VALID_DE[position + 1:]
        result = validate_iban(altered)
        assert result["valid"] is False
        assert "checksum" in result["reason"]


def test_validate_is_pure() -> None:
    for iban in (VALID_DE, "DE893704004405320130", "garbage"):
        assert validate_iban(iban) == validate_iban(iban)


def test_validate_never_raises_on_odd_input() -> None:
    for iban in ("DE89٣٧0400440532013000", "ÄÖ89370400440532013000", "\x00" * 20, "ß" * 16):
        result = validate_iban(iban)
        assert result["valid"] is False
        assert result["reason"]


def test_validate_iban_checksum_helper() -> None:
    assert validate_iban_checksum(VALID_DE) is True
    assert validate_iban_checksum("DE88370400440532013000") is False


def test_format_iban_groups_of_four() -> None:
    assert format_iban(VALID_DE) == "DE89 3704 0044 0532 0130 00"
    assert format_iban("at61 1904 3002 3457 3201") == "AT61 1904 3002 3457 3201"
    assert format_iban("") == ""
