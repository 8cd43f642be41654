# iban_utils.py
import re
from dataclasses import dataclass

IBAN_MIN_LENGTH = 15
IBAN_MAX_LENGTH = 34

_COUNTRY_CODE_RE = re.compile(r"[A-Z]{2}")
_CHECK_DIGITS_RE = re.compile(r"[0-9]{2}")
_BBAN_RE = re.compile(r"[A-Z0-9]+")


@dataclass(frozen=True)
class CountryRule:
    """Fixed IBAN layout for one country."""

    country_code: str
    total_length: int
    bank_code_length: int
    account_length: int

    @property
    def bban_length(self) -> int:
        return self.total_length - 4


COUNTRY_RULES = {
    "DE": CountryRule("DE", 22, bank_code_length=8, account_length=10),  # Germany
    "AT": CountryRule("AT", 20, bank_code_length=5, account_length=11),  # Austria
    "PL": CountryRule("PL", 28, bank_code_length=8, account_length=16),  # Poland
}

IBAN_LENGTHS = {code: rule.total_length for code, rule in COUNTRY_RULES.items()}


def normalize_iban(iban: str) -> str:
    """Remove all whitespace and make upper-case."""
    return re.sub(r"\s+", "", iban).upper()


def iban_mod97(numeric_iban: str) -> int:
    """
    Compute numeric_iban % 97 using the official IBAN iterative algorithm.
    numeric_iban must be a string of digits.
    """
    remainder = 0
    for ch in numeric_iban:
        remainder = (remainder * 10 + int(ch)) % 97
    return remainder


def iban_to_numeric(iban: str) -> str:
    """
    Convert IBAN letters to numbers (A=10 ... Z=35) for MOD97 check.
    """
    result = []
    for ch in iban:
        if "0" <= ch <= "9":
            result.append(ch)
        elif "A" <= ch <= "Z":
            result.append(str(ord(ch) - 55))  # A -> 10, B -> 11, ...
        else:
            raise ValueError(f"Invalid character in IBAN: {ch!r}")
    return "".join(result)


def calculate_check_digits(country: str, bban: str) -> str:
    """
    Return the two check digits for ``country`` + ``bban``.

    The candidate is rearranged as BBAN + country + "00" and the check value
    is 98 minus its remainder mod 97, zero-padded to two digits.
    """
    numeric = iban_to_numeric(bban.upper() + country.upper() + "00")
    return f"{98 - iban_mod97(numeric):02d}"


def validate_iban_checksum(iban: str) -> bool:
    """Check a normalized IBAN: rearranged and converted it must leave remainder 1."""
    rearranged = iban[4:] + iban[:4]
    return iban_mod97(iban_to_numeric(rearranged)) == 1


def validate_iban(iban_input: str) -> dict:
    """
    Validate an IBAN.

    Returns ``{"valid": True}`` or ``{"valid": False, "reason": ...}``. The
    first failing check wins; countries outside ``IBAN_LENGTHS`` only get the
    generic length bounds and the checksum.
    """
    iban = normalize_iban(iban_input)
    length = len(iban)

    if length < IBAN_MIN_LENGTH:
        return {"valid": False, "reason": "IBAN is too short (minimum 15 characters)"}

    if length > IBAN_MAX_LENGTH:
        return {"valid": False, "reason": "IBAN is too long (maximum 34 characters)"}

    country = iban[:2]
    if not _COUNTRY_CODE_RE.fullmatch(country):
        return {"valid": False, "reason": "Invalid country code (must be 2 letters)"}

    if not _CHECK_DIGITS_RE.fullmatch(iban[2:4]):
        return {"valid": False, "reason": "Invalid check digits (must be 2 digits)"}

    expected_len = IBAN_LENGTHS.get(country)
    if expected_len is not None and length != expected_len:
        return {
            "valid": False,
            "reason": f"Invalid length for {country} "
                      f"(expected {expected_len}, got {length})",
        }

    if not _BBAN_RE.fullmatch(iban[4:]):
        return {
            "valid": False,
            "reason": "BBAN contains invalid characters (must be alphanumeric)",
        }

    if not validate_iban_checksum(iban):
        return {"valid": False, "reason": "Invalid checksum (mod-97 validation failed)"}

    return {"valid": True}


def format_iban(iban: str) -> str:
    """Render the print format: groups of four separated by single spaces."""
    iban = normalize_iban(iban)
    return " ".join(iban[i:i + 4] for i in range(0, len(iban), 4))
