"""Seeded and random IBAN generation for the supported countries."""
from __future__ import annotations

import re
import secrets
from enum import Enum

from iban_utils import COUNTRY_RULES, calculate_check_digits
from number_utils import SplitMix32, fnv1a32, generate_digits

SEED_MAX_LENGTH = 64
_SEED_RE = re.compile(r"[A-Za-z0-9._-]+")


class IbanCountry(str, Enum):
    DE = "DE"
    AT = "AT"
    PL = "PL"


SUPPORTED_COUNTRIES = tuple(country.value for country in IbanCountry)


class InputValidationError(ValueError):
    """Raised when generation parameters are missing or malformed.

    ``errors`` holds ``(field, message)`` pairs; the string form joins them as
    ``"field: message"`` so every message names the offending field.
    """

    code = "VALIDATION_ERROR"

    def __init__(self, errors: list[tuple[str, str]]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(f"{field}: {message}" for field, message in self.errors))

    @property
    def fields(self) -> list[str]:
        return [field for field, _ in self.errors]


def check_generate_params(country, seed: str | None) -> list[tuple[str, str]]:
    """Collect every problem with a (country, seed) pair without raising."""

    errors: list[tuple[str, str]] = []
    choices = ", ".join(f"'{code}'" for code in SUPPORTED_COUNTRIES)

    if isinstance(country, IbanCountry):
        country = country.value

    if not country:
        errors.append(("country", f"country is required and must be one of {choices}"))
    elif country not in SUPPORTED_COUNTRIES:
        errors.append(("country", f"country must be one of {choices}, got {country!r}"))

    if seed is not None:
        if not isinstance(seed, str):
            errors.append(("seed", "seed must be a string"))
        elif len(seed) > SEED_MAX_LENGTH:
            errors.append(("seed", f"seed must be at most {SEED_MAX_LENGTH} characters"))
        elif not _SEED_RE.fullmatch(seed):
            errors.append(
                ("seed", "seed must contain only alphanumeric, dots, underscores, or hyphens")
            )

    return errors


def generate_iban(country: IbanCountry | str, seed: str | None = None) -> str:
    """
    Generate a checksum-valid IBAN for ``country``.

    With a seed the result is a pure function of (country, seed). Without one
    the generator is seeded from the ``secrets`` module and nothing is cached.
    """
    errors = check_generate_params(country, seed)
    if errors:
        raise InputValidationError(errors)

    code = IbanCountry(country).value
    rule = COUNTRY_RULES[code]

    if seed is None:
        rng = SplitMix32(secrets.randbits(32))
    else:
        rng = SplitMix32(fnv1a32(seed))

    bank_code = generate_digits(rng, rule.bank_code_length)
    account = generate_digits(rng, rule.account_length)
    bban = bank_code + account

    return f"{code}{calculate_check_digits(code, bban)}{bban}"


def generate(country: IbanCountry | str, seed: str | None = None) -> dict:
    """Generate an IBAN and return ``{"iban", "country"}`` plus the echoed seed."""

    iban = generate_iban(country, seed)
    result = {"iban": iban, "country": iban[:2]}
    if seed is not None:
        result["seed"] = seed
    return result
