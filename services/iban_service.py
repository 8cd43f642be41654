"""IBAN generation and validation service for MCP and plain HTTP."""
from __future__ import annotations

import base64
import os

from fastmcp import FastMCP
from pydantic import BaseModel
from starlette.requests import Request
from starlette.responses import JSONResponse

from iban_generator import InputValidationError, generate
from iban_utils import format_iban, normalize_iban, validate_iban
from mcp_framework import log_failure, log_interaction

GENERATOR_PATH = "/api/generators/iban"
VALIDATOR_PATH = "/api/validators/iban"

VALIDATION_CACHE_SECONDS = int(os.getenv("IBAN_VALIDATION_CACHE_SECONDS", "300"))
SEEDED_CACHE_CONTROL = "public, max-age=31536000, immutable"


class IbanResult(BaseModel):
    valid: bool
    normalized_iban: str
    country: str | None = None
    reason: str | None = None


class IbanGeneratorResult(BaseModel):
    iban: str
    country: str
    seed: str | None = None


def _upper(value: str | None) -> str | None:
    return value.strip().upper() if value else value


def _error_response(code: str, message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": {"code": code, "message": message}}, status_code=status_code)


def _internal_error() -> JSONResponse:
    return _error_response("INTERNAL", "An unexpected server error occurred", 500)


def seeded_etag(country: str, seed: str) -> str:
    """Cache validator for a seeded response; the body is a pure function of both."""

    token = base64.b64encode(f"{country}:{seed}".encode("utf-8")).decode("ascii")
    return f'"{token}"'


async def generate_iban_route(request: Request) -> JSONResponse:
    """
    GET /api/generators/iban?country=DE&seed=abc

    Seeded responses are immutable and carry an ETag; random ones are never
    stored by caches.
    """
    country = _upper(request.query_params.get("country"))
    seed = request.query_params.get("seed")
    input_payload = {"country": country, "seed": seed}

    try:
        payload = generate(country, seed)
    except InputValidationError as exc:
        log_failure("http_iban_generate", input_payload, exc)
        return _error_response(exc.code, str(exc), 400)
    except Exception as exc:
        log_failure("http_iban_generate", input_payload, exc)
        return _internal_error()

    log_interaction("http_iban_generate", input_payload, payload)

    if seed is None:
        headers = {"Cache-Control": "no-store"}
    else:
        headers = {
            "Cache-Control": SEEDED_CACHE_CONTROL,
            "ETag": seeded_etag(payload["country"], seed),
        }
    return JSONResponse(payload, headers=headers)


async def validate_iban_route(request: Request) -> JSONResponse:
    """GET /api/validators/iban?iban=DE89..."""

    iban = request.query_params.get("iban")
    if not iban:
        exc = InputValidationError([("iban", "iban parameter is required")])
        log_failure("http_iban_validate", {"iban": iban}, exc)
        return _error_response(exc.code, str(exc), 400)

    try:
        result = validate_iban(iban)
    except Exception as exc:
        log_failure("http_iban_validate", {"iban": iban}, exc)
        return _internal_error()

    log_interaction("http_iban_validate", {"iban": iban}, result)
    return JSONResponse(
        result,
        headers={"Cache-Control": f"public, max-age={VALIDATION_CACHE_SECONDS}"},
    )


def register_iban_service(mcp: FastMCP) -> None:
    """Register IBAN tools and HTTP routes on the provided MCP instance."""

    @mcp.tool()
    def iban_check(iban: str) -> IbanResult:
        """
        Validate an IBAN and return structured result.

        Args:
            iban: IBAN string (can contain spaces, lower/upper case)
        """

        normalized = normalize_iban(iban)
        try:
            result_dict = validate_iban(iban)
        except Exception as exc:
            log_failure("iban_check", {"iban": iban}, exc)
            raise

        log_interaction("iban_check", {"iban": iban}, result_dict)
        return IbanResult(
            normalized_iban=normalized,
            country=normalized[:2] or None,
            **result_dict,
        )

    @mcp.tool()
    def iban_generate(
        country: str, seed: str | None = None, print_format: bool = False
    ) -> IbanGeneratorResult:
        """
        Generate a checksum-valid IBAN for DE, AT or PL.

        Args:
            country: two-letter country code
            seed: optional seed (max 64 chars of A-Z, a-z, 0-9, '.', '_', '-');
                the same seed always yields the same IBAN
            print_format: group the IBAN in blocks of four characters
        """

        input_payload = {"country": country, "seed": seed}
        try:
            result_dict = generate(_upper(country), seed)
        except Exception as exc:
            log_failure("iban_generate", input_payload, exc)
            raise

        log_interaction("iban_generate", input_payload, result_dict)
        if print_format:
            result_dict["iban"] = format_iban(result_dict["iban"])
        return IbanGeneratorResult(**result_dict)

    mcp.custom_route(GENERATOR_PATH, methods=["GET"])(generate_iban_route)
    mcp.custom_route(VALIDATOR_PATH, methods=["GET"])(validate_iban_route)
