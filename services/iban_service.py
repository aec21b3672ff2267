"""IBAN validation service for MCP."""
from __future__ import annotations

from typing import Any

from fastmcp import FastMCP
from pydantic import BaseModel

from iban_utils import expected_length, is_valid_iban, validate_iban
from mcp_framework import log_interaction


class IbanResult(BaseModel):
    valid: bool
    normalized_iban: str
    status: str
    country: str | None = None
    expected_length: int | None = None
    reason: str | None = None


class CountryLength(BaseModel):
    country: str
    known: bool
    length: int | None = None


def check_iban(iban: str) -> IbanResult:
    return IbanResult(**validate_iban(iban))


def check_validity(iban: str) -> dict[str, Any]:
    return {"iban": iban, "valid": is_valid_iban(iban)}


def lookup_country_length(country_code: str) -> CountryLength:
    country = country_code.strip().upper()
    length = expected_length(country)
    return CountryLength(country=country, known=length is not None, length=length)


def _logged(action: str, input_payload: dict[str, Any], func, *args):
    try:
        result = func(*args)
    except Exception as exc:
        log_interaction(
            f"{action}_error",
            input_payload,
            {"error": str(exc), "type": exc.__class__.__name__},
        )
        raise

    output = result.model_dump() if isinstance(result, BaseModel) else result
    log_interaction(action, input_payload, output)
    return result


def register_iban_service(mcp: FastMCP) -> None:
    """Register IBAN validation tools on the provided MCP instance."""

    @mcp.tool()
    def iban_check(iban: str) -> IbanResult:
        """
        Validate an IBAN and return structured result.

        Args:
            iban: IBAN string (may contain spaces, dashes, lower/upper case)

        Returns:
            IbanResult: {valid, normalized_iban, status, country, expected_length, reason}
        """

        return _logged("iban_check", {"iban": iban}, check_iban, iban)

    @mcp.tool()
    def iban_is_valid(iban: str) -> dict[str, Any]:
        """Return only whether the IBAN is valid."""

        return _logged("iban_is_valid", {"iban": iban}, check_validity, iban)

    @mcp.tool()
    def iban_country_length(country_code: str) -> CountryLength:
        """Look up the IBAN length mandated for a two-letter country code."""

        return _logged(
            "iban_country_length",
            {"country_code": country_code},
            lookup_country_length,
            country_code,
        )
