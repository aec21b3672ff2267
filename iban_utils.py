# iban_utils.py
from __future__ import annotations

import re
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

# Total IBAN length per country, including country code and check digits.
IBAN_LENGTHS: Mapping[str, int] = MappingProxyType({
    "AD": 24, "AE": 23, "AL": 28, "AO": 25, "AT": 20,
    "AX": 18, "AZ": 28, "BA": 20, "BE": 16, "BF": 28,
    "BG": 22, "BH": 22, "BI": 27, "BJ": 28, "BL": 27,
    "BR": 29, "BY": 28, "CF": 27, "CG": 27, "CH": 21,
    "CI": 28, "CM": 27, "CR": 22, "CV": 25, "CY": 28,
    "CZ": 24, "DE": 22, "DJ": 27, "DK": 18, "DO": 28,
    "DZ": 26, "EA": 24, "EE": 20, "EG": 29, "ES": 24,
    "FI": 18, "FO": 18, "FR": 27, "GA": 27, "GB": 22,
    "GE": 22, "GF": 27, "GG": 22, "GI": 23, "GL": 18,
    "GP": 27, "GQ": 27, "GR": 27, "GT": 28, "GW": 25,
    "HN": 28, "HR": 21, "HU": 28, "IC": 24, "IE": 22,
    "IL": 23, "IM": 22, "IQ": 23, "IR": 26, "IS": 26,
    "IT": 27, "JE": 22, "JO": 30, "KM": 27, "KW": 30,
    "KZ": 20, "LB": 28, "LC": 32, "LI": 21, "LT": 20,
    "LU": 20, "LV": 21, "LY": 25, "MA": 28, "MC": 27,
    "MD": 24, "ME": 22, "MF": 27, "MG": 27, "MK": 19,
    "ML": 28, "MN": 20, "MQ": 27, "MR": 27, "MT": 31,
    "MU": 30, "MZ": 25, "NC": 27, "NE": 28, "NI": 32,
    "NL": 18, "NO": 15, "PF": 27, "PK": 24, "PL": 28,
    "PM": 27, "PS": 29, "PT": 25, "QA": 29, "RE": 27,
    "RO": 24, "RS": 22, "RU": 33, "SA": 24, "SC": 31,
    "SD": 18, "SE": 24, "SI": 19, "SK": 24, "SM": 27,
    "SN": 28, "ST": 25, "SV": 28, "TD": 27, "TF": 27,
    "TG": 28, "TL": 23, "TN": 24, "TR": 26, "UA": 29,
    "VA": 22, "VG": 24, "WF": 27, "XK": 20, "YT": 27,
})

_NON_ALNUM_RE = re.compile(r"[^0-9A-Za-z]+")


class InvalidIbanCharacterError(ValueError):
    """Raised when a character has no numeric value in the MOD97 mapping."""


class IbanStatus(str, Enum):
    """Outcome of running an IBAN through the validation gates."""

    VALID = "valid"
    TOO_SHORT = "too_short"
    UNKNOWN_COUNTRY = "unknown_country"
    WRONG_LENGTH = "wrong_length"
    CHECKSUM_FAILED = "checksum_failed"


def normalize_iban(iban: str | None) -> str:
    """Drop everything except ASCII letters and digits. Case is preserved."""
    if not iban:
        return ""
    return _NON_ALNUM_RE.sub("", iban)


def expected_length(country_code: str, *, lengths: Mapping[str, int] = IBAN_LENGTHS) -> int | None:
    """Return the mandated IBAN length for a country code, or None if unknown."""
    if not country_code.isascii():
        return None
    return lengths.get(country_code.upper())


def validate_length(normalized: str, *, lengths: Mapping[str, int] = IBAN_LENGTHS) -> bool:
    """
    Check the length of an already normalized IBAN against its country.

    Fewer than two characters cannot name a country and are rejected.
    """
    if len(normalized) < 2:
        return False

    expected = expected_length(normalized[:2], lengths=lengths)
    return expected is not None and len(normalized) == expected


def iban_mod97(numeric_iban: str) -> int:
    """
    Compute numeric_iban % 97 using the official IBAN iterative algorithm.
    numeric_iban must be a string of digits.
    """
    remainder = 0
    for ch in numeric_iban:
        remainder = (remainder * 10 + int(ch)) % 97
    return remainder


def iban_mod97_bigint(numeric_iban: str) -> int:
    """Same as iban_mod97, computed on the whole number at once."""
    if not numeric_iban:
        return 0
    return int(numeric_iban) % 97


def iban_to_numeric(iban: str) -> str:
    """
    Convert IBAN letters to numbers (A=10 ... Z=35) for MOD97 check.
    Only ASCII letters and digits are accepted; letters must be upper-case.
    """
    result = []
    for ch in iban:
        if "0" <= ch <= "9":
            result.append(ch)
        elif "A" <= ch <= "Z":
            result.append(str(ord(ch) - 55))  # A -> 10, B -> 11, ...
        else:
            raise InvalidIbanCharacterError(f"Invalid character in IBAN: {ch!r}")
    return "".join(result)


def validate_checksum(normalized: str) -> bool:
    """Run the ISO 7064 MOD 97-10 check on a normalized IBAN."""
    # upper() maps some non-ASCII letters onto A-Z
    if not normalized.isascii():
        return False
    iban = normalized.upper()

    # Rearrange: move first 4 chars to the end
    rearranged = iban[4:] + iban[:4]

    try:
        numeric = iban_to_numeric(rearranged)
    except InvalidIbanCharacterError:
        return False

    return iban_mod97(numeric) == 1


def classify_iban(iban_input: str | None, *, lengths: Mapping[str, int] = IBAN_LENGTHS) -> IbanStatus:
    """Run the validation pipeline and report which gate, if any, rejected the input."""
    iban = normalize_iban(iban_input)

    if len(iban) < 2:
        return IbanStatus.TOO_SHORT
    if expected_length(iban[:2], lengths=lengths) is None:
        return IbanStatus.UNKNOWN_COUNTRY
    if not validate_length(iban, lengths=lengths):
        return IbanStatus.WRONG_LENGTH
    if not validate_checksum(iban):
        return IbanStatus.CHECKSUM_FAILED
    return IbanStatus.VALID


def is_valid_iban(iban_input: str | None, *, lengths: Mapping[str, int] = IBAN_LENGTHS) -> bool:
    """Return True when the input, ignoring formatting characters, is a valid IBAN."""
    iban = normalize_iban(iban_input)

    if not validate_length(iban, lengths=lengths):
        return False

    return validate_checksum(iban)


validate = is_valid_iban


def validate_iban(iban_input: str | None, *, lengths: Mapping[str, int] = IBAN_LENGTHS) -> dict[str, Any]:
    """
    Validate an IBAN and return a structured dict.
    """
    iban = normalize_iban(iban_input).upper()
    status = classify_iban(iban, lengths=lengths)

    result: dict[str, Any] = {
        "valid": status is IbanStatus.VALID,
        "normalized_iban": iban,
        "status": status.value,
    }

    if status is IbanStatus.TOO_SHORT:
        result["reason"] = "IBAN too short (must have at least 2 characters)."
        return result

    country = iban[:2]
    result["country"] = country

    if status is IbanStatus.UNKNOWN_COUNTRY:
        result["reason"] = f"Unsupported or unknown country code: {country}"
        return result

    expected = lengths[country]
    result["expected_length"] = expected

    if status is IbanStatus.WRONG_LENGTH:
        result["reason"] = (
            f"Invalid length for country {country} "
            f"(expected {expected}, got {len(iban)})."
        )
    elif status is IbanStatus.CHECKSUM_FAILED:
        remainder = iban_mod97(iban_to_numeric(iban[4:] + iban[:4]))
        result["reason"] = f"MOD97 check failed (remainder={remainder}, expected 1)."
    else:
        result["reason"] = "IBAN is valid."

    return result
