"""Runtime settings for the IBAN MCP server.

Every value can be overridden through an environment variable:

* ``IBAN_MCP_APP_NAME`` (defaults to ``"iban-validator"``)
* ``IBAN_MCP_HOST`` (defaults to ``"127.0.0.1"``)
* ``IBAN_MCP_PORT`` (defaults to ``8000``)
* ``IBAN_MCP_LOG_LEVEL`` (defaults to ``"info"``)
* ``IBAN_MCP_JSON_RESPONSE`` (defaults to ``true``)
"""
from __future__ import annotations

import os

_TRUTHY = {"1", "true", "yes", "on"}


def env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


APP_NAME = os.getenv("IBAN_MCP_APP_NAME", "iban-validator")
HOST = os.getenv("IBAN_MCP_HOST", "127.0.0.1")
PORT = int(os.getenv("IBAN_MCP_PORT", "8000"))
LOG_LEVEL = os.getenv("IBAN_MCP_LOG_LEVEL", "info").lower()
JSON_RESPONSE = env_flag("IBAN_MCP_JSON_RESPONSE", True)
