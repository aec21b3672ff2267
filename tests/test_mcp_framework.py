from __future__ import annotations

import importlib
import json
import logging
from datetime import date

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response

import config
import mcp_framework
from mcp_framework import (
    ServiceDefinition,
    create_mcp_server,
    describe_outcome,
    describe_request,
    log_interaction,
)


def _request(query: bytes = b"") -> Request:
    return Request(
        {
            "type": "http",
            "method": "POST",
            "scheme": "http",
            "server": ("testserver", 80),
            "root_path": "",
            "path": "/mcp",
            "query_string": query,
            "headers": [],
            "client": ("10.0.0.7", 51000),
        }
    )


def test_log_interaction_writes_json_line(caplog) -> None:
    caplog.set_level(logging.INFO, logger="uvicorn.error")
    log_interaction("iban_check", {"iban": "NL28"}, {"valid": False, "when": date(2024, 1, 2)})

    entry = json.loads(caplog.records[-1].getMessage())
    assert entry["action"] == "iban_check"
    assert entry["input"] == {"iban": "NL28"}
    assert entry["output"] == {"valid": False, "when": "2024-01-02"}
    assert entry["timestamp"].endswith("Z")


def test_describe_request_extracts_jsonrpc_details() -> None:
    body = json.dumps(
        {
            "jsonrpc": "2.0",
            "method": "tools/call",
            "params": {"name": "iban_check", "arguments": {"iban": "NL28"}},
        }
    ).encode()

    info = describe_request(_request(b"debug=1"), body)

    assert info["method"] == "POST"
    assert info["path"] == "/mcp"
    assert info["query"] == "debug=1"
    assert info["client"] == "10.0.0.7"
    assert info["jsonrpc_method"] == "tools/call"
    assert info["param_keys"] == ["arguments", "name"]
    assert info["tool"] == "iban_check"


def test_describe_request_reports_unparseable_body() -> None:
    info = describe_request(_request(), b"{not json")
    assert "body_parse_error" in info
    assert "jsonrpc_method" not in info


def test_describe_request_without_body() -> None:
    assert describe_request(_request(), b"") == {
        "method": "POST",
        "path": "/mcp",
        "query": "",
        "client": "10.0.0.7",
    }


def test_describe_outcome_for_response() -> None:
    assert describe_outcome(Response(status_code=202)) == {"status_code": 202}


def test_describe_outcome_for_escaped_exception() -> None:
    assert describe_outcome(None, RuntimeError("upstream closed")) == {
        "status_code": None,
        "error": "upstream closed",
        "type": "RuntimeError",
    }


def test_create_mcp_server_registers_services() -> None:
    registered = []
    service = ServiceDefinition(name="recorder", description="records registration", register=registered.append)

    mcp, app = create_mcp_server([service], app_name="iban-test")

    assert registered == [mcp]
    assert isinstance(app, Starlette)


def test_app_composes_iban_service_with_request_logger() -> None:
    app_mcp = importlib.import_module("app_mcp")

    assert [service.name for service in app_mcp.services] == ["iban"]
    assert any(
        middleware.cls.__name__ == "RequestLoggerMiddleware"
        for middleware in app_mcp.http_app.user_middleware
    )


def test_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("IBAN_MCP_APP_NAME", "ibans")
    monkeypatch.setenv("IBAN_MCP_PORT", "9100")
    monkeypatch.setenv("IBAN_MCP_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("IBAN_MCP_JSON_RESPONSE", "off")
    try:
        reloaded = importlib.reload(config)
        assert reloaded.APP_NAME == "ibans"
        assert reloaded.PORT == 9100
        assert reloaded.LOG_LEVEL == "debug"
        assert reloaded.JSON_RESPONSE is False
    finally:
        monkeypatch.undo()
        importlib.reload(config)


def test_env_flag_defaults(monkeypatch) -> None:
    monkeypatch.delenv("IBAN_MCP_TEST_FLAG", raising=False)
    assert config.env_flag("IBAN_MCP_TEST_FLAG", True) is True
    monkeypatch.setenv("IBAN_MCP_TEST_FLAG", "  ")
    assert config.env_flag("IBAN_MCP_TEST_FLAG", False) is False
    monkeypatch.setenv("IBAN_MCP_TEST_FLAG", "Yes")
    assert config.env_flag("IBAN_MCP_TEST_FLAG", False) is True


def test_logger_is_uvicorn_error_logger() -> None:
    assert mcp_framework.logger.name == "uvicorn.error"
