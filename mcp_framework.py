"""Helpers for exposing validation services over a FastMCP HTTP app."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from fastmcp import FastMCP
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("uvicorn.error")


@dataclass
class ServiceDefinition:
    """Describe a service that can register tools on a FastMCP instance."""

    name: str
    description: str
    register: Callable[[FastMCP], None]


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"


def log_interaction(action: str, input_data: Any, output_data: Any) -> None:
    """Emit a structured log entry via the standard uvicorn logger (JSON Lines).

    Values that are not JSON serializable are logged as their string form.
    """

    entry = {
        "timestamp": _utc_timestamp(),
        "action": action,
        "input": input_data,
        "output": output_data,
    }

    try:
        serialized = json.dumps(entry, ensure_ascii=False)
    except TypeError:
        serialized = json.dumps(entry, ensure_ascii=False, default=str)

    logger.info(serialized)


def describe_request(request: Request, body: bytes) -> dict[str, Any]:
    """Summarize an incoming request, including the JSON-RPC method if present."""

    request_info: dict[str, Any] = {
        "method": request.method,
        "path": request.url.path,
        "query": request.url.query,
        "client": request.client.host if request.client else None,
    }

    if not body:
        return request_info

    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        request_info["body_parse_error"] = str(exc)
        return request_info

    if isinstance(payload, dict):
        request_info["jsonrpc_method"] = payload.get("method")
        params = payload.get("params")
        if isinstance(params, dict):
            request_info["param_keys"] = sorted(params.keys())
            if isinstance(params.get("name"), str):
                request_info["tool"] = params["name"]

    return request_info


def describe_outcome(response: Response | None, error: BaseException | None = None) -> dict[str, Any]:
    """Summarize how a request ended: the status code, or the exception that escaped."""

    outcome: dict[str, Any] = {"status_code": response.status_code if response else None}
    if error is not None:
        outcome["error"] = str(error)
        outcome["type"] = error.__class__.__name__
    return outcome


def create_mcp_server(
    services: Iterable[ServiceDefinition],
    *,
    app_name: str,
    json_response: bool = True,
):
    """Create an MCP server instance, register all services and build its HTTP app."""

    mcp = FastMCP(app_name)

    for service in services:
        service.register(mcp)

    app = mcp.http_app(json_response=json_response)
    return mcp, app


def attach_request_logger(app, *, action: str = "http_request") -> None:
    """Attach middleware that logs incoming HTTP requests and responses."""

    class RequestLoggerMiddleware(BaseHTTPMiddleware):
        def __init__(self, app):
            super().__init__(app)
            self.action = action

        async def dispatch(
            self, request: Request, call_next: RequestResponseEndpoint
        ) -> Response:
            request_info = describe_request(request, await request.body())

            response: Response | None = None
            error: Exception | None = None

            try:
                response = await call_next(request)
                return response
            except Exception as exc:
                error = exc
                raise
            finally:
                log_interaction(self.action, request_info, describe_outcome(response, error))

    app.add_middleware(RequestLoggerMiddleware)
