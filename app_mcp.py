"""MCP server exposing the IBAN validation service over streamable HTTP."""
from __future__ import annotations

import uvicorn

import config
from mcp_framework import ServiceDefinition, attach_request_logger, create_mcp_server, log_interaction
from services import register_iban_service

services = [
    ServiceDefinition(
        name="iban",
        description="Validate IBAN strings and look up per-country IBAN lengths.",
        register=register_iban_service,
    ),
]

mcp, http_app = create_mcp_server(
    services, app_name=config.APP_NAME, json_response=config.JSON_RESPONSE
)
attach_request_logger(http_app)

log_interaction("startup", {"services": [service.name for service in services]}, {"app": config.APP_NAME})


if __name__ == "__main__":
    # Serves on http://<host>:<port>/mcp
    uvicorn.run(
        http_app,
        host=config.HOST,
        port=config.PORT,
        log_level=config.LOG_LEVEL,
    )
