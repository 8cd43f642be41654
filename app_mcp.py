"""Composable MCP server hosting the IBAN generator and validator."""
from __future__ import annotations

import os

import uvicorn

from mcp_framework import ServiceDefinition, attach_request_logger, create_mcp_server, log_interaction
from services import register_iban_service

APP_NAME = os.getenv("IBAN_APP_NAME", "iban-synth")
HOST = os.getenv("IBAN_HOST", "127.0.0.1")
PORT = int(os.getenv("IBAN_PORT", "8000"))
LOG_LEVEL = os.getenv("IBAN_LOG_LEVEL", "info")

services = [
    ServiceDefinition(
        name="iban",
        description="Generate deterministic or random IBANs and validate IBAN strings.",
        register=register_iban_service,
    ),
]

mcp, http_app = create_mcp_server(services, app_name=APP_NAME, json_response=True)
attach_request_logger(http_app)

log_interaction("startup", {"services": [service.name for service in services]}, {"app": APP_NAME})


def main() -> None:
    uvicorn.run(http_app, host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
