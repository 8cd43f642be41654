"""Utilities for composing the IBAN FastMCP server from reusable services."""
from __future__ import annotations

import json
import logging
import time
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
    """Describe a service that registers tools and routes on a FastMCP instance."""

    name: str
    description: str
    register: Callable[[FastMCP], None]


def log_interaction(action: str, input_data: Any, output_data: Any) -> None:
    """Emit a structured log entry via the standard uvicorn logger (JSON Lines).

    Values that are not JSON serializable are stringified rather than
    dropping the entry.
    """

    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "action": action,
        "input": input_data,
        "output": output_data,
    }

    try:
        serialized = json.dumps(entry, ensure_ascii=False)
    except TypeError:
        serialized = json.dumps(entry, ensure_ascii=False, default=str)

    logger.info(serialized)


def log_failure(action: str, input_data: Any, exc: BaseException) -> None:
    """Log ``exc`` under ``<action>_error`` with its message and type."""

    log_interaction(
        f"{action}_error",
        input_data,
        {"error": str(exc), "type": exc.__class__.__name__},
    )


def create_mcp_server(
    services: Iterable[ServiceDefinition],
    *,
    app_name: str = "iban-synth",
    json_response: bool = True,
):
    """Create an MCP server instance, register all services and build its HTTP app."""

    mcp = FastMCP(app_name)

    for service in services:
        service.register(mcp)

    app = mcp.http_app(json_response=json_response)
    return mcp, app


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with its outcome and duration."""

    def __init__(self, app, action: str = "http_request"):
        super().__init__(app)
        self.action = action

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_info: dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
            "query": dict(request.query_params),
            "client": request.client.host if request.client else None,
        }

        if request.method == "POST":
            request_body = await request.body()
            if request_body:
                try:
                    payload = json.loads(request_body.decode("utf-8"))
                except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                    request_info["body_parse_error"] = str(exc)
                else:
                    if isinstance(payload, dict):
                        request_info["jsonrpc_method"] = payload.get("method")
                        if isinstance(payload.get("params"), dict):
                            request_info["param_keys"] = sorted(payload["params"].keys())

        started = time.perf_counter()
        response: Response | None = None
        error_detail: dict[str, Any] | None = None

        try:
            response = await call_next(request)
            return response
        except Exception as exc:
            error_detail = {"error": str(exc), "type": exc.__class__.__name__}
            raise
        finally:
            output_data: dict[str, Any] = {
                "status_code": response.status_code if response else None,
                "duration_ms": round((time.perf_counter() - started) * 1000, 3),
            }
            if error_detail:
                output_data.update(error_detail)
            log_interaction(self.action, request_info, output_data)


def attach_request_logger(app, *, action: str = "http_request") -> None:
    """Attach middleware that logs incoming HTTP requests and responses."""

    app.add_middleware(RequestLoggerMiddleware, action=action)
