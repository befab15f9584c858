#!/usr/bin/env python3
"""versionnumber MCP Server - exposes the VersionNumber step as a tool."""

from __future__ import annotations

import asyncio
import contextlib
import json
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List

from mcp.server import Server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from mcp.types import TextContent, Tool
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from versionnumber.config import Config
from versionnumber.core.common import get_version_action
from versionnumber.errors.mapper import RECOVERY_STRATEGIES, error_to_mcp_response
from versionnumber.exceptions import ValidationError, VersionNumberError
from versionnumber.history.storage import HistoryStore
from versionnumber.logger import session_logger as logger
from versionnumber.runner import run_step
from versionnumber.step import DESCRIPTOR

# Module-level configuration (set by the serve-mcp command and tests)
data_dir_override: str | None = None

app = Server("versionnumber-service")


def _store() -> HistoryStore:
    return HistoryStore(data_dir_override or Config.from_env().data_dir)


def _json_text(data: Dict[str, Any]) -> TextContent:
    return TextContent(type="text", text=json.dumps(data, indent=2, default=str))


def _error_response(
    error_code: str,
    message: str,
    details: Dict[str, Any] | None = None,
) -> List[TextContent]:
    """Create a standardized error response with recovery strategy."""
    response: Dict[str, Any] = {
        "success": False,
        "error_code": error_code,
        "message": message,
        "recovery_strategy": RECOVERY_STRATEGIES.get(
            error_code,
            "Review the error message and try again.",
        ),
    }
    if details:
        response["details"] = details

    logger.warning("Tool error", error_code=error_code, error_message=message, details=details)
    return [_json_text(response)]


def _exception_response(error: VersionNumberError) -> List[TextContent]:
    """Convert VersionNumberError to MCP response format."""
    response = error_to_mcp_response(error)
    logger.warning("Tool exception", error_code=response["error_code"], error_message=response["message"])
    return [_json_text(response)]


@app.list_tools()
async def handle_list_tools() -> List[Tool]:
    """List available tools."""
    step_schema = json.loads(json.dumps(DESCRIPTOR.input_schema))
    step_schema["properties"]["job"] = {
        "type": "string",
        "description": "Job name. Builds of the same job share counters.",
    }
    step_schema["properties"]["environment"] = {
        "type": "object",
        "description": "Build environment variables available to ${NAME} tokens.",
        "additionalProperties": {"type": "string"},
    }
    step_schema["properties"]["timestamp"] = {
        "type": "string",
        "description": "Build timestamp in ISO 8601 (default: now).",
    }
    step_schema["required"] = ["versionNumberString", "job"]

    return [
        Tool(
            name="ping",
            description="Health check - returns server status. Returns: {status: 'ok', service: 'versionnumber'}",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name=DESCRIPTOR.function_name,
            description=f"""{DESCRIPTOR.display_name}. Starts the next build of a job, formats the template against the job's history and records the result on the build.

TOKENS: BUILD_DATE_FORMATTED, BUILD_DAY, BUILD_WEEK, BUILD_MONTH, BUILD_YEAR, BUILDS_TODAY, BUILDS_THIS_WEEK, BUILDS_THIS_MONTH, BUILDS_THIS_YEAR, BUILDS_ALL_TIME (plus _Z zero-based variants), MONTHS_SINCE_PROJECT_START, YEARS_SINCE_PROJECT_START, or any environment variable.

Returns: {{success, job, build_number, timestamp, version_number, info}}. version_number is "" when formatting failed.""",
            inputSchema=step_schema,
        ),
        Tool(
            name="get_version_number",
            description="Return the version number recorded on a build (latest build by default). Returns: {success, job, build_number, version_number, info}",
            inputSchema={
                "type": "object",
                "properties": {
                    "job": {"type": "string", "description": "Job name"},
                    "build_number": {"type": "integer", "minimum": 1, "description": "Build number (default: latest)"},
                },
                "required": ["job"],
            },
        ),
    ]


@app.call_tool()
async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
    """Handle tool invocations."""
    logger.info("Tool called", tool=name, args=arguments)

    if name == "ping":
        return [_json_text({"status": "ok", "service": "versionnumber"})]

    try:
        if name == DESCRIPTOR.function_name:
            return await _handle_version_number(arguments)

        if name == "get_version_number":
            return await _handle_get_version_number(arguments)
    except VersionNumberError as e:
        return _exception_response(e)

    return _error_response("UNKNOWN_TOOL", f"Unknown tool: {name}", {"tool_name": name})


async def _handle_version_number(arguments: Dict[str, Any]) -> List[TextContent]:
    job = arguments.get("job")
    if not job:
        return _error_response("MISSING_ARGUMENT", "job is required", {"argument": "job"})

    step = DESCRIPTOR.create(arguments)

    timestamp = None
    raw_timestamp = arguments.get("timestamp")
    if raw_timestamp:
        try:
            timestamp = datetime.fromisoformat(raw_timestamp)
        except ValueError:
            raise ValidationError(
                "INVALID_TIMESTAMP",
                "timestamp must be an ISO 8601 date-time",
                {"provided": raw_timestamp},
            )

    env = {str(k): str(v) for k, v in (arguments.get("environment") or {}).items()}
    outcome = run_step(_store(), step, job, env, timestamp=timestamp, tz=Config.from_env().tz())
    return [_json_text(outcome.to_dict())]


async def _handle_get_version_number(arguments: Dict[str, Any]) -> List[TextContent]:
    job = arguments.get("job")
    if not job:
        return _error_response("MISSING_ARGUMENT", "job is required", {"argument": "job"})

    run = _store().get_run(job, arguments.get("build_number"))
    action = get_version_action(run)
    return [
        _json_text(
            {
                "success": True,
                "job": run.job,
                "build_number": run.number,
                "version_number": action.version_number if action else None,
                "info": action.info.to_dict() if action else None,
            }
        )
    ]


async def initialize_server() -> None:
    """Initialize server components."""
    logger.info("versionnumber MCP server initialized", data_dir=str(_store().data_dir))


# Streamable HTTP setup
session_manager_http = StreamableHTTPSessionManager(
    app=app,
    event_store=None,
    json_response=False,
    stateless=False,
)


async def handle_streamable_http(scope, receive, send) -> None:
    """Handle HTTP requests."""
    await session_manager_http.handle_request(scope, receive, send)


@contextlib.asynccontextmanager
async def lifespan(starlette_app) -> AsyncIterator[None]:
    """Manage server lifecycle."""
    logger.info("Starting versionnumber MCP server")
    await initialize_server()
    async with session_manager_http.run():
        yield


async def _ping(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok", "service": "versionnumber-mcp"})


starlette_app = Starlette(
    routes=[
        Route("/ping", endpoint=_ping, methods=["GET"]),
        Mount("/mcp", app=handle_streamable_http),
    ],
    lifespan=lifespan,
)


async def main(host: str = "0.0.0.0", port: int = 8040) -> None:
    """Run the server."""
    import uvicorn

    config = uvicorn.Config(starlette_app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)
    await server.serve()


if __name__ == "__main__":
    asyncio.run(main())
