"""HTTP transport: JSON-RPC over POST /mcp, served with Starlette and uvicorn."""

import contextlib
import json
import logging
from typing import Any

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from ..core.constants import (
    DEFAULT_PROTOCOL_VERSION,
    DEFAULT_SESSION_ID,
    SERVER_DESCRIPTION,
    SERVER_NAME,
    SERVER_VERSION,
    SESSION_HEADERS,
)
from .jsonrpc import INTERNAL_ERROR, PARSE_ERROR, JsonRpcDispatcher, error_response
from .server import TransitMCPServer
from .sessions import SessionStore

logger = logging.getLogger(__name__)

SESSION_RESPONSE_HEADER = "mcp-session-id"


def _session_id(request: Request) -> str | None:
    for header in SESSION_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return None


class AllowAnyOriginMiddleware(BaseHTTPMiddleware):
    """Mark every response as readable from any origin, Origin header or not."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("access-control-allow-origin", "*")
        return response


def _status_for(reply: dict[str, Any] | list) -> int:
    if isinstance(reply, dict) and "error" in reply:
        return 500 if reply["error"]["code"] == INTERNAL_ERROR else 400
    return 200


def create_app(
    tool_server: TransitMCPServer, sessions: SessionStore | None = None
) -> Starlette:
    """Build the ASGI app around a tool server.

    Args:
        tool_server: Registry that executes the tools
        sessions: Session store; one sized from the server's settings is
            created when omitted
    """
    settings = tool_server.settings
    if sessions is None:
        sessions = SessionStore(
            ttl_seconds=settings.session_ttl_seconds,
            max_sessions=settings.max_sessions,
        )
    dispatcher = JsonRpcDispatcher(tool_server)

    async def handle_mcp_request(request: Request) -> Response:
        try:
            message = json.loads(await request.body())
        except (ValueError, UnicodeDecodeError):
            logger.info("Rejected request with unparsable JSON body")
            return JSONResponse(
                error_response(None, PARSE_ERROR, "Parse error"), status_code=400
            )

        is_initialize = (
            isinstance(message, dict) and message.get("method") == "initialize"
        )
        session_id = _session_id(request)
        if session_id is None:
            session_id = sessions.new_id() if is_initialize else DEFAULT_SESSION_ID

        session = sessions.touch(session_id)
        if is_initialize:
            params = message.get("params") or {}
            if isinstance(params, dict):
                session.protocol_version = params.get(
                    "protocolVersion", DEFAULT_PROTOCOL_VERSION
                )

        reply = await dispatcher.dispatch(message)
        headers = {SESSION_RESPONSE_HEADER: session.session_id}
        if reply is None:
            return Response(status_code=202, headers=headers)
        return JSONResponse(reply, status_code=_status_for(reply), headers=headers)

    async def handle_health(request: Request) -> JSONResponse:
        return JSONResponse(
            {
                "status": "ok",
                "name": SERVER_NAME,
                "version": SERVER_VERSION,
                "tools": tool_server.tool_names,
            }
        )

    async def handle_root(request: Request) -> JSONResponse:
        return JSONResponse(
            {
                "name": SERVER_NAME,
                "version": SERVER_VERSION,
                "description": SERVER_DESCRIPTION,
                "endpoints": {
                    "mcp": "/mcp",
                    "health": "/health",
                },
            }
        )

    async def handle_delete(request: Request) -> JSONResponse:
        sessions.remove(_session_id(request) or DEFAULT_SESSION_ID)
        return JSONResponse({"success": True})

    async def handle_options(request: Request) -> Response:
        return Response(status_code=200)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        logger.info(f"{SERVER_NAME} v{SERVER_VERSION} HTTP transport ready")
        try:
            yield
        finally:
            tool_server.service.close()

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", *SESSION_HEADERS, "Accept"],
            expose_headers=[SESSION_RESPONSE_HEADER],
        ),
        Middleware(AllowAnyOriginMiddleware),
    ]
    routes = [
        Route("/mcp", endpoint=handle_mcp_request, methods=["POST"]),
        Route("/mcp", endpoint=handle_health, methods=["GET"]),
        Route("/mcp", endpoint=handle_delete, methods=["DELETE"]),
        Route("/health", endpoint=handle_health, methods=["GET"]),
        Route("/", endpoint=handle_root, methods=["GET"]),
        Route("/{path:path}", endpoint=handle_options, methods=["OPTIONS"]),
    ]

    app = Starlette(
        debug=not settings.is_production,
        routes=routes,
        middleware=middleware,
        lifespan=lifespan,
    )
    app.state.sessions = sessions
    return app


def run_http(
    tool_server: TransitMCPServer, host: str | None = None, port: int | None = None
) -> None:
    """Serve the HTTP transport until interrupted."""
    settings = tool_server.settings
    host = host or settings.host
    port = port or settings.port
    logger.info(f"Starting {SERVER_NAME} on http://{host}:{port}/mcp")
    uvicorn.run(
        create_app(tool_server),
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )
