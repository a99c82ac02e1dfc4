"""JSON-RPC 2.0 dispatch of MCP messages for the HTTP transport."""

import asyncio
import logging
from typing import Any

from ..core.constants import DEFAULT_PROTOCOL_VERSION, SERVER_NAME, SERVER_VERSION
from .server import TransitMCPServer

logger = logging.getLogger(__name__)

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class JsonRpcError(Exception):
    """An error that maps onto a JSON-RPC error object."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def error_response(msg_id: Any, code: int, message: str) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": msg_id,
        "error": {"code": code, "message": message},
    }


def result_response(msg_id: Any, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": msg_id, "result": result}


class JsonRpcDispatcher:
    """Routes JSON-RPC messages to the tool server.

    Supported methods: `initialize`, `notifications/initialized`,
    `tools/list`, `tools/call` and `ping`. Messages without an `id` are
    notifications and produce no response.
    """

    def __init__(self, tool_server: TransitMCPServer) -> None:
        self.tool_server = tool_server

    async def dispatch(self, message: Any) -> dict[str, Any] | list | None:
        """Handle a single message or a batch.

        Returns:
            The response object, a list of them for a batch, or None when
            nothing needs to be sent back
        """
        if isinstance(message, list):
            if not message:
                return error_response(None, INVALID_REQUEST, "Invalid Request")
            replies = await asyncio.gather(*(self._dispatch_one(m) for m in message))
            return [reply for reply in replies if reply is not None] or None
        return await self._dispatch_one(message)

    async def _dispatch_one(self, message: Any) -> dict[str, Any] | None:
        if not isinstance(message, dict):
            return error_response(None, INVALID_REQUEST, "Invalid Request")

        msg_id = message.get("id")
        is_notification = "id" not in message

        method = message.get("method")
        if message.get("jsonrpc") != "2.0" or not isinstance(method, str):
            return error_response(msg_id, INVALID_REQUEST, "Invalid Request")

        params = message.get("params") or {}
        try:
            if not isinstance(params, dict):
                raise JsonRpcError(INVALID_PARAMS, "params must be an object")
            result = await self._call(method, params)
        except JsonRpcError as e:
            if is_notification:
                logger.debug(f"Ignoring failed notification {method}: {e.message}")
                return None
            return error_response(msg_id, e.code, e.message)
        except Exception as e:
            logger.exception(f"Unhandled error in {method}")
            if is_notification:
                return None
            return error_response(msg_id, INTERNAL_ERROR, f"Internal error: {e}")

        if is_notification:
            return None
        return result_response(msg_id, result)

    async def _call(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        if method == "initialize":
            return self._initialize(params)
        if method == "notifications/initialized":
            return {}
        if method == "ping":
            return {}
        if method == "tools/list":
            return {
                "tools": [
                    tool.model_dump(mode="json", exclude_none=True)
                    for tool in self.tool_server.list_tools()
                ]
            }
        if method == "tools/call":
            return await self._call_tool(params)
        raise JsonRpcError(METHOD_NOT_FOUND, f"Method not found: {method}")

    def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        client = params.get("clientInfo") or {}
        logger.info(
            f"Client initialized: {client.get('name', 'unknown')} "
            f"{client.get('version', '')}".rstrip()
        )
        return {
            "protocolVersion": params.get("protocolVersion", DEFAULT_PROTOCOL_VERSION),
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
        }

    async def _call_tool(self, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise JsonRpcError(INVALID_PARAMS, "Missing tool name")
        if not self.tool_server.has_tool(name):
            raise JsonRpcError(INVALID_PARAMS, f"Unknown tool: {name}")

        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            raise JsonRpcError(INVALID_PARAMS, "arguments must be an object")

        output = await self.tool_server.call_tool(name, arguments)
        return {
            "content": [{"type": "text", "text": output.text}],
            "isError": output.is_error,
        }
