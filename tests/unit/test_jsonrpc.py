"""Unit tests for JSON-RPC dispatch."""

from unittest.mock import AsyncMock, patch

import pytest

from korea_transit.core.models import ToolOutput
from korea_transit.mcp.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    JsonRpcDispatcher,
)


@pytest.fixture
def dispatcher(mcp_server):
    return JsonRpcDispatcher(mcp_server)


class TestJsonRpcDispatcher:
    """Test JSON-RPC method routing."""

    @pytest.mark.asyncio
    async def test_initialize(self, dispatcher):
        reply = await dispatcher.dispatch(
            {
                "jsonrpc": "2.0",
                "id": 1,
                "method": "initialize",
                "params": {
                    "protocolVersion": "2025-03-26",
                    "clientInfo": {"name": "test-client", "version": "0.1"},
                },
            }
        )

        assert reply["id"] == 1
        assert reply["result"] == {
            "protocolVersion": "2025-03-26",
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": "korea-transit-mcp", "version": "1.0.0"},
        }

    @pytest.mark.asyncio
    async def test_initialize_default_protocol(self, dispatcher):
        reply = await dispatcher.dispatch(
            {"jsonrpc": "2.0", "id": 1, "method": "initialize"}
        )
        assert reply["result"]["protocolVersion"] == "2024-11-05"

    @pytest.mark.asyncio
    async def test_initialized_notification_has_no_reply(self, dispatcher):
        reply = await dispatcher.dispatch(
            {"jsonrpc": "2.0", "method": "notifications/initialized"}
        )
        assert reply is None

    @pytest.mark.asyncio
    async def test_ping(self, dispatcher):
        reply = await dispatcher.dispatch({"jsonrpc": "2.0", "id": "p", "method": "ping"})
        assert reply == {"jsonrpc": "2.0", "id": "p", "result": {}}

    @pytest.mark.asyncio
    async def test_tools_list(self, dispatcher):
        reply = await dispatcher.dispatch(
            {"jsonrpc": "2.0", "id": 2, "method": "tools/list"}
        )

        tools = reply["result"]["tools"]
        assert len(tools) == 6
        assert tools[0]["name"] == "transit_get_subway_arrival"
        assert "inputSchema" in tools[0]

    @pytest.mark.asyncio
    async def test_tools_call(self, dispatcher, mcp_server):
        with patch.object(
            mcp_server, "call_tool", AsyncMock(return_value=ToolOutput(text="결과"))
        ) as call_tool:
            reply = await dispatcher.dispatch(
                {
                    "jsonrpc": "2.0",
                    "id": 3,
                    "method": "tools/call",
                    "params": {
                        "name": "transit_get_bike_station",
                        "arguments": {"query": "여의도"},
                    },
                }
            )

        call_tool.assert_awaited_once_with(
            "transit_get_bike_station", {"query": "여의도"}
        )
        assert reply["result"] == {
            "content": [{"type": "text", "text": "결과"}],
            "isError": False,
        }

    @pytest.mark.asyncio
    async def test_tool_error_is_result(self, dispatcher, fake_client):
        reply = await dispatcher.dispatch(
            {
                "jsonrpc": "2.0",
                "id": 4,
                "method": "tools/call",
                "params": {
                    "name": "transit_get_subway_arrival",
                    "arguments": {"station_name": "강남", "limit": 0},
                },
            }
        )

        assert reply["result"]["isError"] is True
        assert reply["result"]["content"][0]["text"].startswith("❌")
        assert fake_client.urls == []


class TestJsonRpcErrors:
    """Test JSON-RPC error codes."""

    @pytest.mark.asyncio
    async def test_wrong_version(self, dispatcher):
        reply = await dispatcher.dispatch({"jsonrpc": "1.0", "id": 1, "method": "ping"})
        assert reply["error"]["code"] == INVALID_REQUEST

    @pytest.mark.asyncio
    async def test_not_an_object(self, dispatcher):
        reply = await dispatcher.dispatch("ping")
        assert reply["error"]["code"] == INVALID_REQUEST
        assert reply["id"] is None

    @pytest.mark.asyncio
    async def test_unknown_method(self, dispatcher):
        reply = await dispatcher.dispatch(
            {"jsonrpc": "2.0", "id": 1, "method": "resources/list"}
        )
        assert reply["error"]["code"] == METHOD_NOT_FOUND

    @pytest.mark.asyncio
    async def test_unknown_tool(self, dispatcher):
        reply = await dispatcher.dispatch(
            {
                "jsonrpc": "2.0",
                "id": 1,
                "method": "tools/call",
                "params": {"name": "transit_teleport"},
            }
        )
        assert reply["error"]["code"] == INVALID_PARAMS
        assert "transit_teleport" in reply["error"]["message"]

    @pytest.mark.asyncio
    async def test_missing_tool_name(self, dispatcher):
        reply = await dispatcher.dispatch(
            {"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {}}
        )
        assert reply["error"]["code"] == INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_arguments_not_object(self, dispatcher):
        reply = await dispatcher.dispatch(
            {
                "jsonrpc": "2.0",
                "id": 1,
                "method": "tools/call",
                "params": {"name": "transit_get_bike_station", "arguments": ["강남"]},
            }
        )
        assert reply["error"]["code"] == INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_internal_error(self, dispatcher, mcp_server):
        with patch.object(
            mcp_server, "call_tool", AsyncMock(side_effect=RuntimeError("boom"))
        ):
            reply = await dispatcher.dispatch(
                {
                    "jsonrpc": "2.0",
                    "id": 9,
                    "method": "tools/call",
                    "params": {"name": "transit_get_bike_station", "arguments": {}},
                }
            )

        assert reply["id"] == 9
        assert reply["error"]["code"] == INTERNAL_ERROR
        assert "boom" in reply["error"]["message"]

    @pytest.mark.asyncio
    async def test_unknown_notification_ignored(self, dispatcher):
        assert await dispatcher.dispatch(
            {"jsonrpc": "2.0", "method": "notifications/cancelled"}
        ) is None


class TestBatch:
    @pytest.mark.asyncio
    async def test_batch_replies_skip_notifications(self, dispatcher):
        replies = await dispatcher.dispatch(
            [
                {"jsonrpc": "2.0", "id": 1, "method": "ping"},
                {"jsonrpc": "2.0", "method": "notifications/initialized"},
                {"jsonrpc": "2.0", "id": 2, "method": "ping"},
            ]
        )
        assert [reply["id"] for reply in replies] == [1, 2]

    @pytest.mark.asyncio
    async def test_empty_batch(self, dispatcher):
        reply = await dispatcher.dispatch([])
        assert reply["error"]["code"] == INVALID_REQUEST
