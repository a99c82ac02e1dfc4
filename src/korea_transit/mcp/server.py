"""MCP Server for Seoul transit lookups.

This module implements the tool registry shared by the stdio and HTTP
transports, and the stdio entry point built on the MCP library.
"""

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.types import TextContent, Tool
from pydantic import ValidationError as PydanticValidationError

from ..core.config import Settings, load_settings
from ..core.constants import DEFAULT_LIMIT, MAX_LIMIT, SERVER_NAME, SERVER_VERSION
from ..core.exceptions import ConfigurationError, ToolExecutionError, TransitError
from ..core.formatters import (
    format_bike_stations,
    format_bus_arrivals,
    format_bus_stops,
    format_combined_transit,
    format_error_message,
    format_subway_arrivals,
    format_subway_status,
    truncate_response,
)
from ..core.models import ToolOutput
from ..core.schemas import (
    BikeStationInput,
    BusArrivalInput,
    BusStationSearchInput,
    CombinedTransitInput,
    SubwayArrivalInput,
    SubwayStatusInput,
    ToolInput,
)
from ..core.transit import TransitService
from ..utils.korean_text import normalize_station_name

logger = logging.getLogger(__name__)

_RESPONSE_FORMAT_PROPERTY = {
    "type": "string",
    "enum": ["markdown", "json"],
    "default": "markdown",
    "description": "출력 형식: 'markdown'은 사람이 읽기 좋은 형태, 'json'은 구조화된 데이터",
}

_LIMIT_PROPERTY = {
    "type": "integer",
    "minimum": 1,
    "maximum": MAX_LIMIT,
    "default": DEFAULT_LIMIT,
    "description": f"조회할 최대 결과 수 (1-{MAX_LIMIT}, 기본값: {DEFAULT_LIMIT})",
}


@dataclass(frozen=True)
class ToolBinding:
    """Links a tool name to its input model, handler and failure wording."""

    input_model: type[ToolInput]
    handler: Callable[[Any], Awaitable[str]]
    failure: str
    hint: str | None = None


class TransitMCPServer:
    """MCP Server for Seoul transit functionality."""

    def __init__(
        self, settings: Settings | None = None, service: TransitService | None = None
    ) -> None:
        """Initialize the Transit MCP Server.

        Raises:
            ConfigurationError: If settings are not given and cannot be loaded
        """
        self.settings = settings or load_settings()
        self.service = service or TransitService(self.settings)
        self.server = Server(SERVER_NAME)

        self._bindings: dict[str, ToolBinding] = {
            "transit_get_subway_arrival": ToolBinding(
                SubwayArrivalInput, self._get_subway_arrival, "지하철 정보 조회 실패"
            ),
            "transit_get_subway_status": ToolBinding(
                SubwayStatusInput, self._get_subway_status, "운행상태 조회 실패"
            ),
            "transit_get_bus_arrival": ToolBinding(
                BusArrivalInput,
                self._get_bus_arrival,
                "버스 정보 조회 실패",
                hint="정류장 번호를 모르면 transit_search_bus_station으로 먼저 검색하세요.",
            ),
            "transit_search_bus_station": ToolBinding(
                BusStationSearchInput, self._search_bus_station, "정류장 검색 실패"
            ),
            "transit_get_bike_station": ToolBinding(
                BikeStationInput, self._get_bike_station, "따릉이 대여소 검색 실패"
            ),
            "transit_get_combined_info": ToolBinding(
                CombinedTransitInput, self._get_combined_info, "통합 교통정보 조회 실패"
            ),
        }

        # Register handlers
        self._register_handlers()

    @property
    def tool_names(self) -> list[str]:
        return list(self._bindings)

    def has_tool(self, name: str) -> bool:
        return name in self._bindings

    def list_tools(self) -> list[Tool]:
        """The static tool catalog."""
        return [
            Tool(
                name="transit_get_subway_arrival",
                description="서울 지하철역의 실시간 도착정보를 조회합니다. 역 이름으로 검색하여 각 호선별 도착 예정 열차 정보를 반환합니다.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "station_name": {
                            "type": "string",
                            "minLength": 1,
                            "maxLength": 50,
                            "description": "지하철역 이름 (예: '강남', '홍대입구', '서울역'). '역' 접미사는 자동 제거됩니다.",
                        },
                        "limit": _LIMIT_PROPERTY,
                        "response_format": _RESPONSE_FORMAT_PROPERTY,
                    },
                    "required": ["station_name"],
                },
            ),
            Tool(
                name="transit_get_subway_status",
                description="서울 지하철 호선별 운행상태를 조회합니다. 지연, 사고, 정상운행 등의 상태를 확인할 수 있습니다.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "line": {
                            "type": "string",
                            "pattern": "^[1-9]$",
                            "description": "호선 번호 (1-9). 생략시 전체 호선 조회",
                        },
                        "response_format": _RESPONSE_FORMAT_PROPERTY,
                    },
                },
            ),
            Tool(
                name="transit_get_bus_arrival",
                description="서울 버스 정류장의 실시간 도착정보를 조회합니다. 5자리 정류장 ID(arsId)가 필요하며, 정류장을 모르면 transit_search_bus_station으로 먼저 검색하세요.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "ars_id": {
                            "type": "string",
                            "pattern": "^\\d{5}$",
                            "description": "버스 정류장 ID (5자리 숫자, 예: '16165')",
                        },
                        "limit": _LIMIT_PROPERTY,
                        "response_format": _RESPONSE_FORMAT_PROPERTY,
                    },
                    "required": ["ars_id"],
                },
            ),
            Tool(
                name="transit_search_bus_station",
                description="버스 정류장을 이름 또는 번호로 검색합니다. 검색 결과에서 정류장 ID(arsId)를 확인하여 도착정보 조회에 사용할 수 있습니다.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "minLength": 2,
                            "maxLength": 100,
                            "description": "검색할 정류장 이름 또는 5자리 정류장 번호 (예: '강남역', '16165')",
                        },
                        "limit": _LIMIT_PROPERTY,
                        "response_format": _RESPONSE_FORMAT_PROPERTY,
                    },
                    "required": ["query"],
                },
            ),
            Tool(
                name="transit_get_bike_station",
                description="서울 따릉이(공공자전거) 대여소를 검색하고 실시간 자전거 이용가능 현황을 조회합니다.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "minLength": 2,
                            "maxLength": 100,
                            "description": "대여소 이름 또는 지역명 (예: '강남역', '여의도')",
                        },
                        "limit": _LIMIT_PROPERTY,
                        "response_format": _RESPONSE_FORMAT_PROPERTY,
                    },
                    "required": ["query"],
                },
            ),
            Tool(
                name="transit_get_combined_info",
                description="특정 위치 주변의 지하철, 버스, 따릉이 정보를 통합 조회합니다. 위치명을 입력하면 주변의 모든 대중교통 정보를 한번에 확인할 수 있습니다.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "location": {
                            "type": "string",
                            "minLength": 2,
                            "maxLength": 100,
                            "description": "위치명 (예: '강남역', '홍대입구')",
                        },
                        "response_format": _RESPONSE_FORMAT_PROPERTY,
                    },
                    "required": ["location"],
                },
            ),
        ]

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> ToolOutput:
        """Validate arguments, run a tool and render its output.

        Validation failures and transit errors become error outputs. Any
        other exception propagates to the transport.
        """
        binding = self._bindings.get(name)
        if binding is None:
            return ToolOutput(text=f"❌ 알 수 없는 도구: {name}", is_error=True)

        try:
            params = binding.input_model.model_validate(arguments or {})
        except PydanticValidationError as e:
            logger.info(f"Rejected arguments for {name}: {e.error_count()} error(s)")
            return self._failure(binding, f"입력값 오류 - {_describe_validation(e)}")

        try:
            text = await binding.handler(params)
        except TransitError as e:
            logger.error(f"Error in tool {name}: {e}")
            return self._failure(binding, format_error_message(e))

        return ToolOutput(text=truncate_response(text))

    def _failure(self, binding: ToolBinding, message: str) -> ToolOutput:
        text = f"❌ {binding.failure}: {message}"
        if binding.hint:
            text += f"\n\n💡 {binding.hint}"
        return ToolOutput(text=truncate_response(text), is_error=True)

    def _register_handlers(self) -> None:
        """Register MCP protocol handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> list[Tool]:
            """List available tools."""
            return self.list_tools()

        @self.server.call_tool(validate_input=False)
        async def handle_call_tool(
            name: str, arguments: dict[str, Any]
        ) -> list[TextContent]:
            """Handle tool calls."""
            output = await self.call_tool(name, arguments)
            if output.is_error:
                # The library reports raised errors as isError results.
                raise ToolExecutionError(output.text)
            return [TextContent(type="text", text=output.text)]

    async def _get_subway_arrival(self, params: SubwayArrivalInput) -> str:
        station = normalize_station_name(params.station_name)
        result = await self.service.get_subway_arrivals(station, limit=params.limit)
        return format_subway_arrivals(result.items, station, params.response_format)

    async def _get_subway_status(self, params: SubwayStatusInput) -> str:
        statuses = await self.service.get_subway_status(params.line)
        return format_subway_status(statuses, params.line, params.response_format)

    async def _get_bus_arrival(self, params: BusArrivalInput) -> str:
        result = await self.service.get_bus_arrivals(params.ars_id, limit=params.limit)
        return format_bus_arrivals(result.items, params.ars_id, params.response_format)

    async def _search_bus_station(self, params: BusStationSearchInput) -> str:
        result = await self.service.search_bus_stops(params.query, limit=params.limit)
        return format_bus_stops(result.items, params.query, params.response_format)

    async def _get_bike_station(self, params: BikeStationInput) -> str:
        result = await self.service.search_bike_stations(
            params.query, limit=params.limit
        )
        return format_bike_stations(result.items, params.query, params.response_format)

    async def _get_combined_info(self, params: CombinedTransitInput) -> str:
        combined = await self.service.get_combined_info(params.location)
        return format_combined_transit(combined, params.response_format)


def _describe_validation(error: PydanticValidationError) -> str:
    parts = []
    for err in error.errors():
        field = ".".join(str(loc) for loc in err["loc"]) or "arguments"
        parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)


async def run_stdio(server_instance: TransitMCPServer) -> None:
    """Serve the tools over stdin/stdout until the client disconnects."""
    from mcp.server.stdio import stdio_server

    async with stdio_server() as (read_stream, write_stream):
        logger.info("MCP Server running with stdio transport")
        await server_instance.server.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name=SERVER_NAME,
                server_version=SERVER_VERSION,
                capabilities=server_instance.server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )


async def main() -> None:
    """Main entry point for the MCP server."""
    # Configure logging
    logging.basicConfig(level=logging.INFO)
    logger.info(f"Starting {SERVER_NAME} v{SERVER_VERSION} (stdio)")

    try:
        server_instance = TransitMCPServer()
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    logging.getLogger().setLevel(server_instance.settings.log_level.upper())
    try:
        await run_stdio(server_instance)
    finally:
        server_instance.service.close()


def main_sync() -> None:
    """Synchronous wrapper for the async main function - used as entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    main_sync()
