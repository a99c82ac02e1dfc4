"""Shared constants: server identity, upstream URLs, limits and timeouts."""

SERVER_NAME = "korea-transit-mcp"
SERVER_VERSION = "1.0.0"
SERVER_DESCRIPTION = "서울시 대중교통 실시간 정보 MCP 서버"

DEFAULT_PROTOCOL_VERSION = "2024-11-05"

# Upstream base URLs
SEOUL_SUBWAY_URL = "http://swopenapi.seoul.go.kr/api/subway"
SEOUL_DATA_URL = "http://openapi.seoul.go.kr:8088"
BUS_API_URL = "http://ws.bus.go.kr/api/rest"

# Dataset names, also used as the envelope key unless noted
SUBWAY_ARRIVAL_DATASET = "realtimeStationArrival"
SUBWAY_ARRIVAL_ROWS_KEY = "realtimeArrivalList"
SUBWAY_ARRIVAL_ENVELOPE_KEY = "errorMessage"
SUBWAY_STATUS_DATASET = "subwayStatus"
BUS_STOP_DATASET = "busStopLocationXyInfo"
BIKE_DATASET = "bikeList"
BIKE_ENVELOPE_KEY = "rentBikeStatus"

# Upstream result codes
RESULT_SUCCESS = "INFO-000"
RESULT_NO_DATA = "INFO-200"
BUS_HEADER_SUCCESS = "0"
BUS_HEADER_NO_DATA = "4"

# Timeouts (seconds)
DEFAULT_TIMEOUT = 10.0
SUBWAY_TIMEOUT = 15.0

# Response limits
CHARACTER_LIMIT = 25000
TRUNCATION_MARGIN = 100

# Pagination
DEFAULT_LIMIT = 10
MAX_LIMIT = 20
PAGE_SIZE = 1000
BUS_STOP_MAX_PAGES = 12
BIKE_MAX_PAGES = 3

# Combined lookup slices
COMBINED_SUBWAY_FETCH = 10
COMBINED_SUBWAY_LIMIT = 5
COMBINED_BUS_LIMIT = 3
COMBINED_BIKE_FETCH = 5
COMBINED_BIKE_LIMIT = 3

# HTTP transport
SESSION_HEADERS = ("mcp-session-id", "x-session-id")
DEFAULT_SESSION_ID = "default"
DEFAULT_SESSION_TTL = 1800
DEFAULT_MAX_SESSIONS = 1000
