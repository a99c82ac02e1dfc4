"""Test configuration and fixtures."""

from collections.abc import Callable
from typing import Any

import pytest

from korea_transit.core.config import Settings
from korea_transit.core.transit import TransitService
from korea_transit.mcp.server import TransitMCPServer


class FakeClient:
    """Serves canned payloads in place of OpenDataClient and records each URL."""

    def __init__(self, responder: Callable[[str], Any] | None = None):
        self.responder = responder or (lambda url: {})
        self.urls: list[str] = []
        self.timeouts: list[float | None] = []
        self.closed = False

    async def fetch_json(self, url: str, timeout: float | None = None) -> Any:
        self.urls.append(url)
        self.timeouts.append(timeout)
        result = self.responder(url)
        if isinstance(result, BaseException):
            raise result
        return result

    def close(self) -> None:
        self.closed = True


def seoul_page(
    key: str,
    rows: list[dict],
    total: int | None = None,
    code: str = "INFO-000",
    message: str = "정상 처리되었습니다",
) -> dict:
    """Build a Seoul open-data envelope around `rows`."""
    return {
        key: {
            "list_total_count": len(rows) if total is None else total,
            "RESULT": {"CODE": code, "MESSAGE": message},
            "row": rows,
        }
    }


def subway_payload(rows: list[dict], code: str = "INFO-000") -> dict:
    """Build a realtime subway arrival payload."""
    return {
        "errorMessage": {
            "status": 200,
            "code": code,
            "message": "정상 처리되었습니다.",
            "total": len(rows),
        },
        "realtimeArrivalList": rows,
    }


@pytest.fixture
def make_page():
    return seoul_page


@pytest.fixture
def make_subway_payload():
    return subway_payload


@pytest.fixture
def settings():
    """Settings with both API keys and no .env lookup."""
    return Settings(
        seoul_api_key="TESTKEY",
        data_go_kr_api_key="BUSKEY",
        _env_file=None,
    )


@pytest.fixture
def settings_without_bus_key():
    return Settings(seoul_api_key="TESTKEY", data_go_kr_api_key="", _env_file=None)


@pytest.fixture
def make_client():
    """Factory for FakeClient instances with a custom responder."""
    return FakeClient


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def service(settings, fake_client):
    return TransitService(settings, client=fake_client)


@pytest.fixture
def mcp_server(settings, service):
    return TransitMCPServer(settings=settings, service=service)


@pytest.fixture
def subway_rows():
    """Realtime arrivals at 강남."""
    return [
        {
            "subwayId": "1002",
            "updnLine": "내선",
            "trainLineNm": "성수행 - 역삼방면",
            "statnNm": "강남",
            "bstatnNm": "성수",
            "btrainNo": "2234",
            "arvlMsg2": "전역 출발",
            "arvlMsg3": "교대",
            "arvlCd": "3",
        },
        {
            "subwayId": "1077",
            "updnLine": "하행",
            "statnNm": "강남",
            "bstatnNm": "광교",
            "btrainNo": "5123",
            "arvlMsg2": "3분 후 (양재)",
            "arvlMsg3": "신사",
        },
    ]


@pytest.fixture
def bus_stop_rows():
    return [
        {
            "STOPS_NO": "22009",
            "STOPS_NM": "강남역",
            "XCRD": "127.027",
            "YCRD": "37.497",
            "NODE_ID": "121000009",
            "STOPS_TYPE": "중앙차로",
        },
        {
            "STOPS_NO": "16165",
            "STOPS_NM": "신도림역",
            "XCRD": "126.891",
            "YCRD": "37.508",
            "NODE_ID": "117000165",
            "STOPS_TYPE": "가로변시간",
        },
        {
            "STOPS_NO": "22010",
            "STOPS_NM": "강남역.강남역사거리",
            "XCRD": "127.028",
            "YCRD": "37.498",
            "NODE_ID": "121000010",
            "STOPS_TYPE": "일반",
        },
    ]


@pytest.fixture
def bike_rows():
    return [
        {
            "rackTotCnt": "10",
            "stationName": "2219. 고속터미널역 8-1번, 8-2번 출구 사이",
            "parkingBikeTotCnt": "6",
            "shared": "60",
            "stationLatitude": "37.5",
            "stationLongitude": "127.0",
            "stationId": "ST-1",
        },
        {
            "rackTotCnt": "20",
            "stationName": "2301. 강남역 10번출구",
            "parkingBikeTotCnt": "2",
            "shared": "10",
            "stationId": "ST-2",
        },
        {
            "rackTotCnt": "15",
            "stationName": "207. 여의나루역 1번출구 앞",
            "parkingBikeTotCnt": "15",
            "shared": "100",
            "stationId": "ST-3",
        },
        {
            "rackTotCnt": "12",
            "stationName": "1152. DMC역 2번출구",
            "parkingBikeTotCnt": "4",
            "shared": "33",
            "stationId": "ST-4",
        },
    ]


@pytest.fixture
def bus_arrival_payload():
    return {
        "msgHeader": {
            "headerCd": "0",
            "headerMsg": "정상적으로 처리되었습니다.",
            "itemCount": 2,
        },
        "msgBody": {
            "itemList": [
                {
                    "rtNm": "600",
                    "stNm": "신도림역",
                    "arrmsg1": "3분12초후[1번째 전]",
                    "arrmsg2": "11분5초후[5번째 전]",
                    "routeType": "3",
                    "adirection": "온수동",
                    "nxtStn": "대림역",
                },
                {
                    "rtNm": "5615",
                    "stNm": "신도림역",
                    "arrmsg1": "곧 도착",
                    "arrmsg2": "출발대기",
                    "routeType": "4",
                    "adirection": "신림동",
                },
            ]
        },
    }
