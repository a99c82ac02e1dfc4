"""Input models for the transit tools."""

from pydantic import BaseModel, ConfigDict, Field

from .constants import DEFAULT_LIMIT, MAX_LIMIT
from .models import ResponseFormat


class ToolInput(BaseModel):
    """Base for tool arguments; unknown arguments are rejected."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    response_format: ResponseFormat = Field(
        ResponseFormat.MARKDOWN,
        description="출력 형식: 'markdown'은 사람이 읽기 좋은 형태, 'json'은 구조화된 데이터",
    )


class LimitedToolInput(ToolInput):
    limit: int = Field(
        DEFAULT_LIMIT,
        ge=1,
        le=MAX_LIMIT,
        strict=True,
        description=f"조회할 최대 결과 수 (1-{MAX_LIMIT}, 기본값: {DEFAULT_LIMIT})",
    )


class SubwayArrivalInput(LimitedToolInput):
    station_name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="지하철역 이름 (예: '강남', '홍대입구', '서울역'). '역' 접미사는 자동 제거됩니다.",
    )


class SubwayStatusInput(ToolInput):
    line: str | None = Field(
        None,
        pattern=r"^[1-9]$",
        description="호선 번호 (1-9). 생략시 전체 호선 조회",
    )


class BusArrivalInput(LimitedToolInput):
    ars_id: str = Field(
        ...,
        pattern=r"^\d{5}$",
        description="버스 정류장 ID (5자리 숫자, 예: '16165'). 정류장 ID를 모르면 transit_search_bus_station으로 검색하세요.",
    )


class BusStationSearchInput(LimitedToolInput):
    query: str = Field(
        ...,
        min_length=2,
        max_length=100,
        description="검색할 정류장 이름 또는 5자리 정류장 번호 (예: '강남역', '16165')",
    )


class BikeStationInput(LimitedToolInput):
    query: str = Field(
        ...,
        min_length=2,
        max_length=100,
        description="대여소 이름 또는 지역명 (예: '강남역', '여의도')",
    )


class CombinedTransitInput(ToolInput):
    location: str = Field(
        ...,
        min_length=2,
        max_length=100,
        description="위치명 (예: '강남역', '홍대입구'). 지하철, 버스 정류장, 따릉이 정보를 통합 조회합니다.",
    )
