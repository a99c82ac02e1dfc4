"""Data models for Seoul transit lookups."""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .constants import PAGE_SIZE


class ResponseFormat(str, Enum):
    """Output format selected by the caller."""

    MARKDOWN = "markdown"
    JSON = "json"


class SubwayLine(Enum):
    """Seoul subway lines keyed by the arrival API's `subwayId` code."""

    LINE_1 = ("1001", "1호선")
    LINE_2 = ("1002", "2호선")
    LINE_3 = ("1003", "3호선")
    LINE_4 = ("1004", "4호선")
    LINE_5 = ("1005", "5호선")
    LINE_6 = ("1006", "6호선")
    LINE_7 = ("1007", "7호선")
    LINE_8 = ("1008", "8호선")
    LINE_9 = ("1009", "9호선")
    GYEONGUI_JUNGANG = ("1063", "경의중앙선")
    AIRPORT_RAILROAD = ("1065", "공항철도")
    GYEONGCHUN = ("1067", "경춘선")
    SUIN_BUNDANG = ("1069", "수인분당선")
    SILLIM = ("1071", "신림선")
    SHINBUNDANG = ("1077", "신분당선")
    UI_SINSEOL = ("1092", "우이신설선")

    def __init__(self, code: str, label: str) -> None:
        self.code = code
        self.label = label

    @classmethod
    def from_code(cls, code: str) -> "SubwayLine | None":
        for line in cls:
            if line.code == code:
                return line
        return None

    @classmethod
    def label_for(cls, code: str) -> str:
        """Human-readable line name; unknown codes pass through unchanged."""
        line = cls.from_code(code)
        return line.label if line else code


class BusRouteType(Enum):
    """Bus route categories keyed by the arrival API's `routeType` code."""

    COMMON = ("1", "일반")
    SEAT = ("2", "좌석")
    VILLAGE = ("3", "마을")
    WIDE_AREA = ("4", "광역")
    AIRPORT = ("5", "공항")
    TRUNK = ("6", "간선")
    BRANCH = ("7", "지선")

    def __init__(self, code: str, label: str) -> None:
        self.code = code
        self.label = label

    @classmethod
    def label_for(cls, code: str | None) -> str:
        """Route type name, or "기타" for codes outside the known set."""
        for route_type in cls:
            if route_type.code == code:
                return route_type.label
        return "기타"


# Upstream rows

class UpstreamRow(BaseModel):
    """Base for rows parsed from upstream payloads.

    Field names follow Python conventions; aliases carry the upstream names.
    Fields the upstream adds are dropped.
    """

    model_config = ConfigDict(
        extra="ignore", populate_by_name=True, coerce_numbers_to_str=True
    )


class SubwayArrival(UpstreamRow):
    """A train arriving at a subway station."""

    subway_id: str = Field("", alias="subwayId", description="Line code, e.g. 1002")
    direction: str = Field("", alias="updnLine", description="상행/하행/외선/내선")
    destination: str = Field("", alias="bstatnNm", description="Terminal station")
    arrival_message: str = Field("", alias="arvlMsg2", description="Arrival estimate")
    location_message: str = Field("", alias="arvlMsg3", description="Current location")
    train_number: str = Field("", alias="btrainNo", description="Train number")
    station_name: str | None = Field(None, alias="statnNm")

    @property
    def line_name(self) -> str:
        return SubwayLine.label_for(self.subway_id)

    @property
    def is_upbound(self) -> bool:
        return self.direction in ("상행", "내선")


class SubwayStatus(UpstreamRow):
    """Operating status of one subway line."""

    line: str = Field("", alias="subwayLine", description="Line name, e.g. 2호선")
    message: str = Field("", alias="subwayStatusMessage")

    @property
    def is_normal(self) -> bool:
        return "정상" in self.message


class BusArrival(UpstreamRow):
    """A bus route serving a stop, with its next two arrivals."""

    route_name: str = Field("", alias="rtNm", description="Route number")
    first_arrival: str = Field("", alias="arrmsg1")
    second_arrival: str = Field("", alias="arrmsg2")
    next_station: str | None = Field(None, alias="nxtStn")
    route_type: str | None = Field(None, alias="routeType")
    station_name: str | None = Field(None, alias="stNm")
    terminal: str | None = Field(None, alias="adirection")

    @property
    def route_type_name(self) -> str:
        return BusRouteType.label_for(self.route_type)


class BusStop(UpstreamRow):
    """A bus stop from the stop-location dataset."""

    name: str = Field("", alias="STOPS_NM", description="Stop name")
    ars_id: str = Field("", alias="STOPS_NO", description="5-digit stop number")
    stop_type: str | None = Field(None, alias="STOPS_TYPE")
    x: str | None = Field(None, alias="XCRD", description="Longitude")
    y: str | None = Field(None, alias="YCRD", description="Latitude")
    node_id: str | None = Field(None, alias="NODE_ID")


class BikeStation(UpstreamRow):
    """A bike-share rental station with live availability."""

    name: str = Field("", alias="stationName")
    station_id: str = Field("", alias="stationId")
    available_bikes: int = Field(0, alias="parkingBikeTotCnt")
    rack_total: int = Field(0, alias="rackTotCnt")
    shared: int | None = Field(None, alias="shared")
    latitude: str | None = Field(None, alias="stationLatitude")
    longitude: str | None = Field(None, alias="stationLongitude")

    @property
    def availability_rate(self) -> int:
        """Available bikes as a rounded percentage of racks."""
        if self.rack_total <= 0:
            return 0
        return round(self.available_bikes / self.rack_total * 100)


# Pagination

RowT = TypeVar("RowT", bound=BaseModel)


class PageRequest(BaseModel):
    """One index window against a row-oriented dataset."""

    endpoint: str
    start: int = Field(..., ge=1)
    end: int
    suffix: str = ""

    @model_validator(mode="after")
    def _check_window(self) -> "PageRequest":
        size = self.end - self.start + 1
        if size < 1 or size > PAGE_SIZE:
            raise ValueError(
                f"page window {self.start}-{self.end} must hold 1 to {PAGE_SIZE} rows"
            )
        return self

    @property
    def url(self) -> str:
        return f"{self.endpoint}/{self.start}/{self.end}/{self.suffix}"


class PageResponse(BaseModel):
    """A normalised upstream envelope."""

    code: str
    message: str = ""
    total_count: int = 0
    rows: list[dict] = Field(default_factory=list)


class PageResult(BaseModel, Generic[RowT]):
    """Rows gathered across one or more pages."""

    items: list[RowT] = Field(default_factory=list)
    total_count: int = 0

    @property
    def returned_count(self) -> int:
        return len(self.items)

    @classmethod
    def empty(cls) -> "PageResult[RowT]":
        return cls(items=[], total_count=0)


class CombinedTransit(BaseModel):
    """Merged subway, bus-stop and bike results for one location."""

    location: str
    subway: list[SubwayArrival] = Field(default_factory=list)
    bus_stops: list[BusStop] = Field(default_factory=list)
    bike_stations: list[BikeStation] = Field(default_factory=list)
    failed_sources: list[str] = Field(default_factory=list)


class ToolOutput(BaseModel):
    """Rendered text returned by a tool call."""

    text: str
    is_error: bool = False
