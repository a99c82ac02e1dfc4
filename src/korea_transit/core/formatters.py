"""Markdown and JSON renderings of transit results."""

import json
from typing import Any

from .constants import CHARACTER_LIMIT, TRUNCATION_MARGIN
from .exceptions import ApiError, ApiTimeoutError, TransitError
from .models import (
    BikeStation,
    BusArrival,
    BusStop,
    CombinedTransit,
    ResponseFormat,
    SubwayArrival,
    SubwayStatus,
)

TRUNCATION_NOTICE = "\n\n... (응답이 {limit:,}자 제한으로 잘렸습니다)"


def truncate_response(content: str, limit: int = CHARACTER_LIMIT) -> str:
    """Cut text longer than `limit` and append a truncation notice."""
    if len(content) <= limit:
        return content
    return content[: limit - TRUNCATION_MARGIN] + TRUNCATION_NOTICE.format(limit=limit)


def format_error_message(error: BaseException) -> str:
    """Turn an exception into a sentence a user can act on."""
    if isinstance(error, ApiTimeoutError):
        return "요청 시간이 초과되었습니다. 네트워크 상태를 확인해주세요."
    if isinstance(error, ApiError):
        if error.status_code == 404:
            return "요청한 데이터를 찾을 수 없습니다."
        if error.status_code == 429:
            return "API 요청 한도를 초과했습니다. 잠시 후 다시 시도해주세요."
        if error.status_code is not None and error.status_code >= 500:
            return "서버 오류가 발생했습니다. 잠시 후 다시 시도해주세요."
        return str(error)
    if isinstance(error, TransitError):
        return str(error)
    return f"오류 발생: {error}"


def availability_emoji(rate: int) -> str:
    if rate >= 50:
        return "🟢"
    if rate >= 20:
        return "🟡"
    return "🔴"


def _dump(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


# Subway

def format_subway_arrivals(
    arrivals: list[SubwayArrival], station_name: str, fmt: ResponseFormat
) -> str:
    if fmt == ResponseFormat.JSON:
        return _dump(
            {
                "station": station_name,
                "count": len(arrivals),
                "arrivals": [
                    {
                        "line": arrival.line_name,
                        "destination": arrival.destination,
                        "message": arrival.arrival_message,
                        "direction": arrival.direction,
                        "trainNumber": arrival.train_number,
                    }
                    for arrival in arrivals
                ],
            }
        )

    if not arrivals:
        return f"## 🚇 {station_name}역 도착정보\n\n현재 도착 예정 열차가 없습니다."

    md = f"## 🚇 {station_name}역 실시간 도착정보\n\n"
    md += f"> 총 {len(arrivals)}개의 열차 정보\n\n"
    for idx, arrival in enumerate(arrivals, 1):
        arrow = "⬆️" if arrival.is_upbound else "⬇️"
        md += f"### {idx}. {arrival.line_name} - {arrival.destination}행\n"
        md += f"- **도착**: {arrival.arrival_message}\n"
        if arrival.location_message:
            md += f"- **현재 위치**: {arrival.location_message}\n"
        md += f"- **방향**: {arrow} {arrival.direction}\n"
        if arrival.train_number:
            md += f"- **열차번호**: {arrival.train_number}\n"
        md += "\n"
    return md


def format_subway_status(
    statuses: list[SubwayStatus], line: str | None, fmt: ResponseFormat
) -> str:
    title = f"{line}호선" if line else "전체 호선"

    if fmt == ResponseFormat.JSON:
        return _dump(
            {
                "filter": f"{line}호선" if line else "전체",
                "count": len(statuses),
                "statuses": [
                    {"line": status.line, "status": status.message}
                    for status in statuses
                ],
            }
        )

    md = f"## 🚇 지하철 운행상태 ({title})\n\n"
    if not statuses:
        return md + "운행상태 정보가 없습니다."

    for status in statuses:
        emoji = "✅" if status.is_normal else "⚠️"
        md += f"- **{status.line}**: {emoji} {status.message}\n"
    return md


# Bus

def format_bus_arrivals(
    arrivals: list[BusArrival], ars_id: str, fmt: ResponseFormat
) -> str:
    station_name = next(
        (arrival.station_name for arrival in arrivals if arrival.station_name),
        "정류장",
    )

    if fmt == ResponseFormat.JSON:
        return _dump(
            {
                "station": station_name,
                "arsId": ars_id,
                "count": len(arrivals),
                "arrivals": [
                    {
                        "busNumber": arrival.route_name,
                        "type": arrival.route_type_name,
                        "message1": arrival.first_arrival,
                        "message2": arrival.second_arrival,
                        "destination": arrival.terminal,
                    }
                    for arrival in arrivals
                ],
            }
        )

    if not arrivals:
        return (
            f"## 🚌 {station_name} ({ars_id})\n\n현재 도착 예정 버스가 없습니다.\n\n"
            "💡 정류장 번호가 맞는지 transit_search_bus_station으로 확인해 주세요."
        )

    md = f"## 🚌 {station_name} 정류장\n\n"
    md += f"> 정류장 번호: {ars_id} | 총 {len(arrivals)}개 노선\n\n"
    for idx, arrival in enumerate(arrivals, 1):
        md += f"### {idx}. {arrival.route_name}번 ({arrival.route_type_name})\n"
        md += f"- **첫 번째 버스**: {arrival.first_arrival}\n"
        md += f"- **두 번째 버스**: {arrival.second_arrival}\n"
        if arrival.terminal:
            md += f"- **종점**: {arrival.terminal}\n"
        md += "\n"
    return md


def format_bus_stops(stops: list[BusStop], query: str, fmt: ResponseFormat) -> str:
    if fmt == ResponseFormat.JSON:
        return _dump(
            {
                "query": query,
                "count": len(stops),
                "stations": [
                    {
                        "name": stop.name,
                        "arsId": stop.ars_id,
                        "type": stop.stop_type or "일반",
                    }
                    for stop in stops
                ],
            }
        )

    if not stops:
        return f'## 🔍 버스 정류장 검색: "{query}"\n\n검색 결과가 없습니다.'

    md = f'## 🔍 버스 정류장 검색: "{query}"\n\n'
    md += f"> {len(stops)}개 정류장 발견\n\n"
    for idx, stop in enumerate(stops, 1):
        md += f"### {idx}. {stop.name}\n"
        md += f"- **정류장 번호**: `{stop.ars_id}`\n"
        if stop.stop_type:
            md += f"- **유형**: {stop.stop_type}\n"
        md += "\n"

    md += "---\n"
    md += "> 💡 **Tip**: 도착정보 조회 시 정류장 번호(arsId)를 사용하세요.\n"
    return md


# Bike

def format_bike_stations(
    stations: list[BikeStation], query: str, fmt: ResponseFormat
) -> str:
    if fmt == ResponseFormat.JSON:
        return _dump(
            {
                "query": query,
                "count": len(stations),
                "stations": [
                    {
                        "name": station.name,
                        "id": station.station_id,
                        "available": station.available_bikes,
                        "rackTotal": station.rack_total,
                        "shared": station.shared,
                    }
                    for station in stations
                ],
            }
        )

    if not stations:
        return f'## 🚲 따릉이 대여소 검색: "{query}"\n\n검색 결과가 없습니다.'

    md = f'## 🚲 따릉이 대여소 검색: "{query}"\n\n'
    md += f"> {len(stations)}개 대여소 발견\n\n"
    for idx, station in enumerate(stations, 1):
        rate = station.availability_rate
        md += f"### {idx}. {station.name}\n"
        md += (
            f"- **대여 가능**: {availability_emoji(rate)} {station.available_bikes}대"
            f" / {station.rack_total}대 ({rate}%)\n"
        )
        md += f"- **대여소 ID**: {station.station_id}\n"
        if station.shared is not None:
            md += f"- **공유율**: {station.shared}%\n"
        md += "\n"
    return md


# Combined

def format_combined_transit(combined: CombinedTransit, fmt: ResponseFormat) -> str:
    if fmt == ResponseFormat.JSON:
        return _dump(
            {
                "location": combined.location,
                "subway": {
                    "count": len(combined.subway),
                    "arrivals": [
                        {
                            "line": arrival.line_name,
                            "destination": arrival.destination,
                            "message": arrival.arrival_message,
                        }
                        for arrival in combined.subway
                    ],
                },
                "bus": {
                    "count": len(combined.bus_stops),
                    "stations": [
                        {"name": stop.name, "arsId": stop.ars_id}
                        for stop in combined.bus_stops
                    ],
                },
                "bike": {
                    "count": len(combined.bike_stations),
                    "stations": [
                        {
                            "name": station.name,
                            "available": station.available_bikes,
                            "total": station.rack_total,
                        }
                        for station in combined.bike_stations
                    ],
                },
                "unavailable": combined.failed_sources,
            }
        )

    md = f"# 📍 {combined.location} 주변 교통정보\n\n"

    md += "## 🚇 지하철 도착정보\n\n"
    if not combined.subway:
        md += "주변 지하철역 정보가 없습니다.\n\n"
    else:
        for arrival in combined.subway:
            md += (
                f"- **{arrival.line_name}** {arrival.destination}행: "
                f"{arrival.arrival_message}\n"
            )
        md += "\n"

    md += "## 🚌 버스 정류장\n\n"
    if not combined.bus_stops:
        md += "주변 버스 정류장 정보가 없습니다.\n\n"
    else:
        for stop in combined.bus_stops:
            md += f"- **{stop.name}** ({stop.ars_id})\n"
        md += "\n"

    md += "## 🚲 따릉이 대여소\n\n"
    if not combined.bike_stations:
        md += "주변 따릉이 대여소 정보가 없습니다.\n"
    else:
        for station in combined.bike_stations:
            emoji = availability_emoji(station.availability_rate)
            md += (
                f"- **{station.name}**: {emoji} {station.available_bikes}대 이용가능\n"
            )

    if combined.failed_sources:
        labels = {"subway": "지하철", "bus": "버스", "bike": "따릉이"}
        names = ", ".join(labels[source] for source in combined.failed_sources)
        md += f"\n> ⚠️ 일부 정보를 불러오지 못했습니다: {names}\n"
    return md
