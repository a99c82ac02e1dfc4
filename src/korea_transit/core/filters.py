"""Row predicates for narrowing dataset pages to a query."""

from collections.abc import Callable

from ..utils.korean_text import contains_casefold
from .models import BikeStation, BusStop, SubwayStatus


def matches_bus_stop(query: str) -> Callable[[BusStop], bool]:
    """Match stops whose name contains the query or whose number equals it."""
    query = query.strip()

    def predicate(stop: BusStop) -> bool:
        return query in stop.name or stop.ars_id == query

    return predicate


def matches_bus_stop_name(query: str) -> Callable[[BusStop], bool]:
    """Match stops by name only."""
    query = query.strip()

    def predicate(stop: BusStop) -> bool:
        return bool(stop.name) and query in stop.name

    return predicate


def matches_bike_station(query: str) -> Callable[[BikeStation], bool]:
    """Match stations whose name contains the query, ignoring case."""
    query = query.strip()

    def predicate(station: BikeStation) -> bool:
        return contains_casefold(station.name, query)

    return predicate


def matches_subway_line(line: str | None) -> Callable[[SubwayStatus], bool]:
    """Match status rows for one line number, or every row when none is given."""
    if not line:
        return lambda status: True
    prefix = f"{line}호선"

    def predicate(status: SubwayStatus) -> bool:
        return status.line.strip().startswith(prefix)

    return predicate
