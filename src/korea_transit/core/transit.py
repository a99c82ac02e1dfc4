"""Seoul transit lookups built on the open-data pagination engine."""

import logging
import re
from urllib.parse import urlencode

from ..utils.korean_text import encode_path_segment, normalize_station_name
from .aggregate import Settled, settle_all
from .client import OpenDataClient
from .config import Settings
from .constants import (
    BIKE_ENVELOPE_KEY,
    BIKE_MAX_PAGES,
    BUS_STOP_DATASET,
    BUS_STOP_MAX_PAGES,
    COMBINED_BIKE_FETCH,
    COMBINED_BIKE_LIMIT,
    COMBINED_BUS_LIMIT,
    COMBINED_SUBWAY_FETCH,
    COMBINED_SUBWAY_LIMIT,
    DEFAULT_LIMIT,
    MAX_LIMIT,
    SUBWAY_ARRIVAL_ENVELOPE_KEY,
    SUBWAY_ARRIVAL_ROWS_KEY,
    SUBWAY_STATUS_DATASET,
    SUBWAY_TIMEOUT,
)
from .exceptions import FeatureDisabledError, ValidationError
from .filters import (
    matches_bike_station,
    matches_bus_stop,
    matches_bus_stop_name,
    matches_subway_line,
)
from .models import (
    BikeStation,
    BusArrival,
    BusStop,
    CombinedTransit,
    PageResult,
    SubwayArrival,
    SubwayStatus,
)
from .pagination import (
    fetch_page,
    fetch_pages,
    has_rows,
    parse_rows,
    read_bus_envelope,
)

logger = logging.getLogger(__name__)

ARS_ID_PATTERN = re.compile(r"^\d{5}$")


class TransitService:
    """Queries subway, bus and bike-share data for Seoul."""

    def __init__(self, settings: Settings, client: OpenDataClient | None = None):
        """Initialize the service.

        Args:
            settings: Loaded settings holding the API keys
            client: HTTP client; one is created when omitted
        """
        self.settings = settings
        self.endpoints = settings.endpoints()
        self.client = client or OpenDataClient(redact=settings.seoul_api_key)

    async def get_subway_arrivals(
        self, station_name: str, limit: int = DEFAULT_LIMIT
    ) -> PageResult[SubwayArrival]:
        """Real-time arrivals at a station.

        The station name is normalised ("강남역" and "강남" query the same
        station) and narrows the results upstream, so no local filter runs.
        """
        station = normalize_station_name(station_name)
        if not station:
            raise ValidationError("역 이름은 필수입니다")

        return await fetch_page(
            self.client,
            self.endpoints.subway_arrival,
            SubwayArrival,
            SUBWAY_ARRIVAL_ENVELOPE_KEY,
            limit=limit,
            rows_key=SUBWAY_ARRIVAL_ROWS_KEY,
            suffix=encode_path_segment(station),
            timeout=SUBWAY_TIMEOUT,
        )

    async def get_subway_status(self, line: str | None = None) -> list[SubwayStatus]:
        """Operating status for every line, or for one line number (1-9)."""
        result = await fetch_page(
            self.client,
            self.endpoints.subway_status,
            SubwayStatus,
            SUBWAY_STATUS_DATASET,
            limit=MAX_LIMIT,
            timeout=SUBWAY_TIMEOUT,
        )
        predicate = matches_subway_line(line)
        return [status for status in result.items if predicate(status)]

    async def get_bus_arrivals(
        self, ars_id: str, limit: int = DEFAULT_LIMIT
    ) -> PageResult[BusArrival]:
        """Arrivals for every route serving a 5-digit stop number.

        Raises:
            FeatureDisabledError: If no bus API key is configured
            ValidationError: If the stop number is not five digits
        """
        if not self.settings.bus_arrival_enabled:
            raise FeatureDisabledError(
                "버스 도착정보 기능이 비활성화되어 있습니다 (DATA_GO_KR_API_KEY 미설정)"
            )
        if not ARS_ID_PATTERN.match(ars_id):
            raise ValidationError("정류장 ID는 5자리 숫자여야 합니다 (예: '16165')")

        query = urlencode({"arsId": ars_id, "resultType": "json"})
        # The portal issues service keys already URL-encoded.
        url = (
            f"{self.endpoints.bus_arrival}"
            f"?serviceKey={self.endpoints.bus_service_key}&{query}"
        )
        payload = await self.client.fetch_json(url)

        envelope = read_bus_envelope(payload)
        if not has_rows(envelope):
            return PageResult[BusArrival].empty()

        effective_limit = max(1, min(limit, MAX_LIMIT))
        items = parse_rows(envelope.rows, BusArrival)[:effective_limit]
        return PageResult[BusArrival](items=items, total_count=envelope.total_count)

    async def search_bus_stops(
        self, query: str, limit: int = DEFAULT_LIMIT
    ) -> PageResult[BusStop]:
        """Find stops whose name contains the query or whose number equals it."""
        return await fetch_pages(
            self.client,
            self.endpoints.bus_stop,
            BusStop,
            BUS_STOP_DATASET,
            limit=limit,
            max_pages=BUS_STOP_MAX_PAGES,
            predicate=matches_bus_stop(query),
        )

    async def search_bike_stations(
        self, query: str, limit: int = DEFAULT_LIMIT
    ) -> PageResult[BikeStation]:
        """Find bike-share stations whose name contains the query, ignoring case."""
        return await fetch_pages(
            self.client,
            self.endpoints.bike_station,
            BikeStation,
            BIKE_ENVELOPE_KEY,
            limit=limit,
            max_pages=BIKE_MAX_PAGES,
            predicate=matches_bike_station(query),
        )

    async def get_combined_info(self, location: str) -> CombinedTransit:
        """Subway, bus-stop and bike-station results for one place.

        The three lookups run concurrently. A lookup that fails is logged and
        contributes nothing; it never fails the others.
        """
        place = normalize_station_name(location)
        subway, bus, bike = await settle_all(
            self.get_subway_arrivals(place, limit=COMBINED_SUBWAY_FETCH),
            fetch_pages(
                self.client,
                self.endpoints.bus_stop,
                BusStop,
                BUS_STOP_DATASET,
                limit=COMBINED_BUS_LIMIT,
                max_pages=BUS_STOP_MAX_PAGES,
                predicate=matches_bus_stop_name(place),
            ),
            self.search_bike_stations(place, limit=COMBINED_BIKE_FETCH),
        )

        failed_sources = []
        for source, outcome in (("subway", subway), ("bus", bus), ("bike", bike)):
            if not outcome.ok:
                logger.warning(
                    f"Combined lookup for '{place}': {source} failed: {outcome.error}"
                )
                failed_sources.append(source)

        return CombinedTransit(
            location=location,
            subway=_items(subway)[:COMBINED_SUBWAY_LIMIT],
            bus_stops=_items(bus)[:COMBINED_BUS_LIMIT],
            bike_stations=_items(bike)[:COMBINED_BIKE_LIMIT],
            failed_sources=failed_sources,
        )

    def close(self) -> None:
        self.client.close()


def _items(outcome: Settled) -> list:
    result = outcome.value_or(PageResult.empty())
    return list(result.items)
