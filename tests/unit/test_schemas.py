"""Unit tests for tool input validation."""

import pytest
from pydantic import ValidationError

from korea_transit.core.models import ResponseFormat
from korea_transit.core.schemas import (
    BikeStationInput,
    BusArrivalInput,
    BusStationSearchInput,
    CombinedTransitInput,
    SubwayArrivalInput,
    SubwayStatusInput,
)


class TestLimit:
    """Test the shared limit bounds."""

    def test_default(self):
        params = SubwayArrivalInput(station_name="강남")
        assert params.limit == 10
        assert params.response_format == ResponseFormat.MARKDOWN

    @pytest.mark.parametrize("limit", [1, 20])
    def test_bounds_accepted(self, limit):
        assert BikeStationInput(query="강남", limit=limit).limit == limit

    @pytest.mark.parametrize("limit", [0, 21, -1])
    def test_out_of_range_rejected(self, limit):
        with pytest.raises(ValidationError):
            BikeStationInput(query="강남", limit=limit)

    def test_string_limit_rejected(self):
        with pytest.raises(ValidationError):
            BusStationSearchInput(query="강남", limit="5")


class TestToolInputs:
    """Test per-tool argument rules."""

    def test_station_name_required(self):
        with pytest.raises(ValidationError):
            SubwayArrivalInput()

    def test_station_name_too_long(self):
        with pytest.raises(ValidationError):
            SubwayArrivalInput(station_name="가" * 51)

    def test_whitespace_stripped(self):
        assert SubwayArrivalInput(station_name="  강남역 ").station_name == "강남역"

    @pytest.mark.parametrize("line", ["1", "9"])
    def test_line_accepted(self, line):
        assert SubwayStatusInput(line=line).line == line

    @pytest.mark.parametrize("line", ["0", "10", "2호선"])
    def test_line_rejected(self, line):
        with pytest.raises(ValidationError):
            SubwayStatusInput(line=line)

    def test_line_optional(self):
        assert SubwayStatusInput().line is None

    @pytest.mark.parametrize("ars_id", ["1616", "161655", "abcde"])
    def test_ars_id_must_be_five_digits(self, ars_id):
        with pytest.raises(ValidationError):
            BusArrivalInput(ars_id=ars_id)

    def test_query_min_length(self):
        with pytest.raises(ValidationError):
            BusStationSearchInput(query="강")

    def test_combined_has_no_limit(self):
        with pytest.raises(ValidationError):
            CombinedTransitInput(location="강남역", limit=5)

    def test_unknown_argument_rejected(self):
        with pytest.raises(ValidationError):
            SubwayArrivalInput(station_name="강남", page=2)

    def test_response_format_json(self):
        params = CombinedTransitInput(location="강남역", response_format="json")
        assert params.response_format == ResponseFormat.JSON

    def test_invalid_response_format(self):
        with pytest.raises(ValidationError):
            CombinedTransitInput(location="강남역", response_format="xml")
