"""Tests for chart series preparation."""

from datetime import UTC, datetime

from hypothesis import given
from hypothesis import strategies as st

from src.models.ohlc import MappingResult, OHLCDataPoint, SourceFormat
from src.services.chart_series import close_series, timestamp_to_millis, to_chart_points
from src.services.ohlc_mapper import map_to_ohlc


class TestTimestampToMillis:
    @given(st.integers(min_value=0, max_value=4_000_000_000))
    def test_unix_seconds_are_scaled(self, seconds):
        assert timestamp_to_millis(seconds) == seconds * 1000

    def test_date_string(self):
        expected = int(datetime(2024, 1, 5, tzinfo=UTC).timestamp() * 1000)
        assert timestamp_to_millis("2024-01-05") == expected

    def test_datetime_string(self):
        expected = int(datetime(2024, 1, 5, 16, 5, tzinfo=UTC).timestamp() * 1000)
        assert timestamp_to_millis("2024-01-05 16:05:00") == expected

    def test_iso_string_with_offset(self):
        expected = int(datetime(2024, 1, 5, 14, 0, tzinfo=UTC).timestamp() * 1000)
        assert timestamp_to_millis("2024-01-05T16:00:00+02:00") == expected
        assert timestamp_to_millis("2024-01-05T14:00:00Z") == expected

    def test_symbol_placeholder_has_no_time(self):
        assert timestamp_to_millis("RELIANCE") is None

    def test_non_finite_and_missing(self):
        assert timestamp_to_millis(float("nan")) is None
        assert timestamp_to_millis(None) is None
        assert timestamp_to_millis(True) is None


class TestChartPoints:
    def test_finnhub_points(self, finnhub_response):
        points = to_chart_points(map_to_ohlc(finnhub_response))

        assert [p.x for p in points] == [t * 1000 for t in finnhub_response["t"]]
        assert points[0].o == 221.03
        assert points[0].c == 217.68

    def test_chart_points_follow_data_order(self, twelve_data_response):
        points = to_chart_points(map_to_ohlc(twelve_data_response))
        assert points[0].x < points[1].x

    def test_unknown_result_has_no_points(self):
        assert to_chart_points(map_to_ohlc({})) == []

    def test_to_dict_replaces_nan(self):
        result = MappingResult(
            format=SourceFormat.FINNHUB,
            data=[OHLCDataPoint(timestamp=60, open=float("nan"), high=2, low=1, close=1.5)],
        )
        assert to_chart_points(result)[0].to_dict() == {
            "x": 60000,
            "o": None,
            "h": 2,
            "l": 1,
            "c": 1.5,
        }

    def test_close_series(self, groww_response):
        assert close_series(map_to_ohlc(groww_response)) == [(None, 105.0), (None, 3520.0)]

    def test_close_series_replaces_nan(self):
        result = MappingResult(
            format=SourceFormat.FINNHUB,
            data=[
                OHLCDataPoint(timestamp=60, open=1, high=2, low=1, close=float("nan")),
                OHLCDataPoint(timestamp=120, open=1, high=2, low=1, close=1.5),
            ],
        )
        assert close_series(result) == [(60000, None), (120000, 1.5)]
