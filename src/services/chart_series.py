"""Conversion of normalized OHLC results into chart-ready series."""

import math
from datetime import datetime, timezone

from src.models.ohlc import ChartPoint, MappingResult, OHLCDataPoint

_DATE_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d")


def timestamp_to_millis(timestamp: str | int | float | None) -> int | None:
    """
    Convert an OHLC timestamp to epoch milliseconds.

    Numbers are Unix seconds. Strings are parsed as dates, naive values are
    taken as UTC. Anything else (such as a Groww symbol) gives None.
    """
    if isinstance(timestamp, bool) or timestamp is None:
        return None
    if isinstance(timestamp, (int, float)):
        if not math.isfinite(timestamp):
            return None
        return int(timestamp * 1000)
    if not isinstance(timestamp, str):
        return None

    text = timestamp.strip()
    parsed = None
    for date_format in _DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, date_format)
            break
        except ValueError:
            continue

    if parsed is None:
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def to_chart_point(point: OHLCDataPoint) -> ChartPoint:
    return ChartPoint(
        x=timestamp_to_millis(point.timestamp),
        o=point.open,
        h=point.high,
        l=point.low,
        c=point.close,
    )


def to_chart_points(result: MappingResult) -> list[ChartPoint]:
    """Candlestick series for a mapping result."""
    return [to_chart_point(point) for point in result.data]


def close_series(result: MappingResult) -> list[tuple[int | None, float | None]]:
    """(x, close) pairs for the line chart mode. Unparsed closes are None."""
    return [
        (timestamp_to_millis(point.timestamp), point.close if math.isfinite(point.close) else None)
        for point in result.data
    ]
