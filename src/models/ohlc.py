"""OHLC models shared by the normalizer and the chart endpoints."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SourceFormat(str, Enum):
    """Known shapes of financial time-series responses."""

    ALPHA_VANTAGE = "alpha-vantage"
    TWELVE_DATA = "twelve-data"
    FINNHUB = "finnhub"
    GROWW = "groww"
    UNKNOWN = "unknown"


@dataclass
class OHLCDataPoint:
    """
    One normalized OHLC point.

    The timestamp is either a date/time string or Unix epoch seconds,
    depending on what the source furnishes. Prices that failed to parse
    are NaN.
    """

    timestamp: str | int | float
    open: float
    high: float
    low: float
    close: float
    volume: float = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dictionary, NaN and infinities become None."""
        return {
            "timestamp": _json_number(self.timestamp),
            "open": _json_number(self.open),
            "high": _json_number(self.high),
            "low": _json_number(self.low),
            "close": _json_number(self.close),
            "volume": _json_number(self.volume),
        }


@dataclass
class MappingResult:
    """Outcome of normalizing a single response."""

    format: SourceFormat
    data: list[OHLCDataPoint] = field(default_factory=list)
    symbol: str | None = None
    interval: str | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding unset optional fields."""
        result = {
            "format": self.format.value,
            "data": [point.to_dict() for point in self.data],
            "symbol": self.symbol,
            "interval": self.interval,
            "message": self.message,
        }
        return {k: v for k, v in result.items() if v is not None}


@dataclass
class ChartPoint:
    """Data point in the shape expected by the candlestick renderer."""

    x: int | None
    o: float
    h: float
    l: float  # noqa: E741
    c: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "x": self.x,
            "o": _json_number(self.o),
            "h": _json_number(self.h),
            "l": _json_number(self.l),
            "c": _json_number(self.c),
        }


def _json_number(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value
