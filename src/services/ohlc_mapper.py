"""Detection and normalization of financial time-series responses into OHLC points."""

import math
from typing import Any, Callable

from src.models.ohlc import MappingResult, OHLCDataPoint, SourceFormat
from src.utils.logger import StructuredLogger
from src.utils.trace_context import get_current_trace

UNKNOWN_FORMAT_MESSAGE = (
    "Unable to detect OHLC data format. Response does not match "
    "Alpha Vantage, Twelve Data, Finnhub, or Groww formats."
)
NO_DATA_MESSAGE = "No OHLC data found in the response."

ALPHA_VANTAGE_SERIES_KEYS = (
    "Time Series (1min)",
    "Time Series (5min)",
    "Time Series (15min)",
    "Time Series (30min)",
    "Time Series (60min)",
    "Time Series (Daily)",
    "Weekly Time Series",
    "Monthly Time Series",
)

GROWW_QUOTE_MARKERS = ("open:", "high:", "low:", "close:")

logger = StructuredLogger("OHLCMapper")


class GrowwParseError(ValueError):
    """Raised when a Groww quote string does not follow the {key: value,...} grammar."""


def _parse_float(value: Any) -> float:
    """Parse a numeric field, returning NaN when it cannot be parsed."""
    if isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _parse_volume(value: Any, integral: bool = True) -> float:
    """Parse a volume field, returning 0 when it is absent or unparseable."""
    number = _parse_float(value)
    if not math.isfinite(number):
        return 0
    return int(number) if integral else number


def _or_zero(value: float | None) -> float:
    if value is None or math.isnan(value):
        return 0
    return value


# Signature predicates. Each receives a dict.


def _is_alpha_vantage(response: dict) -> bool:
    return "Meta Data" in response and any(key in response for key in ALPHA_VANTAGE_SERIES_KEYS)


def _is_twelve_data(response: dict) -> bool:
    return "meta" in response and isinstance(response.get("values"), list)


def _is_finnhub(response: dict) -> bool:
    return all(isinstance(response.get(key), list) for key in ("c", "h", "l", "o", "t"))


def _is_groww(response: dict) -> bool:
    if response.get("status") != "SUCCESS":
        return False
    payload = response.get("payload")
    if not isinstance(payload, dict) or not payload:
        return False
    first_quote = next(iter(payload.values()))
    return isinstance(first_quote, str) and all(
        marker in first_quote for marker in GROWW_QUOTE_MARKERS
    )


FORMAT_SIGNATURES: list[tuple[Callable[[dict], bool], SourceFormat]] = [
    (_is_alpha_vantage, SourceFormat.ALPHA_VANTAGE),
    (_is_twelve_data, SourceFormat.TWELVE_DATA),
    (_is_finnhub, SourceFormat.FINNHUB),
    (_is_groww, SourceFormat.GROWW),
]


def detect_data_format(response: Any) -> SourceFormat:
    """
    Classify a raw API response by its structure.

    Args:
        response: Any deserialized JSON value

    Returns:
        The first SourceFormat whose signature matches, or SourceFormat.UNKNOWN
    """
    if not isinstance(response, dict):
        return SourceFormat.UNKNOWN

    for matches, source_format in FORMAT_SIGNATURES:
        if matches(response):
            return source_format

    return SourceFormat.UNKNOWN


def has_valid_ohlc_data(response: Any) -> bool:
    """
    Check whether a response has a recognized OHLC shape.

    Only the top-level signature is checked; a valid response may still
    map to zero points.
    """
    return detect_data_format(response) != SourceFormat.UNKNOWN


def parse_groww_quote(quote: Any) -> dict[str, float]:
    """
    Parse a Groww quote string such as "{open: 100,high: 110,low: 95,close: 105}".

    Args:
        quote: The quote string from a Groww payload entry

    Returns:
        Mapping of field name to parsed value (NaN where a value is not numeric)

    Raises:
        GrowwParseError: If the quote is not a string or a segment lacks a colon
    """
    if not isinstance(quote, str):
        raise GrowwParseError(f"Expected quote string, got {type(quote).__name__}")

    cleaned = quote.replace("{", "").replace("}", "").strip()
    values: dict[str, float] = {}
    for part in cleaned.split(","):
        if not part.strip():
            continue
        key, separator, raw_value = part.partition(":")
        if not separator:
            raise GrowwParseError(f"Malformed quote segment: {part.strip()!r}")
        values[key.strip()] = _parse_float(raw_value.strip())
    return values


def _map_alpha_vantage(response: dict) -> list[OHLCDataPoint]:
    series_key = next((key for key in response if "Time Series" in key), None)
    if series_key is None:
        return []

    points = [
        OHLCDataPoint(
            timestamp=timestamp,
            open=_parse_float(values.get("1. open")),
            high=_parse_float(values.get("2. high")),
            low=_parse_float(values.get("3. low")),
            close=_parse_float(values.get("4. close")),
            volume=_parse_volume(values.get("5. volume")),
        )
        for timestamp, values in response[series_key].items()
    ]
    # Newest first in the source
    points.reverse()
    return points


def _map_twelve_data(response: dict) -> list[OHLCDataPoint]:
    points = [
        OHLCDataPoint(
            timestamp=value.get("datetime"),
            open=_parse_float(value.get("open")),
            high=_parse_float(value.get("high")),
            low=_parse_float(value.get("low")),
            close=_parse_float(value.get("close")),
            volume=_parse_volume(value.get("volume")),
        )
        for value in response["values"]
    ]
    # Newest first in the source
    points.reverse()
    return points


def _map_finnhub(response: dict) -> list[OHLCDataPoint]:
    volumes = response.get("v")
    if not isinstance(volumes, list):
        volumes = []

    points = []
    # zip truncates to the shortest array
    rows = zip(response["c"], response["h"], response["l"], response["o"], response["t"])
    for index, (close, high, low, open_, timestamp) in enumerate(rows):
        volume = volumes[index] if index < len(volumes) else None
        points.append(
            OHLCDataPoint(
                timestamp=timestamp,
                open=_parse_float(open_),
                high=_parse_float(high),
                low=_parse_float(low),
                close=_parse_float(close),
                volume=_parse_volume(volume, integral=False),
            )
        )
    return points


def _map_groww(response: dict) -> list[OHLCDataPoint]:
    points = []
    for symbol, quote in response["payload"].items():
        values = parse_groww_quote(quote)
        # Groww has no time axis, the symbol stands in for the timestamp
        points.append(
            OHLCDataPoint(
                timestamp=symbol,
                open=_or_zero(values.get("open")),
                high=_or_zero(values.get("high")),
                low=_or_zero(values.get("low")),
                close=_or_zero(values.get("close")),
            )
        )
    return points


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _alpha_vantage_metadata(response: dict) -> tuple[str | None, str | None]:
    meta = response.get("Meta Data")
    if not isinstance(meta, dict):
        return None, None
    return _text(meta.get("2. Symbol")), _text(meta.get("4. Interval"))


def _twelve_data_metadata(response: dict) -> tuple[str | None, str | None]:
    meta = response.get("meta")
    if not isinstance(meta, dict):
        return None, None
    return _text(meta.get("symbol")), _text(meta.get("interval"))


_MAPPERS: dict[SourceFormat, Callable[[dict], list[OHLCDataPoint]]] = {
    SourceFormat.ALPHA_VANTAGE: _map_alpha_vantage,
    SourceFormat.TWELVE_DATA: _map_twelve_data,
    SourceFormat.FINNHUB: _map_finnhub,
    SourceFormat.GROWW: _map_groww,
}

_METADATA_EXTRACTORS: dict[SourceFormat, Callable[[dict], tuple[str | None, str | None]]] = {
    SourceFormat.ALPHA_VANTAGE: _alpha_vantage_metadata,
    SourceFormat.TWELVE_DATA: _twelve_data_metadata,
}


def map_to_ohlc(response: Any) -> MappingResult:
    """
    Normalize a raw API response into chronological OHLC points.

    Never raises: unknown shapes, empty series and mapping failures are
    reported through MappingResult.message with empty data.

    Args:
        response: Any deserialized JSON value

    Returns:
        MappingResult with the detected format, points and optional metadata
    """
    source_format = detect_data_format(response)

    if source_format == SourceFormat.UNKNOWN:
        return MappingResult(format=SourceFormat.UNKNOWN, message=UNKNOWN_FORMAT_MESSAGE)

    symbol, interval = None, None
    extract_metadata = _METADATA_EXTRACTORS.get(source_format)
    if extract_metadata:
        symbol, interval = extract_metadata(response)

    try:
        data = _MAPPERS[source_format](response)
    except Exception as e:
        logger.warning(
            "Failed to map OHLC data",
            context={
                "trace_id": get_current_trace(),
                "format": source_format.value,
                "error_type": type(e).__name__,
                "error": str(e),
            },
        )
        return MappingResult(
            format=source_format,
            symbol=symbol,
            interval=interval,
            message=f"Error mapping {source_format.value} data: {str(e) or type(e).__name__}",
        )

    if not data:
        return MappingResult(
            format=source_format,
            symbol=symbol,
            interval=interval,
            message=NO_DATA_MESSAGE,
        )

    return MappingResult(format=source_format, data=data, symbol=symbol, interval=interval)
