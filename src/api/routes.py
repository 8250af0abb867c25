"""API routes for the widget dashboard."""

from typing import Any, Literal, Optional

from fastapi import APIRouter, Body, Depends, Query

from src.api.dependencies import get_api_cache, get_api_proxy
from src.api.error_handlers import create_missing_field_error, handle_service_error
from src.models.api_schemas import (
    CacheStatsResponse,
    FieldListResponse,
    RowListResponse,
    StockExploreResponse,
)
from src.models.ohlc import MappingResult
from src.services.api_cache import ApiCache
from src.services.api_proxy import ApiProxy, ProxyError
from src.services.chart_series import close_series, to_chart_points
from src.services.field_explorer import (
    default_label,
    extract_rows,
    flatten_fields,
    format_value,
    get_value_by_path,
    select_fields,
)
from src.services.ohlc_mapper import has_valid_ohlc_data, map_to_ohlc

router = APIRouter()


def _ohlc_response(raw: Any) -> dict[str, Any]:
    """Normalize a raw response and attach the validity flag and chart series."""
    result: MappingResult = map_to_ohlc(raw)
    response = result.to_dict()
    response["valid"] = has_valid_ohlc_data(raw)
    response["chart"] = [point.to_dict() for point in to_chart_points(result)]
    response["line"] = [{"x": x, "y": y} for x, y in close_series(result)]
    return response


def _fetch(proxy: ApiProxy, url: Optional[str]) -> Any:
    if not url:
        raise create_missing_field_error("url", "URL is required").to_http_exception()
    try:
        return proxy.fetch_json(url)
    except ProxyError as e:
        raise handle_service_error(e).to_http_exception() from e


@router.get("/custom-api")
def get_custom_api(
    url: Optional[str] = Query(None, description="Third-party API URL to proxy"),
    proxy: ApiProxy = Depends(get_api_proxy),
):
    """
    Proxy a GET request to a third-party JSON API.

    Known providers get their API key injected. The raw response is
    returned as-is for field exploration.
    """
    return _fetch(proxy, url)


@router.get("/custom-api/fields", response_model=FieldListResponse)
def get_custom_api_fields(
    url: Optional[str] = Query(None, description="Third-party API URL to proxy"),
    mode: Literal["card", "table", "chart"] = Query("card"),
    array_path: Optional[str] = Query(None, description="Array used as table rows"),
    search: Optional[str] = Query(None),
    proxy: ApiProxy = Depends(get_api_proxy),
):
    """
    List the selectable fields of a proxied response.

    Args:
        url: Third-party API URL
        mode: Widget display mode
        array_path: For table mode, the array whose item fields become columns
        search: Case-insensitive filter over path and value

    Returns:
        Fields with a default label for each
    """
    data = _fetch(proxy, url)
    fields = select_fields(data, mode=mode, array_path=array_path, search=search)
    return {
        "fields": [{**f.to_dict(), "label": default_label(f.path)} for f in fields],
        "count": len(fields),
        "mode": mode,
        "array_path": array_path,
    }


@router.get("/custom-api/rows", response_model=RowListResponse)
def get_custom_api_rows(
    url: Optional[str] = Query(None, description="Third-party API URL to proxy"),
    array_path: Optional[str] = Query(None, description="Array used as table rows"),
    columns: Optional[list[str]] = Query(None, description="Item paths to show as columns"),
    proxy: ApiProxy = Depends(get_api_proxy),
):
    """
    Render the rows of a table widget with display-formatted cells.

    Without columns, the primitive fields of the first row are used.
    """
    data = _fetch(proxy, url)
    rows = extract_rows(data, array_path)
    if not columns:
        columns = [
            f.path
            for f in (flatten_fields(rows[0]) if rows else [])
            if f.type not in ("array", "object")
        ]

    return {
        "columns": [{"path": path, "label": default_label(path)} for path in columns],
        "rows": [
            {path: format_value(get_value_by_path(row, path)) for path in columns} for row in rows
        ],
        "count": len(rows),
        "array_path": array_path,
    }


@router.get("/stock-explore", response_model=StockExploreResponse)
def get_stock_explore(
    symbol: Optional[str] = Query(None, description="Ticker symbol"),
    proxy: ApiProxy = Depends(get_api_proxy),
):
    """Fetch a quote and company profile for a ticker symbol."""
    if not symbol:
        raise create_missing_field_error("symbol").to_http_exception()
    try:
        return proxy.explore_stock(symbol)
    except ProxyError as e:
        raise handle_service_error(e).to_http_exception() from e


@router.post("/ohlc")
async def normalize_ohlc(payload: Any = Body(None)):
    """
    Normalize a raw financial API response into OHLC points.

    Unrecognized or malformed payloads are not errors: they come back with
    empty data and a message.
    """
    return _ohlc_response(payload)


@router.get("/ohlc")
def fetch_ohlc(
    url: Optional[str] = Query(None, description="Third-party API URL to proxy"),
    proxy: ApiProxy = Depends(get_api_proxy),
):
    """Fetch a URL through the proxy and normalize the response."""
    return _ohlc_response(_fetch(proxy, url))


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def get_cache_stats(cache: ApiCache = Depends(get_api_cache)):
    return cache.stats()


@router.delete("/cache")
async def clear_cache(
    url: Optional[str] = Query(None, description="Clear a single URL instead of everything"),
    cache: ApiCache = Depends(get_api_cache),
):
    if url:
        cache.clear(url)
    else:
        cache.clear_all()
    return {"message": "Cache cleared"}
