"""Pydantic response models for the dashboard API."""

from typing import Any, Literal, Optional

from pydantic import BaseModel


class StockSummary(BaseModel):
    """Flat card summary of a Finnhub quote and profile."""

    symbol: str
    company_name: str
    current_price: Optional[float] = None
    high_price: Optional[float] = None
    low_price: Optional[float] = None
    open_price: Optional[float] = None
    previous_close: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
    industry: str = "N/A"
    country: str = "N/A"


class StockExploreResponse(BaseModel):
    """Response model for the stock explorer."""

    symbol: str
    quote: dict[str, Any]
    profile: dict[str, Any]
    mapped: StockSummary


class FieldItem(BaseModel):
    """A selectable field of an API response."""

    path: str
    label: str
    value: Any = None
    type: Literal["string", "number", "boolean", "object", "array", "null"]
    is_nested_array: bool = False


class FieldListResponse(BaseModel):
    """Response model for field exploration."""

    fields: list[FieldItem]
    count: int
    mode: Literal["card", "table", "chart"]
    array_path: Optional[str] = None


class ColumnItem(BaseModel):
    path: str
    label: str


class RowListResponse(BaseModel):
    """Response model for table rows with display-formatted cells."""

    columns: list[ColumnItem]
    rows: list[dict[str, str]]
    count: int
    array_path: Optional[str] = None


class CacheEntryInfo(BaseModel):
    url: str
    age_ms: int
    valid: bool


class CacheStatsResponse(BaseModel):
    """Response model for cache statistics."""

    total_entries: int
    valid_entries: int
    entries: list[CacheEntryInfo]
