"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from main import app
from src.api.dependencies import get_api_cache, get_api_proxy
from src.services.api_cache import ApiCache
from src.services.api_proxy import ApiProxy
from src.utils.config import APIKeysConfig


@pytest.fixture
def alpha_vantage_response():
    """Intraday Alpha Vantage response, newest entry first."""
    return {
        "Meta Data": {
            "1. Information": "Intraday (5min) open, high, low, close prices and volume",
            "2. Symbol": "IBM",
            "3. Last Refreshed": "2024-01-05 16:10:00",
            "4. Interval": "5min",
            "5. Output Size": "Compact",
            "6. Time Zone": "US/Eastern",
        },
        "Time Series (5min)": {
            "2024-01-05 16:10:00": {
                "1. open": "161.2000",
                "2. high": "161.3500",
                "3. low": "161.1000",
                "4. close": "161.3000",
                "5. volume": "1200",
            },
            "2024-01-05 16:05:00": {
                "1. open": "161.0000",
                "2. high": "161.2500",
                "3. low": "160.9000",
                "4. close": "161.2000",
                "5. volume": "980",
            },
            "2024-01-05 16:00:00": {
                "1. open": "160.8000",
                "2. high": "161.0500",
                "3. low": "160.7000",
                "4. close": "161.0000",
                "5. volume": "4500",
            },
        },
    }


@pytest.fixture
def twelve_data_response():
    """Twelve Data time series response, newest entry first."""
    return {
        "meta": {
            "symbol": "AAPL",
            "interval": "1day",
            "currency": "USD",
            "exchange": "NASDAQ",
            "type": "Common Stock",
        },
        "values": [
            {
                "datetime": "2024-01-05",
                "open": "181.99001",
                "high": "182.75999",
                "low": "180.17000",
                "close": "181.17999",
                "volume": "62303300",
            },
            {
                "datetime": "2024-01-04",
                "open": "182.14999",
                "high": "183.08749",
                "low": "180.88000",
                "close": "181.91000",
                "volume": "71983600",
            },
        ],
        "status": "ok",
    }


@pytest.fixture
def finnhub_response():
    """Finnhub candle response with parallel arrays, oldest entry first."""
    return {
        "c": [217.68, 221.03, 219.89],
        "h": [222.49, 221.5, 220.94],
        "l": [217.19, 217.1402, 218.83],
        "o": [221.03, 218.55, 220],
        "t": [1569297600, 1569384000, 1569470400],
        "v": [33463820, 24018876, 20730608],
        "s": "ok",
    }


@pytest.fixture
def groww_response():
    """Groww OHLC response keyed by symbol."""
    return {
        "status": "SUCCESS",
        "payload": {
            "RELIANCE": "{open: 100,high: 110,low: 95,close: 105}",
            "TCS": "{open: 3500.5,high: 3550,low: 3490.25,close: 3520}",
        },
    }


@pytest.fixture
def test_api_keys():
    return APIKeysConfig(
        twelve_data="twelve-data-test-key",
        alpha_vantage="alpha-vantage-test-key",
        finnhub="finnhub-test-key-123",
        indian_api="indian-api-test-key",
    )


@pytest.fixture
def test_cache():
    return ApiCache(ttl_seconds=30)


@pytest.fixture
def test_proxy(test_api_keys, test_cache):
    return ApiProxy(api_keys=test_api_keys, cache=test_cache, timeout=5)


@pytest.fixture
def test_client(test_proxy, test_cache):
    """Create a test client with a private cache and stub API keys."""
    app.dependency_overrides[get_api_proxy] = lambda: test_proxy
    app.dependency_overrides[get_api_cache] = lambda: test_cache

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()
