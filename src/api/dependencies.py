"""FastAPI dependencies for the dashboard API."""

from src.services.api_cache import ApiCache, api_cache
from src.services.api_proxy import ApiProxy


def get_api_cache() -> ApiCache:
    """Shared response cache."""
    return api_cache


def get_api_proxy() -> ApiProxy:
    """
    Proxy bound to the configured API keys and the shared cache.

    Tests override this dependency to inject stub keys or a private cache.
    """
    return ApiProxy(cache=api_cache)
