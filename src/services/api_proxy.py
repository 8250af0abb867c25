"""Request proxy for third-party market data APIs."""

from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import requests

from src.services.api_cache import ApiCache, api_cache
from src.utils.config import APIKeysConfig, config
from src.utils.logger import StructuredLogger
from src.utils.trace_context import get_current_trace


class ProxyError(Exception):
    """Base class for proxy failures that map to an HTTP status."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidUrlError(ProxyError):
    status_code = 400


class UpstreamApiError(ProxyError):
    """The upstream API answered with an error or could not be reached."""

    status_code = 502


class ProviderNotConfiguredError(ProxyError):
    status_code = 500


class SymbolNotFoundError(ProxyError):
    status_code = 404


@dataclass(frozen=True)
class ApiProvider:
    """A known API host and how its key is supplied."""

    name: str
    domain: str
    env_key: str
    param_name: str | None = None
    header_name: str | None = None

    @property
    def header_auth(self) -> bool:
        return self.header_name is not None

    def matches_host(self, hostname: str | None) -> bool:
        """True for the provider's domain or any of its subdomains."""
        if not hostname:
            return False
        host = hostname.lower().rstrip(".")
        return host == self.domain or host.endswith("." + self.domain)


API_PROVIDERS: tuple[ApiProvider, ...] = (
    ApiProvider(
        name="Twelve Data",
        domain="api.twelvedata.com",
        env_key="TWELVE_DATA_API_KEY",
        param_name="apikey",
    ),
    ApiProvider(
        name="Alpha Vantage",
        domain="alphavantage.co",
        env_key="ALPHA_VANTAGE_API_KEY",
        param_name="apikey",
    ),
    ApiProvider(
        name="Finnhub",
        domain="finnhub.io",
        env_key="FINNHUB_API_KEY",
        param_name="token",
    ),
    ApiProvider(
        name="Indian API",
        domain="stock.indianapi.in",
        env_key="INDIAN_API_KEY",
        header_name="X-Api-Key",
    ),
)

UPSTREAM_ERROR_MESSAGES = {
    401: "Unauthorized (401). The API requires authentication.",
    403: "Access denied (403). The API may require authentication or API keys.",
    404: "The API endpoint was not found (404). Please verify the URL.",
    500: "The API server encountered an internal error (500).",
    503: "The API service is temporarily unavailable (503). Please try again later.",
}

FINNHUB_BASE_URL = "https://finnhub.io/api/v1"

# Keys this short, or containing "demo", are placeholders
MIN_API_KEY_LENGTH = 10


def detect_api_provider(url: str) -> Optional[ApiProvider]:
    """
    Return the first known provider serving the URL's host, or None.

    Only the hostname is compared, so a provider domain appearing in the
    path or query of another host does not match.
    """
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return None
    for provider in API_PROVIDERS:
        if provider.matches_host(hostname):
            return provider
    return None


def process_api_url(url: str, provider: ApiProvider, api_keys: APIKeysConfig) -> str:
    """
    Inject the configured API key into a provider URL.

    A key already in the URL is kept unless it looks like a placeholder.
    Header-authenticated providers and providers without a configured key
    get the URL back unchanged.

    Args:
        url: Original request URL
        provider: Provider matched for the URL
        api_keys: Configured provider keys

    Returns:
        The URL to request
    """
    if provider.header_auth:
        return url

    env_api_key = api_keys.get(provider.env_key)
    if not env_api_key:
        return url

    parsed = urlparse(url)
    params = parse_qsl(parsed.query, keep_blank_values=True)
    existing_key = next((v for k, v in params if k == provider.param_name), None)

    if existing_key and "demo" not in existing_key and len(existing_key) >= MIN_API_KEY_LENGTH:
        return url

    params = [(k, v) for k, v in params if k != provider.param_name]
    params.append((provider.param_name, env_api_key))
    return urlunparse(parsed._replace(query=urlencode(params)))


def validate_url(url: str) -> None:
    """
    Raises:
        InvalidUrlError: If the URL is not an absolute http(s) URL
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidUrlError("Invalid URL format")


class ApiProxy:
    """Fetches JSON from user-supplied URLs, injecting provider credentials."""

    def __init__(
        self,
        api_keys: APIKeysConfig | None = None,
        cache: ApiCache | None = None,
        timeout: float | None = None,
    ):
        self.api_keys = api_keys or config.api_keys
        self.cache = cache if cache is not None else api_cache
        self.timeout = timeout or config.proxy.request_timeout
        self.logger = StructuredLogger("ApiProxy")

    def fetch_json(self, url: str, use_cache: bool = True) -> Any:
        """
        Fetch and decode a JSON response.

        Args:
            url: URL supplied by the user
            use_cache: Serve and store responses through the URL cache

        Returns:
            The decoded JSON body

        Raises:
            InvalidUrlError: If the URL is malformed
            UpstreamApiError: If the request fails or the body is not JSON
        """
        if not url:
            raise InvalidUrlError("URL is required")
        validate_url(url)

        if use_cache:
            cached = self.cache.get(url)
            if cached is not None:
                self.logger.debug("Serving cached response", context={"url": url})
                return cached

        trace_id = get_current_trace()
        provider = detect_api_provider(url)
        request_url = process_api_url(url, provider, self.api_keys) if provider else url
        provider_name = provider.name if provider else "custom"

        headers = {"Accept": "application/json"}
        if provider and provider.header_auth:
            api_key = self.api_keys.get(provider.env_key)
            if api_key:
                headers[provider.header_name] = api_key

        self.logger.info(
            "Starting upstream fetch",
            context={"trace_id": trace_id, "source": provider_name, "host": urlparse(url).netloc},
        )

        try:
            response = requests.get(request_url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.error(
                "Upstream request failed",
                context={"trace_id": trace_id, "source": provider_name, "result": "failed"},
                exception=e,
            )
            raise UpstreamApiError("Failed to fetch data from the provided URL") from e

        if not response.ok:
            message = UPSTREAM_ERROR_MESSAGES.get(
                response.status_code,
                f"The API returned an error ({response.status_code})",
            )
            self.logger.warning(
                "Upstream returned an error status",
                context={
                    "trace_id": trace_id,
                    "source": provider_name,
                    "status_code": response.status_code,
                    "result": "failed",
                },
            )
            raise UpstreamApiError(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            self.logger.error(
                "Upstream response is not JSON",
                context={"trace_id": trace_id, "source": provider_name, "result": "failed"},
                exception=e,
            )
            raise UpstreamApiError("The API did not return valid JSON") from e

        if use_cache:
            self.cache.set(url, data)

        self.logger.info(
            "Successfully fetched upstream data",
            context={"trace_id": trace_id, "source": provider_name, "result": "success"},
        )
        return data

    def explore_stock(self, symbol: str) -> dict[str, Any]:
        """
        Fetch a Finnhub quote and company profile for a symbol.

        Args:
            symbol: Ticker symbol, case-insensitive

        Returns:
            Dictionary with the raw quote and profile plus a flat card summary

        Raises:
            ProviderNotConfiguredError: If no Finnhub key is configured
            SymbolNotFoundError: If Finnhub reports an all-zero quote
            UpstreamApiError: If either request fails
        """
        if not self.api_keys.finnhub:
            raise ProviderNotConfiguredError("API key not configured")

        symbol = symbol.upper()
        quote = self._get_finnhub("quote", symbol)
        profile = self._get_finnhub("stock/profile2", symbol)

        if quote.get("c") == 0 and quote.get("h") == 0:
            raise SymbolNotFoundError("Stock symbol not found")

        return {
            "symbol": symbol,
            "quote": quote,
            "profile": profile,
            "mapped": {
                "symbol": symbol,
                "company_name": profile.get("name") or symbol,
                "current_price": quote.get("c"),
                "high_price": quote.get("h"),
                "low_price": quote.get("l"),
                "open_price": quote.get("o"),
                "previous_close": quote.get("pc"),
                "change": quote.get("d"),
                "change_percent": quote.get("dp"),
                "industry": profile.get("finnhubIndustry") or "N/A",
                "country": profile.get("country") or "N/A",
            },
        }

    def _get_finnhub(self, endpoint: str, symbol: str) -> dict[str, Any]:
        params = {"symbol": symbol, "token": self.api_keys.finnhub}
        try:
            response = requests.get(
                f"{FINNHUB_BASE_URL}/{endpoint}", params=params, timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            self.logger.error(
                "Error fetching stock data",
                context={
                    "trace_id": get_current_trace(),
                    "source": "Finnhub",
                    "endpoint": endpoint,
                    "symbol": symbol,
                    "result": "failed",
                },
                exception=e,
            )
            raise UpstreamApiError("Failed to fetch stock data") from e

        return data if isinstance(data, dict) else {}
