"""Configuration management for the application."""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class APIKeysConfig:
    """Provider API keys injected by the request proxy."""

    twelve_data: str | None = None
    alpha_vantage: str | None = None
    finnhub: str | None = None
    indian_api: str | None = None

    def get(self, env_key: str) -> str | None:
        """Look up a key by its environment variable name."""
        return {
            "TWELVE_DATA_API_KEY": self.twelve_data,
            "ALPHA_VANTAGE_API_KEY": self.alpha_vantage,
            "FINNHUB_API_KEY": self.finnhub,
            "INDIAN_API_KEY": self.indian_api,
        }.get(env_key)


@dataclass
class ProxyConfig:
    """Outbound request configuration."""

    request_timeout: float = 10.0  # Seconds
    cache_ttl: int = 30  # Cache time-to-live in seconds


@dataclass
class ServerConfig:
    """HTTP server configuration."""

    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


class Config:
    """Main application configuration."""

    def __init__(self):
        self.api_keys = APIKeysConfig(
            twelve_data=os.getenv("TWELVE_DATA_API_KEY"),
            alpha_vantage=os.getenv("ALPHA_VANTAGE_API_KEY"),
            finnhub=os.getenv("FINNHUB_API_KEY"),
            indian_api=os.getenv("INDIAN_API_KEY"),
        )

        self.proxy = ProxyConfig(
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "10")),
            cache_ttl=int(os.getenv("CACHE_TTL", "30")),
        )

        origins = os.getenv("CORS_ORIGINS", "*")
        self.server = ServerConfig(
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> bool:
        """
        Validate configuration.

        Returns:
            True if configuration is valid

        Raises:
            ValueError if configuration is invalid
        """
        if self.proxy.request_timeout <= 0:
            raise ValueError("REQUEST_TIMEOUT must be positive")
        if self.proxy.cache_ttl < 0:
            raise ValueError("CACHE_TTL must not be negative")
        if self.server.log_level not in LOG_LEVELS:
            raise ValueError(f"Invalid LOG_LEVEL: {self.server.log_level}")

        return True


# Global config instance
config = Config()
