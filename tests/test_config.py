"""Tests for configuration management."""

import os
from unittest.mock import patch

import pytest

from src.utils.config import APIKeysConfig, Config, ProxyConfig, ServerConfig


def test_proxy_config_defaults():
    """Test that proxy config has default timeout and cache TTL."""
    config = ProxyConfig()
    assert config.request_timeout == 10.0
    assert config.cache_ttl == 30


def test_server_config_default_origins():
    assert ServerConfig().cors_origins == ["*"]


def test_api_keys_lookup_by_env_name():
    keys = APIKeysConfig(finnhub="fh", indian_api="in")
    assert keys.get("FINNHUB_API_KEY") == "fh"
    assert keys.get("INDIAN_API_KEY") == "in"
    assert keys.get("TWELVE_DATA_API_KEY") is None
    assert keys.get("UNKNOWN_KEY") is None


def test_config_reads_environment():
    with patch.dict(
        os.environ,
        {
            "FINNHUB_API_KEY": "finnhub-key",
            "REQUEST_TIMEOUT": "2.5",
            "CACHE_TTL": "60",
            "CORS_ORIGINS": "http://localhost:3000, https://dash.example.com",
            "LOG_LEVEL": "debug",
        },
    ):
        config = Config()

    assert config.api_keys.finnhub == "finnhub-key"
    assert config.proxy.request_timeout == 2.5
    assert config.proxy.cache_ttl == 60
    assert config.server.cors_origins == ["http://localhost:3000", "https://dash.example.com"]
    assert config.server.log_level == "DEBUG"


def test_config_validation_non_positive_timeout():
    with patch.dict(os.environ, {"REQUEST_TIMEOUT": "0"}):
        config = Config()

        with pytest.raises(ValueError, match="REQUEST_TIMEOUT"):
            config.validate()


def test_config_validation_negative_ttl():
    with patch.dict(os.environ, {"CACHE_TTL": "-1"}):
        config = Config()

        with pytest.raises(ValueError, match="CACHE_TTL"):
            config.validate()


def test_config_validation_invalid_log_level():
    with patch.dict(os.environ, {"LOG_LEVEL": "verbose"}):
        config = Config()

        with pytest.raises(ValueError, match="Invalid LOG_LEVEL"):
            config.validate()


def test_config_validation_valid():
    with patch.dict(
        os.environ,
        {"REQUEST_TIMEOUT": "10", "CACHE_TTL": "0", "LOG_LEVEL": "WARNING"},
    ):
        config = Config()

        assert config.validate() is True
