"""Unit tests for cachekeeper configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from cachekeeper.cache.models import Key
from cachekeeper.cache.policy import TTLCachingPolicy
from cachekeeper.config import Settings, get_settings
from cachekeeper.http import Request


def test_default_settings() -> None:
    """Test default settings are valid."""
    settings = Settings(_env_file=None)
    assert settings.STORE_BACKEND == "sqlite"
    assert settings.CACHING_ENABLED is True
    assert settings.DEFAULT_TTL == 3600
    assert settings.CACHEABLE_METHODS == ["GET", "HEAD"]
    assert settings.FOLLOW_REDIRECTS is False


def test_store_backend_is_normalized() -> None:
    settings = Settings(_env_file=None, STORE_BACKEND="Memory")
    assert settings.STORE_BACKEND == "memory"


def test_unsupported_store_backend_fails() -> None:
    """Test that an unknown store backend raises error."""
    with pytest.raises(ValidationError) as exc_info:
        Settings(_env_file=None, STORE_BACKEND="redis")

    assert "Unsupported STORE_BACKEND" in str(exc_info.value)


def test_negative_ttl_fails() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, DEFAULT_TTL=-5)


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CACHEKEEPER_STORE_BACKEND", "memory")
    monkeypatch.setenv("CACHEKEEPER_DEFAULT_TTL", "120")
    monkeypatch.setenv("CACHEKEEPER_VARY_HEADERS", '["Accept-Language"]')

    settings = Settings(_env_file=None)

    assert settings.STORE_BACKEND == "memory"
    assert settings.DEFAULT_TTL == 120
    assert settings.VARY_HEADERS == ["Accept-Language"]


def test_policy_config_mapping() -> None:
    settings = Settings(
        _env_file=None,
        CACHING_ENABLED=False,
        DEFAULT_TTL=None,
        CACHEABLE_METHODS=["get"],
        MAX_CACHEABLE_LENGTH=1024,
        VARY_HEADERS=["Accept"],
    )

    config = settings.policy_config()

    assert config.enable_caching is False
    assert config.default_ttl is None
    assert config.cacheable_methods == {"GET"}
    assert config.max_cacheable_length == 1024
    assert config.vary_headers == ["Accept"]


def test_policy_from_settings_keys_requests() -> None:
    policy = TTLCachingPolicy(Settings(_env_file=None).policy_config())
    assert isinstance(policy.key(Request(url="https://example.com"), policy.params), Key)


def test_fetcher_config_mapping() -> None:
    config = Settings(_env_file=None, FETCH_TIMEOUT=2.5, FOLLOW_REDIRECTS=True).fetcher_config()
    assert config.timeout == 2.5
    assert config.follow_redirects is True


def test_get_settings_is_cached() -> None:
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
