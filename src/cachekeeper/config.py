"""Application configuration management."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cachekeeper.cache.policy import CachePolicyConfig
from cachekeeper.fetch.httpx_fetcher import HttpxFetcherConfig

SUPPORTED_STORE_BACKENDS = ("memory", "sqlite")


class Settings(BaseSettings):
    """Settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_prefix="CACHEKEEPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Cache store
    STORE_BACKEND: str = Field(default="sqlite", description="Cache store backend: memory, sqlite")
    STORE_DB_PATH: str = Field(
        default=".cachekeeper/cache.db", description="SQLite database path (sqlite backend only)"
    )

    # Caching policy
    CACHING_ENABLED: bool = Field(default=True, description="Enable caching globally")
    DEFAULT_TTL: int | None = Field(
        default=3600, ge=0, description="Seconds a response stays fresh; unset caches indefinitely"
    )
    CACHEABLE_METHODS: list[str] = Field(
        default_factory=lambda: ["GET", "HEAD"], description="Request methods eligible for caching"
    )
    MAX_CACHEABLE_LENGTH: int | None = Field(
        default=10 * 1024 * 1024, ge=0, description="Largest Content-Length that will be cached"
    )
    VARY_HEADERS: list[str] = Field(
        default_factory=list, description="Request headers included in cache keys"
    )

    # Origin fetching
    FETCH_TIMEOUT: float = Field(default=30.0, gt=0, description="Origin request timeout in seconds")
    FOLLOW_REDIRECTS: bool = Field(default=False, description="Follow redirects from origin")

    # Logging
    LOG_LEVEL: str = Field(default="WARNING", description="Log level for the CLI")

    @field_validator("STORE_BACKEND")
    @classmethod
    def validate_store_backend(cls, value: str) -> str:
        """Reject store backends that cannot be created."""
        if value.lower() not in SUPPORTED_STORE_BACKENDS:
            raise ValueError(
                f"Unsupported STORE_BACKEND '{value}'. "
                f"Supported backends: {', '.join(SUPPORTED_STORE_BACKENDS)}"
            )
        return value.lower()

    def policy_config(self) -> CachePolicyConfig:
        """Caching policy configuration derived from these settings."""
        return CachePolicyConfig(
            enable_caching=self.CACHING_ENABLED,
            default_ttl=self.DEFAULT_TTL,
            cacheable_methods={method.upper() for method in self.CACHEABLE_METHODS},
            max_cacheable_length=self.MAX_CACHEABLE_LENGTH,
            vary_headers=list(self.VARY_HEADERS),
        )

    def fetcher_config(self) -> HttpxFetcherConfig:
        """Origin fetcher configuration derived from these settings."""
        return HttpxFetcherConfig(
            timeout=self.FETCH_TIMEOUT,
            follow_redirects=self.FOLLOW_REDIRECTS,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
