"""Configuration management using Pydantic Settings.

This module provides centralized configuration management for the entire application,
loading settings from environment variables with validation and type safety.
"""

import json
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All configuration parameters are defined here with type hints, default values,
    and validation. Settings are loaded from environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Provider Credentials
    newsapi_key: str | None = Field(default=None, description="NewsAPI.org API key")
    pa_media_api_keys: list[str] = Field(
        default_factory=list,
        description="PA Media API keys, tried in order",
    )
    newsdata_api_key: str | None = Field(default=None, description="NewsData.io API key")
    youtube_api_key: str | None = Field(default=None, description="YouTube Data API v3 key")
    brave_search_api_key: str | None = Field(
        default=None,
        description="Brave Search subscription token",
    )

    # Provider Endpoints
    newsapi_base_url: str = Field(
        default="https://newsapi.org/v2",
        description="NewsAPI base URL",
    )
    pa_media_base_url: str = Field(
        default="https://content.api.pressassociation.io/v1",
        description="PA Media content API base URL",
    )
    newsdata_base_url: str = Field(
        default="https://newsdata.io/api/1",
        description="NewsData.io base URL",
    )
    youtube_base_url: str = Field(
        default="https://www.googleapis.com/youtube/v3",
        description="YouTube Data API base URL",
    )
    brave_search_base_url: str = Field(
        default="https://api.search.brave.com/res/v1",
        description="Brave Search API base URL",
    )

    # Aggregation Configuration
    http_timeout: float = Field(default=5.0, gt=0, description="HTTP request timeout in seconds")
    adapter_timeout: float = Field(
        default=8.0,
        gt=0,
        description="Upper bound for one adapter call, scraping included",
    )
    source_overfetch_factor: int = Field(
        default=2,
        ge=1,
        description="Multiplier on the target count requested from providers",
    )
    source_mix: dict[str, float] = Field(
        default_factory=lambda: {
            "newsapi": 0.30,
            "newsdata": 0.25,
            "pa_media": 0.20,
            "youtube": 0.15,
            "brave": 0.10,
        },
        description="Target fraction of the page for each source",
    )

    # Content Scraper Configuration
    scraper_enabled: bool = Field(default=True, description="Enrich truncated content")
    scraper_timeout: float = Field(default=3.0, gt=0, description="Page fetch timeout in seconds")
    scraper_budget: float = Field(
        default=2.5,
        gt=0,
        description="Upper bound for all scraping in one adapter call; unfinished pages are skipped",
    )
    scraper_max_articles: int = Field(
        default=10,
        ge=0,
        description="Maximum articles scraped per adapter call",
    )
    scraper_min_content_length: int = Field(
        default=400,
        ge=0,
        description="Native content shorter than this is scraped",
    )
    scraper_user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        description="User agent sent when scraping article pages",
    )

    # Request Defaults
    default_country: str = Field(default="gb", description="Country used when none is sent")
    default_page_size: int = Field(default=20, ge=1, description="Page size used when none is sent")
    max_page_size: int = Field(default=100, ge=1, description="Largest accepted page size")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json or text)")
    log_file: str = Field(
        default="logs/newsdeck.log",
        description="Log file path",
    )
    log_max_bytes: int = Field(
        default=10485760,
        description="Maximum log file size in bytes",
    )
    log_backup_count: int = Field(default=5, description="Number of log backup files")

    # API Configuration
    api_title: str = Field(
        default="NewsDeck Aggregation Service",
        description="API title",
    )
    api_version: str = Field(default="1.0.0", description="API version")
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    api_cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="CORS allowed origins",
    )
    api_cors_allow_methods: list[str] = Field(
        default_factory=lambda: ["*"],
        description="CORS allowed methods",
    )
    api_cors_allow_headers: list[str] = Field(
        default_factory=lambda: ["*"],
        description="CORS allowed headers",
    )

    # Environment
    environment: str = Field(default="development", description="Environment name")

    @field_validator("source_mix", mode="before")
    @classmethod
    def parse_source_mix(cls, v: Any) -> dict[str, float]:
        """Parse the source mix from JSON string or dict."""
        if isinstance(v, str):
            return json.loads(v)  # type: ignore[no-any-return]
        return v  # type: ignore[no-any-return]

    @field_validator(
        "pa_media_api_keys",
        "api_cors_origins",
        "api_cors_allow_methods",
        "api_cors_allow_headers",
        mode="before",
    )
    @classmethod
    def parse_string_list(cls, v: Any) -> list[str]:
        """Parse list settings from JSON string or list."""
        if isinstance(v, str):
            return json.loads(v)  # type: ignore[no-any-return]
        return v  # type: ignore[no-any-return]

    @model_validator(mode="after")
    def check_timeout_budget(self) -> "Settings":
        """Provider call plus scraping must fit inside the adapter timeout."""
        if self.http_timeout + self.scraper_budget >= self.adapter_timeout:
            raise ValueError(
                f"http_timeout ({self.http_timeout}s) + scraper_budget ({self.scraper_budget}s) "
                f"must be below adapter_timeout ({self.adapter_timeout}s)"
            )
        return self


# Global settings instance
settings = Settings()
