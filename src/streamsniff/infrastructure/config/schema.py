"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


class ExtractionConfig(BaseModel):
    """Timing and behaviour of a single extraction request.

    All values configurable via YAML (extraction section) or ENV vars.
    """

    navigation_timeout_seconds: float = Field(
        default=15.0,
        description="Timeout for the initial page navigation.",
    )
    initial_wait_seconds: float = Field(
        default=2.0,
        description="Settle delay after navigation, before the first click.",
    )
    detection_window_seconds: float = Field(
        default=10.0,
        description="Wall-clock budget of the click loop.",
    )
    max_click_attempts: int = Field(
        default=6,
        description="Maximum number of click attempts.",
    )
    click_delay_seconds: float = Field(
        default=0.8,
        description="Pause between click attempts.",
    )
    early_exit_delay_seconds: float = Field(
        default=1.0,
        description="Grace wait after a master playlist was found.",
    )
    final_wait_seconds: float = Field(
        default=1.5,
        description="Final wait without interaction before ranking.",
    )

    outer_timeout_seconds: float = Field(
        default=50.0,
        description="Deadline for one extraction attempt.",
    )
    min_timeout_seconds: float = Field(
        default=5.0,
        description="Lower bound for a per-request timeout override.",
    )
    max_timeout_seconds: float = Field(
        default=120.0,
        description="Upper bound for a per-request timeout override.",
    )

    retry_count: int = Field(
        default=1,
        description="Retries after a failed attempt (fresh fingerprint each).",
    )
    retry_pause_seconds: float = Field(
        default=1.0,
        description="Fixed pause before a retry.",
    )

    aggressive: bool = Field(
        default=False,
        description="Also click a grid around the centre and probe the first iframe.",
    )
    scan_console: bool = Field(
        default=True,
        description="Scan console messages for manifest URLs.",
    )
    max_scan_bytes: int = Field(
        default=2_000_000,
        description="Largest response body scanned for embedded manifest URLs.",
    )

    @field_validator(
        "navigation_timeout_seconds",
        "detection_window_seconds",
        "outer_timeout_seconds",
        "min_timeout_seconds",
        "max_timeout_seconds",
        "max_click_attempts",
        "max_scan_bytes",
    )
    @classmethod
    def _validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("value must be > 0")
        return v

    @field_validator(
        "initial_wait_seconds",
        "click_delay_seconds",
        "early_exit_delay_seconds",
        "final_wait_seconds",
        "retry_count",
        "retry_pause_seconds",
    )
    @classmethod
    def _validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("value must be >= 0")
        return v

    @model_validator(mode="after")
    def _validate_timeout_bounds(self) -> "ExtractionConfig":
        if self.min_timeout_seconds > self.max_timeout_seconds:
            raise ValueError("min_timeout_seconds must be <= max_timeout_seconds")
        return self


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (playwright/pool/queue/cache/extraction/...).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="streamsniff", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # Playwright (YAML section: playwright.*)
    playwright_headless: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "playwright_headless",
            AliasPath("playwright", "headless"),
        ),
        description="Run Chromium headless.",
    )
    playwright_stealth: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "playwright_stealth",
            AliasPath("playwright", "stealth"),
        ),
        description="Apply playwright-stealth evasions to every extraction context.",
    )

    # Browser pool (YAML section: pool.*)
    pool_size: int = Field(
        default=2,
        validation_alias=AliasChoices(
            "pool_size",
            AliasPath("pool", "size"),
        ),
        description="Number of pre-warmed browsers.",
    )
    pool_init_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "pool_init_timeout_seconds",
            AliasPath("pool", "init_timeout_seconds"),
        ),
        description="How long acquire() waits for an in-progress warm-up.",
    )

    # Admission queue (YAML section: queue.*)
    queue_max_concurrent: int = Field(
        default=2,
        validation_alias=AliasChoices(
            "queue_max_concurrent",
            AliasPath("queue", "max_concurrent"),
        ),
        description="Extractions allowed to run at once.",
    )

    # Result cache (YAML section: cache.*)
    cache_ttl_seconds: int = Field(
        default=1800,
        validation_alias=AliasChoices(
            "cache_ttl_seconds",
            AliasPath("cache", "ttl_seconds"),
        ),
        description="Result cache TTL in seconds.",
    )
    cache_sweep_interval_seconds: int = Field(
        default=60,
        validation_alias=AliasChoices(
            "cache_sweep_interval_seconds",
            AliasPath("cache", "sweep_interval_seconds"),
        ),
        description="Interval of the expired-entry sweep.",
    )

    # Proxy relay (YAML section: proxy.*)
    proxy_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "proxy_timeout_seconds",
            AliasPath("proxy", "timeout_seconds"),
        ),
        description="Upstream timeout of the /proxy relay.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Extraction (YAML section: extraction.*)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)

    @field_validator(
        "pool_size",
        "pool_init_timeout_seconds",
        "queue_max_concurrent",
        "cache_ttl_seconds",
        "cache_sweep_interval_seconds",
        "proxy_timeout_seconds",
    )
    @classmethod
    def _validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("value must be > 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "playwright": {
                "headless": self.playwright_headless,
                "stealth": self.playwright_stealth,
            },
            "pool": {
                "size": self.pool_size,
                "init_timeout_seconds": self.pool_init_timeout_seconds,
            },
            "queue": {"max_concurrent": self.queue_max_concurrent},
            "cache": {
                "ttl_seconds": self.cache_ttl_seconds,
                "sweep_interval_seconds": self.cache_sweep_interval_seconds,
            },
            "proxy": {"timeout_seconds": self.proxy_timeout_seconds},
            "logging": {"level": self.log_level, "format": self.log_format},
            "extraction": self.extraction.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py creates EnvOverrides() to read STREAMSNIFF_* variables,
    keeps the values that were set and merges them over YAML/defaults
    before AppConfig is validated.

    Supported env var examples (flat, explicit):
    - STREAMSNIFF_POOL_SIZE
    - STREAMSNIFF_QUEUE_MAX_CONCURRENT
    - STREAMSNIFF_CACHE_TTL_SECONDS
    - STREAMSNIFF_EXTRACTION_RETRY_COUNT
    - STREAMSNIFF_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="STREAMSNIFF_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    playwright_headless: Optional[bool] = None
    playwright_stealth: Optional[bool] = None

    pool_size: Optional[int] = None
    pool_init_timeout_seconds: Optional[float] = None

    queue_max_concurrent: Optional[int] = None

    cache_ttl_seconds: Optional[int] = None
    cache_sweep_interval_seconds: Optional[int] = None

    proxy_timeout_seconds: Optional[float] = None

    extraction_outer_timeout_seconds: Optional[float] = None
    extraction_retry_count: Optional[int] = None
    extraction_aggressive: Optional[bool] = None
    extraction_scan_console: Optional[bool] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
