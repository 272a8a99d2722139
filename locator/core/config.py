"""Application configuration."""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Environment variables will be loaded and validated using Pydantic.
    """

    app_name: str = "Marketplace Locator"
    version: str = "0.1.0"
    api_prefix: str = "/api/v1"

    # CORS Settings
    cors_origins: list[str] = ["*"]  # Default to allow all in development
    cors_allow_credentials: bool = False

    # Redis Settings
    REDIS_URL: str = "redis://localhost:6379"

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # Country the gazetteer describes
    LOCATION_COUNTRY_NAME: str = "Libya"
    LOCATION_COUNTRY_ALIASES: list[str] = Field(
        default=["Libya", "ليبيا"],
        description="Tokens that identify the country inside upstream display names",
    )

    # Address resolution
    LOCATION_LANGUAGE: str = "en"
    LOCATION_ZOOM: int = Field(default=10, ge=0, le=18)
    LOCATION_REVERSE_PROXY_URL: str = "http://localhost:8000/api/v1/geo/reverse"
    LOCATION_REVERSE_TIMEOUT: float = Field(default=5.0, gt=0)
    LOCATION_GAZETTEER_THRESHOLD: float = Field(default=0.5, gt=0)
    LOCATION_LATITUDE_BANDS: list[tuple[float, str]] = Field(
        default=[(32.0, "Northern Libya"), (27.0, "Central Libya")],
        description="Descending (latitude, label) breakpoints for the coordinate fallback",
    )
    LOCATION_DEFAULT_BAND: str = "Southern Libya"

    # Resolution cache
    LOCATION_CACHE_ENABLED: bool = True
    LOCATION_CACHE_BACKEND: Literal["memory", "redis"] = "memory"
    LOCATION_CACHE_TTL: int = Field(default=86400, ge=0)  # 1 day

    # Fast profile: one quick attempt, cached readings welcome
    FAST_TIMEOUT: float = Field(default=5.0, gt=0)
    FAST_MAX_ATTEMPTS: int = Field(default=1, ge=1)
    FAST_RETRY_DELAY: float = Field(default=0.0, ge=0)
    FAST_GOOD_RADIUS: float = Field(default=50.0, ge=0)
    FAST_ACCEPTABLE_RADIUS: float = Field(default=100.0, ge=0)
    FAST_MAXIMUM_AGE: float = Field(default=60.0, ge=0)

    # Precise profile: several fresh high-accuracy attempts
    PRECISE_TIMEOUT: float = Field(default=15.0, gt=0)
    PRECISE_MAX_ATTEMPTS: int = Field(default=3, ge=1)
    PRECISE_RETRY_DELAY: float = Field(default=2.0, ge=0)
    PRECISE_GOOD_RADIUS: float = Field(default=20.0, ge=0)
    PRECISE_ACCEPTABLE_RADIUS: float = Field(default=50.0, ge=0)
    PRECISE_MAXIMUM_AGE: float = Field(default=0.0, ge=0)

    # Upstream reverse geocoder behind the proxy endpoint
    NOMINATIM_USER_AGENT: str = "marketplace-locator"
    NOMINATIM_RATE_LIMIT: float = Field(default=1.1, ge=0)
    NOMINATIM_TIMEOUT: int = Field(default=5, gt=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",  # Allow extra fields in environment
    )

    @model_validator(mode="after")
    def validate_origins(self) -> "Settings":
        """Validate CORS origins."""
        if self.cors_origins == ["*"]:
            self.cors_origins = [
                "http://localhost",
                "http://localhost:8000",
                "http://localhost:3000",
            ]
        return self

    @model_validator(mode="after")
    def validate_radii(self) -> "Settings":
        """Ensure each profile's good radius does not exceed its acceptable radius."""
        if self.FAST_GOOD_RADIUS > self.FAST_ACCEPTABLE_RADIUS:
            raise ValueError("FAST_GOOD_RADIUS must not exceed FAST_ACCEPTABLE_RADIUS")
        if self.PRECISE_GOOD_RADIUS > self.PRECISE_ACCEPTABLE_RADIUS:
            raise ValueError(
                "PRECISE_GOOD_RADIUS must not exceed PRECISE_ACCEPTABLE_RADIUS"
            )
        return self

    @model_validator(mode="after")
    def use_test_configs_for_testing(self) -> "Settings":
        """Use a separate Redis database for tests to ensure isolation."""
        import os

        if os.getenv("TESTING") == "true":
            test_redis_url = os.getenv("TEST_REDIS_URL")
            if test_redis_url:
                self.REDIS_URL = test_redis_url
            elif "/0" in self.REDIS_URL:
                # Switch from database 0 to database 1 for tests
                self.REDIS_URL = self.REDIS_URL.replace("/0", "/1")
            elif not self.REDIS_URL.endswith("/1"):
                if self.REDIS_URL.endswith("/"):
                    self.REDIS_URL = self.REDIS_URL + "1"
                else:
                    self.REDIS_URL = self.REDIS_URL + "/1"
        return self


# Create settings instance
settings = Settings()
