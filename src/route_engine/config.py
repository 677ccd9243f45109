"""Application configuration and settings management."""

from typing import Annotated, Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Route Optimization Engine"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level for the service.")

    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="Server-side key for the Google Maps Geocoding and Distance Matrix APIs.",
    )
    maps_base_url: str = Field(
        default="https://maps.googleapis.com/maps/api",
        description="Base URL of the Google Maps web services.",
    )
    navigation_base_url: str = Field(
        default="https://www.google.com/maps/dir",
        description="Base URL used to render multi-stop navigation links.",
    )
    geocoding_region: str = Field(
        default="in",
        description="ccTLD region bias applied to every geocoding lookup.",
    )
    travel_mode: Literal["driving", "walking", "bicycling", "transit"] = Field(
        default="driving",
        description="Travel mode requested from the distance matrix provider.",
    )
    geocoding_max_concurrency: int = Field(default=10, ge=1)
    provider_timeout_seconds: float = Field(default=10.0, gt=0.0)
    optimization_timeout_seconds: float = Field(default=30.0, gt=0.0)
    health_check_address: str = Field(
        default="Connaught Place, New Delhi",
        description="Address geocoded by the provider health probe.",
    )
    health_check_cache_seconds: float = Field(default=300.0, ge=0.0)

    api_tokens: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(),
        description="Accepted bearer tokens. When empty any non-blank bearer token is accepted.",
    )
    frontend_allowed_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("api_tokens", "frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            # Try comma-separated
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
