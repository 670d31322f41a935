from functools import lru_cache
from typing import List

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = Field(default="Salon Platform Analytics")
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )
    data_service_base_url: AnyHttpUrl | None = Field(
        default=None
    )
    data_service_timeout: float = Field(
        default=10.0
    )
    data_service_token: str | None = Field(
        default=None
    )
    use_mock_data: bool = Field(
        default=True
    )
    leaderboard_size: int = Field(
        default=10, ge=1
    )
    sales_lookback_days: int = Field(
        default=60, ge=1
    )
    performance_lookback_days: int = Field(
        default=30, ge=1
    )
    outlier_threshold_percent: float = Field(
        default=20.0, ge=0
    )

    model_config = SettingsConfigDict(env_prefix="ANALYTICS_", case_sensitive=False)

    @field_validator("cors_origins", mode="before")
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()
