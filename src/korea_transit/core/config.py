"""Runtime configuration loaded from the environment and `.env`."""

import logging
from dataclasses import dataclass

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    BIKE_DATASET,
    BUS_API_URL,
    BUS_STOP_DATASET,
    DEFAULT_MAX_SESSIONS,
    DEFAULT_SESSION_TTL,
    SEOUL_DATA_URL,
    SEOUL_SUBWAY_URL,
    SUBWAY_ARRIVAL_DATASET,
    SUBWAY_STATUS_DATASET,
)
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings.

    `SEOUL_API_KEY` is required by every tool. `DATA_GO_KR_API_KEY` only
    backs bus arrivals; leaving it empty disables that one tool.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    seoul_api_key: str = Field(
        ..., min_length=1, description="Seoul open-data portal API key"
    )
    data_go_kr_api_key: str = Field(
        "", description="Bus arrival API key (data.go.kr)"
    )
    host: str = Field("0.0.0.0", description="HTTP bind address")
    port: int = Field(3000, ge=1, le=65535, description="HTTP port")
    log_level: str = Field("INFO", description="Logging level name")
    session_ttl_seconds: float = Field(
        DEFAULT_SESSION_TTL, gt=0, description="Idle time before a session expires"
    )
    max_sessions: int = Field(
        DEFAULT_MAX_SESSIONS, ge=1, description="Maximum tracked HTTP sessions"
    )
    environment: str = Field("development", description="Deployment environment")

    @property
    def bus_arrival_enabled(self) -> bool:
        return bool(self.data_go_kr_api_key)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def endpoints(self) -> "Endpoints":
        """Build upstream endpoint URLs for these credentials."""
        key = self.seoul_api_key
        return Endpoints(
            subway_arrival=f"{SEOUL_SUBWAY_URL}/{key}/json/{SUBWAY_ARRIVAL_DATASET}",
            subway_status=f"{SEOUL_DATA_URL}/{key}/json/{SUBWAY_STATUS_DATASET}",
            bus_stop=f"{SEOUL_DATA_URL}/{key}/json/{BUS_STOP_DATASET}",
            bike_station=f"{SEOUL_DATA_URL}/{key}/json/{BIKE_DATASET}",
            bus_arrival=f"{BUS_API_URL}/stationinfo/getStationByUid",
            bus_service_key=self.data_go_kr_api_key,
        )

    def masked(self) -> dict[str, str]:
        """Settings as display strings with API keys masked."""
        data = self.model_dump()
        for name in ("seoul_api_key", "data_go_kr_api_key"):
            data[name] = mask_secret(data[name])
        return {name: str(value) for name, value in data.items()}


@dataclass(frozen=True)
class Endpoints:
    """Base URLs for each upstream dataset, index ranges not included."""

    subway_arrival: str
    subway_status: str
    bus_stop: str
    bike_station: str
    bus_arrival: str
    bus_service_key: str = ""


def mask_secret(value: str) -> str:
    if not value:
        return "(not set)"
    if len(value) <= 6:
        return "*" * len(value)
    return f"{value[:3]}{'*' * (len(value) - 6)}{value[-3:]}"


def load_settings(**overrides: object) -> Settings:
    """Load settings, failing with ConfigurationError when the portal key is missing."""
    try:
        settings = Settings(**overrides)  # type: ignore[arg-type]
    except PydanticValidationError as e:
        missing = [
            str(err["loc"][0]).upper() for err in e.errors() if err.get("loc")
        ]
        raise ConfigurationError(
            f"필수 환경 변수가 설정되지 않았거나 잘못되었습니다: {', '.join(missing)}\n"
            ".env 파일을 확인하거나 환경 변수를 설정해주세요."
        ) from e

    if not settings.bus_arrival_enabled:
        logger.warning(
            "DATA_GO_KR_API_KEY is not set; bus arrival lookups are disabled"
        )
    return settings
