from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Consorcio CRM Processes"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True  # Set to False in production

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_echo: bool = False
    auto_migrate: bool = False  # Run alembic upgrade head on startup

    # Shutdown
    shutdown_grace_period: int = 30

    # Auth (tokens are issued by the identity provider, we only verify them)
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Metrics
    metrics_api_key: str | None = None  # If set, /metrics requires this key

    # SLA: calendar-day boundaries for "due today" are computed in this zone
    sla_timezone: str = "America/Sao_Paulo"

    # Process listing
    default_page_size: int = 10
    min_page_size: int = 5
    max_page_size: int = 50

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if v == "change-this-to-a-secure-random-string":
            raise ValueError(
                "JWT_SECRET_KEY must be changed from default value. "
                "Generate a secure secret with: openssl rand -hex 32"
            )
        if len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """Validate CORS origins - reject wildcards when credentials are used."""
        for origin in v:
            if origin == "*":
                raise ValueError(
                    "CORS wildcard '*' is not allowed when allow_credentials=True. "
                    "Specify explicit origins instead."
                )
        return v

    @field_validator("sla_timezone")
    @classmethod
    def validate_sla_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"SLA_TIMEZONE '{v}' is not a known IANA time zone") from e
        return v

    @field_validator("max_page_size")
    @classmethod
    def validate_page_bounds(cls, v: int, info: ValidationInfo) -> int:
        minimum = info.data.get("min_page_size", 1)
        if v < minimum:
            raise ValueError("MAX_PAGE_SIZE must be greater than or equal to MIN_PAGE_SIZE")
        return v

    @property
    def sla_zone(self) -> ZoneInfo:
        return ZoneInfo(self.sla_timezone)


@lru_cache
def get_settings() -> Settings:
    return Settings()
