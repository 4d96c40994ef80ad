# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_TRUTHY = ("1", "true", "yes", "on")
_PLACEHOLDER_SECRETS = ("", "dev", "development", "test", "change-me")


def _as_bool(value: str | bool) -> bool:
    if isinstance(value, str):
        return value.lower() in _TRUTHY
    return bool(value)


class _Group(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_by_name=True,
    )


class DatabaseConfig(_Group):
    url: str = Field("sqlite:///instance/showroom.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")


class SecurityConfig(_Group):
    # Session cookie
    cookie_name: str = Field("token", alias="COOKIE_NAME")
    cookie_secure: bool = Field(False, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("Strict", alias="COOKIE_SAMESITE")
    session_ttl: int = Field(3600, ge=1, alias="SESSION_TTL")
    revoke_on_logout: bool = Field(False, alias="SESSION_REVOKE_ON_LOGOUT")

    password_hash_method: str = Field("scrypt", alias="PASSWORD_HASH_METHOD")

    # CORS
    allowed_origins: Annotated[list[str], NoDecode] = Field(["*"], alias="ALLOWED_ORIGINS")

    # Rate limiting
    enable_rate_limit: bool = Field(True, alias="ENABLE_RATE_LIMIT")
    rate_limit_requests: int = Field(10, ge=1, alias="RL_LIMIT")
    rate_limit_window: float = Field(60.0, ge=0.1, alias="RL_WINDOW")

    # Login lockout
    login_max_attempts: int = Field(5, ge=1, alias="LOGIN_MAX_ATTEMPTS")
    login_lockout_seconds: float = Field(15 * 60, ge=1.0, alias="LOGIN_LOCKOUT_SECONDS")

    # HSTS
    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator(
        "cookie_secure", "revoke_on_logout", "enable_rate_limit", "enable_hsts", mode="before"
    )
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        return _as_bool(value)


class AssetConfig(_Group):
    backend: Literal["local", "cloudinary"] = Field("local", alias="ASSET_BACKEND")
    folder: str = Field("showroom", alias="ASSET_FOLDER")

    local_root: Path = Field(Path("instance/assets"), alias="ASSET_LOCAL_ROOT")
    public_base_url: str = Field("/assets", alias="ASSET_PUBLIC_BASE_URL")

    cloudinary_cloud_name: str | None = Field(None, alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: str | None = Field(None, alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: str | None = Field(None, alias="CLOUDINARY_API_SECRET")
    cloudinary_upload_prefix: str | None = Field(None, alias="CLOUDINARY_UPLOAD_PREFIX")


class CatalogConfig(_Group):
    max_images: int = Field(10, ge=1, alias="CATALOG_MAX_IMAGES")
    upload_workers: int = Field(4, ge=1, alias="CATALOG_UPLOAD_WORKERS")
    upload_policy: Literal["partial", "strict"] = Field("partial", alias="CATALOG_UPLOAD_POLICY")


class ResilienceConfig(_Group):
    default_timeout: float = Field(15.0, ge=0.1, alias="RESILIENCE_TIMEOUT")
    max_retries: int = Field(2, ge=0, alias="RESILIENCE_RETRIES")
    backoff_base: float = Field(0.5, ge=0.0, alias="RESILIENCE_BACKOFF_BASE")
    backoff_cap: float = Field(8.0, ge=0.0, alias="RESILIENCE_BACKOFF_CAP")
    circuit_fail_threshold: int = Field(5, ge=1, alias="RESILIENCE_CIRCUIT_THRESHOLD")
    circuit_reset_timeout: float = Field(60.0, ge=1.0, alias="RESILIENCE_CIRCUIT_RESET")


class ObservabilityConfig(_Group):
    metrics_enabled: bool = Field(True, alias="METRICS_ENABLED")
    service_name: str = Field("showroom-backend", alias="SERVICE_NAME")

    @field_validator("metrics_enabled", mode="before")
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        return _as_bool(value)


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_file: Path | None = Field(None, alias="LOG_FILE")

    # Optional unattended bootstrap of the administrator on startup
    admin_username: str | None = Field(None, alias="ADMIN_USERNAME")
    admin_password: str | None = Field(None, alias="ADMIN_PASSWORD")

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    assets: AssetConfig = Field(default_factory=AssetConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    resilience: ResilienceConfig = Field(default_factory=ResilienceConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
        validate_by_name=True,
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        return _as_bool(value)

    @model_validator(mode="after")
    def _reject_insecure_production_secret(self) -> "AppConfig":
        if self.is_production() and self.secret_key in _PLACEHOLDER_SECRETS:
            raise ValueError(
                "SECRET_KEY signs admin session tokens and must be a strong random value "
                "in production (e.g. secrets.token_urlsafe(32))"
            )
        return self

    def security_warnings(self) -> list[str]:
        """Hardening gaps worth a warning at startup; empty outside production."""
        if not self.is_production():
            return []
        checks = (
            (not self.security.cookie_secure, "COOKIE_SECURE is off (forced on in production)"),
            ("*" in self.security.allowed_origins, "CORS allows any origin"),
            (not self.security.enable_hsts, "HSTS is disabled"),
            (self.assets.backend == "local", "images are stored on the local filesystem"),
        )
        return [message for failed, message in checks if failed]

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")

    def session_cookie_secure(self) -> bool:
        return self.security.cookie_secure or self.is_production()


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()


__all__ = [
    "AppConfig",
    "AssetConfig",
    "CatalogConfig",
    "DatabaseConfig",
    "ObservabilityConfig",
    "ResilienceConfig",
    "SecurityConfig",
    "load_config",
]
