"""Configuration module for the field-services backend."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlparse

from dotenv import load_dotenv

from app.core.enums import ExistingCustomerPolicy
from app.core.exceptions import ConfigurationError

load_dotenv()

DEFAULT_DSNY_API_URL = "https://a827-donatenyc.nyc.gov/DSNYGeoCoder/api/DSNYCollection"


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """Runtime configuration with validation."""

    APP_NAME: str
    APP_VERSION: str
    ENV: str
    DEBUG: bool
    DATABASE_URL: str
    DB_CONNECTIVITY_REQUIRED: bool
    EXISTING_CUSTOMER_POLICY: str
    DSNY_API_URL: str
    DSNY_TIMEOUT_SECONDS: float
    API_HOST: str
    API_PORT: int
    API_PREFIX: str
    LOG_LEVEL: str
    LOG_FILE: str

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    @property
    def existing_customer_policy(self) -> ExistingCustomerPolicy:
        return ExistingCustomerPolicy(self.EXISTING_CUSTOMER_POLICY)


def _build_config(env: str | None = None) -> Config:
    resolved_env = (env or os.getenv("ENV", "development")).strip().lower()
    debug = _as_bool(os.getenv("DEBUG"), default=(resolved_env != "production"))

    config = Config(
        APP_NAME="FieldOps",
        APP_VERSION=os.getenv("APP_VERSION", "1.0.0"),
        ENV=resolved_env,
        DEBUG=debug if resolved_env != "production" else False,
        DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./fieldops.db"),
        DB_CONNECTIVITY_REQUIRED=_as_bool(
            os.getenv("DB_CONNECTIVITY_REQUIRED"), default=(resolved_env == "production")
        ),
        EXISTING_CUSTOMER_POLICY=os.getenv(
            "EXISTING_CUSTOMER_POLICY", ExistingCustomerPolicy.STAGE_ONLY.value
        ).strip().lower(),
        DSNY_API_URL=os.getenv("DSNY_API_URL", DEFAULT_DSNY_API_URL),
        DSNY_TIMEOUT_SECONDS=float(os.getenv("DSNY_TIMEOUT_SECONDS", "10")),
        API_HOST=os.getenv("API_HOST", "0.0.0.0"),
        API_PORT=int(os.getenv("API_PORT", "8000")),
        API_PREFIX=os.getenv("API_PREFIX", "/api/v1"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        LOG_FILE=os.getenv("LOG_FILE", ""),
    )
    _validate_config(config)
    return config


def _validate_database_url(database_url: str) -> None:
    parsed = urlparse(database_url)
    if parsed.scheme not in {"sqlite", "postgresql", "postgresql+psycopg2"}:
        raise ConfigurationError(
            "DATABASE_URL must use sqlite:// or postgresql:// style URL."
        )
    if parsed.scheme.startswith("postgresql") and not parsed.hostname:
        raise ConfigurationError("PostgreSQL DATABASE_URL is missing hostname.")


def _validate_config(config: Config) -> None:
    _validate_database_url(config.DATABASE_URL)

    allowed_policies = {policy.value for policy in ExistingCustomerPolicy}
    if config.EXISTING_CUSTOMER_POLICY not in allowed_policies:
        raise ConfigurationError(
            f"EXISTING_CUSTOMER_POLICY must be one of {sorted(allowed_policies)}."
        )
    if not config.DSNY_API_URL.startswith(("http://", "https://")):
        raise ConfigurationError("DSNY_API_URL must be an http(s) URL.")
    if config.DSNY_TIMEOUT_SECONDS <= 0:
        raise ConfigurationError("DSNY_TIMEOUT_SECONDS must be > 0.")
    if config.LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigurationError("LOG_LEVEL must be one of DEBUG/INFO/WARNING/ERROR/CRITICAL.")
    if config.is_production and "change_me" in config.DATABASE_URL.lower():
        raise ConfigurationError("Production DATABASE_URL uses placeholder credentials.")


@lru_cache(maxsize=8)
def get_config(env: str | None = None) -> Config:
    """Get validated configuration for the requested environment."""
    return _build_config(env)
