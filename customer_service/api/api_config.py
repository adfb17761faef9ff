# This file defines runtime settings for the API layer in one place.
# It exists so route prefixes, the stored-procedure package, and access rules can change without code edits.
# The config loader reads environment variables and applies safe defaults for local development.
# It also validates identifiers that end up inside SQL text so they cannot carry injected fragments.

from __future__ import annotations

import os
import re
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_ROUTE_PREFIX_RE = re.compile(r"^/[a-z0-9][a-z0-9_-]*$")

DEFAULT_CUSTOMER_SERVICE_CLASS = (
    "customer_service.api.services.customer_db_controller:CustomerDbController"
)


class ApiConfig(BaseModel):
    """Typed API runtime configuration."""

    model_config = ConfigDict(extra="ignore")

    api_name: str = "Customer Service API"
    api_version_path: str = "/api/v1"
    environment: str = "local"
    database_url: str
    app_version: str = "0.1.0"
    enable_request_logging: bool = False
    request_log_table_name: str = "api_request_log"
    allowed_origins: list[str] = Field(default_factory=list)
    customer_route_prefix: str = "/customers"
    customer_db_package: str = "pkg_customer"
    customer_service_class: str = DEFAULT_CUSTOMER_SERVICE_CLASS
    auth_enabled: bool = True
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_audience: str | None = None
    jwt_issuer: str | None = None
    read_roles: set[str] = Field(default_factory=lambda: {"reader", "editor", "admin"})
    write_roles: set[str] = Field(default_factory=lambda: {"editor", "admin"})
    trust_forwarded_headers: bool = False

    @field_validator("api_version_path")
    @classmethod
    def validate_api_version_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("api_version_path must start with '/'.")
        parts = [part for part in value.split("/") if part]
        if len(parts) < 2 or parts[-1].startswith("v") is False:
            raise ValueError("api_version_path must look like '/api/v1'.")
        return value.rstrip("/")

    @field_validator("customer_route_prefix")
    @classmethod
    def validate_route_prefix(cls, value: str) -> str:
        cleaned = value.rstrip("/")
        if not _ROUTE_PREFIX_RE.match(cleaned):
            raise ValueError("customer_route_prefix must be a single path segment like '/customers'.")
        return cleaned

    @field_validator("customer_db_package", "request_log_table_name")
    @classmethod
    def validate_identifier(cls, value: str) -> str:
        if not _IDENTIFIER_RE.match(value):
            raise ValueError(f"Unsafe SQL identifier: {value!r}")
        return value

    @field_validator("customer_service_class")
    @classmethod
    def validate_service_class_path(cls, value: str) -> str:
        module_name, sep, class_name = value.partition(":")
        if not sep or not module_name or not class_name:
            raise ValueError("customer_service_class must look like 'package.module:ClassName'.")
        return value

    @model_validator(mode="after")
    def validate_auth_settings(self) -> "ApiConfig":
        if self.auth_enabled and not self.jwt_secret:
            raise ValueError("jwt_secret is required when auth_enabled is true.")
        return self

    def api_version_label(self) -> str:
        return self.api_version_path.rstrip("/").split("/")[-1]

    def customer_base_path(self) -> str:
        return f"{self.api_version_path}{self.customer_route_prefix}"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "y", "on"}:
        return True
    if value in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be boolean-like, got {raw!r}")


def _env_list(name: str, default: list[str] | None = None) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default or [])
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_optional(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return raw.strip()


def load_api_config(*, load_env: bool = True) -> ApiConfig:
    """Load API configuration from `.env` and process environment."""

    if load_env:
        load_dotenv()

    config_values: dict[str, object] = {
        "api_name": os.getenv("API_NAME", "Customer Service API"),
        "api_version_path": os.getenv("API_VERSION_PATH", "/api/v1"),
        "environment": os.getenv("ENV", "local"),
        "database_url": os.getenv("DATABASE_URL", ""),
        "app_version": os.getenv("APP_VERSION", "0.1.0"),
        "enable_request_logging": _env_bool("API_ENABLE_REQUEST_LOGGING", False),
        "request_log_table_name": os.getenv("API_REQUEST_LOG_TABLE_NAME", "api_request_log"),
        "allowed_origins": _env_list("API_ALLOWED_ORIGINS", []),
        "customer_route_prefix": os.getenv("API_CUSTOMER_ROUTE_PREFIX", "/customers"),
        "customer_db_package": os.getenv("API_CUSTOMER_DB_PACKAGE", "pkg_customer"),
        "customer_service_class": os.getenv(
            "API_CUSTOMER_SERVICE_CLASS", DEFAULT_CUSTOMER_SERVICE_CLASS
        ),
        "auth_enabled": _env_bool("API_AUTH_ENABLED", True),
        "jwt_secret": os.getenv("API_JWT_SECRET", ""),
        "jwt_algorithm": os.getenv("API_JWT_ALGORITHM", "HS256"),
        "jwt_audience": _env_optional("API_JWT_AUDIENCE"),
        "jwt_issuer": _env_optional("API_JWT_ISSUER"),
        "read_roles": set(_env_list("API_READ_ROLES", ["reader", "editor", "admin"])),
        "write_roles": set(_env_list("API_WRITE_ROLES", ["editor", "admin"])),
        "trust_forwarded_headers": _env_bool("API_TRUST_FORWARDED_HEADERS", False),
    }
    if not config_values["database_url"]:
        raise RuntimeError("DATABASE_URL is required for API startup.")

    return ApiConfig.model_validate(config_values)


@lru_cache(maxsize=1)
def get_api_config() -> ApiConfig:
    """Cached accessor for API config."""

    return load_api_config()
