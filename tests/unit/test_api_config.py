"""
Unit tests for API configuration loading and validation.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from customer_service.api.api_config import (
    DEFAULT_CUSTOMER_SERVICE_CLASS,
    ApiConfig,
    load_api_config,
)


def test_load_api_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_CUSTOMER_ROUTE_PREFIX", "/clients/")
    monkeypatch.setenv("API_CUSTOMER_DB_PACKAGE", "crm_customer")
    monkeypatch.setenv("API_READ_ROLES", "viewer, auditor")
    monkeypatch.setenv("API_AUTH_ENABLED", "yes")

    config = load_api_config(load_env=False)

    assert config.customer_route_prefix == "/clients"
    assert config.customer_db_package == "crm_customer"
    assert config.read_roles == {"viewer", "auditor"}
    assert config.write_roles == {"editor", "admin"}
    assert config.customer_service_class == DEFAULT_CUSTOMER_SERVICE_CLASS
    assert config.customer_base_path() == "/api/v1/clients"
    assert config.api_version_label() == "v1"


def test_load_api_config_requires_database_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)

    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        load_api_config(load_env=False)


def test_boolean_env_values_are_validated(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_AUTH_ENABLED", "maybe")

    with pytest.raises(ValueError, match="API_AUTH_ENABLED"):
        load_api_config(load_env=False)


def test_jwt_secret_required_only_when_auth_enabled() -> None:
    with pytest.raises(ValidationError, match="jwt_secret"):
        ApiConfig(database_url="sqlite://", auth_enabled=True, jwt_secret="")

    assert ApiConfig(database_url="sqlite://", auth_enabled=False).jwt_secret == ""


@pytest.mark.parametrize(
    "overrides",
    [
        {"customer_route_prefix": "customers"},
        {"customer_route_prefix": "/customers/{id}"},
        {"customer_db_package": "pkg; DROP SCHEMA public"},
        {"request_log_table_name": "log-table"},
        {"customer_service_class": "customer_service.api.services.CustomerDbController"},
        {"api_version_path": "api/v1"},
    ],
)
def test_unsafe_values_are_rejected(overrides: dict[str, str]) -> None:
    with pytest.raises(ValidationError):
        ApiConfig(database_url="sqlite://", auth_enabled=False, **overrides)


def test_server_bind_settings_are_left_to_the_hosting_server(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("API_HOST", "127.0.0.1")
    monkeypatch.setenv("API_PORT", "not-a-port")

    config = load_api_config(load_env=False)

    assert "host" not in ApiConfig.model_fields
    assert "port" not in ApiConfig.model_fields
    assert config.customer_base_path() == "/api/v1/customers"
