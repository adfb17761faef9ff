# This file provides shared helpers for API endpoint tests.
# It exists so tests can override service dependencies without touching real databases.
# The in-memory procedure database mimics the `pkg_customer` package behind the DatabaseClient call surface.
# Centralized test wiring keeps API tests small and focused on behavior.

from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError, ProgrammingError

from customer_service.api.api_config import ApiConfig
from customer_service.api.app import app
from customer_service.api.db_access import ProcParam
from customer_service.api.dependencies import (
    get_config,
    get_customer_service,
    get_database_client,
)

TEST_JWT_SECRET = "test-secret-key-with-enough-length-for-hs256"


def build_test_config(*, auth_enabled: bool = True, **overrides: Any) -> ApiConfig:
    """Create deterministic API config for tests."""

    values: dict[str, Any] = {
        "api_name": "Test Customer API",
        "api_version_path": "/api/v1",
        "environment": "test",
        "database_url": "sqlite+pysqlite:///:memory:",
        "app_version": "0.1.0",
        "enable_request_logging": False,
        "allowed_origins": [],
        "customer_route_prefix": "/customers",
        "customer_db_package": "pkg_customer",
        "auth_enabled": auth_enabled,
        "jwt_secret": TEST_JWT_SECRET,
        "read_roles": {"reader", "editor"},
        "write_roles": {"editor"},
    }
    values.update(overrides)
    return ApiConfig(**values)


def make_token(
    sub: str = "alice",
    *,
    roles: Sequence[str] = ("editor",),
    expires_in: timedelta = timedelta(minutes=5),
    secret: str = TEST_JWT_SECRET,
) -> str:
    claims = {
        "sub": sub,
        "roles": list(roles),
        "exp": datetime.now(tz=UTC) + expires_in,
    }
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_headers(sub: str = "alice", *, roles: Sequence[str] = ("editor",)) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(sub, roles=roles)}"}


class FakeProcedureDatabase:
    """In-memory stand-in for the `pkg_customer` stored procedures."""

    def __init__(
        self,
        *,
        package: str = "pkg_customer",
        db_user: str = "app_writer",
        connected: bool = True,
    ) -> None:
        self.package = package
        self.db_user = db_user
        self.connected = connected
        self.calls: list[tuple[str, list[ProcParam]]] = []
        self.fail_with: Exception | None = None
        self._rows: dict[int, dict[str, Any]] = {}
        self._next_id = 1
        self._ticks = 0
        self._lock = threading.Lock()

    def can_connect(self) -> bool:
        return self.connected

    def log_request(self, **_: Any) -> None:
        return None

    def execute_proc_return_rows(
        self, proc_name: str, params: Sequence[ProcParam]
    ) -> list[dict[str, Any]]:
        with self._lock:
            self.calls.append((proc_name, list(params)))
            if self.fail_with is not None:
                raise self.fail_with
            if not params or not params[-1].is_cursor:
                raise ProgrammingError(proc_name, {}, Exception("missing output cursor"))
            handler = self._handler(proc_name)
            values = {param.name: param.value for param in params if not param.is_cursor}
            return [dict(row) for row in handler(values)]

    def execute_proc(self, proc_name: str, params: Sequence[ProcParam]) -> int:
        with self._lock:
            self.calls.append((proc_name, list(params)))
            if self.fail_with is not None:
                raise self.fail_with
            handler = self._handler(proc_name)
            return handler({param.name: param.value for param in params})

    def _handler(self, proc_name: str) -> Any:
        package, _, proc = proc_name.partition(".")
        handler = getattr(self, f"_proc_{proc}", None)
        if package != self.package or handler is None:
            raise ProgrammingError(
                proc_name, {}, Exception(f"function {proc_name} does not exist")
            )
        return handler

    def _now(self) -> datetime:
        self._ticks += 1
        return datetime(2026, 1, 1, tzinfo=UTC) + timedelta(seconds=self._ticks)

    def _require_names(self, proc_name: str, values: dict[str, Any]) -> None:
        for column in ("i_first_name", "i_last_name"):
            if not values.get(column):
                raise IntegrityError(
                    proc_name,
                    values,
                    Exception(f'null value in column "{column[2:]}" violates not-null constraint'),
                )

    def _proc_sel_customer_list(self, values: dict[str, Any]) -> list[dict[str, Any]]:
        term = values["i_last_name"] or ""
        return [row for _, row in sorted(self._rows.items()) if term in row["last_name"]]

    def _proc_sel_customer(self, values: dict[str, Any]) -> list[dict[str, Any]]:
        row = self._rows.get(values["i_customer_id"])
        return [row] if row is not None else []

    def _proc_ins_customer(self, values: dict[str, Any]) -> list[dict[str, Any]]:
        self._require_names("ins_customer", values)
        customer_id = self._next_id
        self._next_id += 1
        self._rows[customer_id] = {
            "customer_id": customer_id,
            "first_name": values["i_first_name"],
            "last_name": values["i_last_name"],
            "updated_by": self.db_user,
            "updated_at": self._now(),
        }
        return [self._rows[customer_id]]

    def _proc_upd_customer(self, values: dict[str, Any]) -> list[dict[str, Any]]:
        self._require_names("upd_customer", values)
        row = self._rows.get(values["i_customer_id"])
        if row is None:
            return []
        row.update(
            first_name=values["i_first_name"],
            last_name=values["i_last_name"],
            updated_by=self.db_user,
            updated_at=self._now(),
        )
        return [row]

    def _proc_del_customer(self, values: dict[str, Any]) -> int:
        return 1 if self._rows.pop(values["i_customer_id"], None) is not None else 0


@contextmanager
def api_test_client(
    *,
    config: ApiConfig | None = None,
    db_client: Any | None = None,
    customer_service: Any | None = None,
    raise_server_exceptions: bool = True,
) -> Iterator[TestClient]:
    """Yield a TestClient with scoped dependency overrides."""

    resolved_config = config or build_test_config()

    app.dependency_overrides[get_config] = lambda: resolved_config
    if db_client is not None:
        app.dependency_overrides[get_database_client] = lambda: db_client
    if customer_service is not None:
        app.dependency_overrides[get_customer_service] = lambda: customer_service

    try:
        with TestClient(app, raise_server_exceptions=raise_server_exceptions) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
