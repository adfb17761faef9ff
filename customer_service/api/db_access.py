# This file wraps database access so the API can call stored procedures with explicit, typed parameters.
# It exists to keep SQL rendering and cursor handling out of the data-access controllers.
# Procedures returning rows hand them back through one output refcursor fetched in the same transaction.
# The helper also keeps the connectivity probe and the optional request-log writes used by the app.

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_PROC_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z_][a-zA-Z0-9_]*)?$")

DEFAULT_CURSOR_PARAM_NAME = "o_ref_cur"


class ParamType(str, Enum):
    NUMBER = "number"
    STRING = "string"
    DATE = "date"
    REF_CURSOR = "ref_cursor"


class ParamDirection(str, Enum):
    INPUT = "input"
    OUTPUT = "output"


@dataclass(frozen=True)
class ProcParam:
    """One named, typed, directional value bound to a procedure call."""

    name: str
    param_type: ParamType
    value: Any = None
    direction: ParamDirection = ParamDirection.INPUT

    @classmethod
    def output_cursor(cls, name: str = DEFAULT_CURSOR_PARAM_NAME) -> "ProcParam":
        return cls(name=name, param_type=ParamType.REF_CURSOR, direction=ParamDirection.OUTPUT)

    @property
    def is_cursor(self) -> bool:
        return self.param_type is ParamType.REF_CURSOR and self.direction is ParamDirection.OUTPUT


class ProcedureExecutor(Protocol):
    """Call surface the data-access controllers depend on."""

    def execute_proc_return_rows(
        self, proc_name: str, params: Sequence[ProcParam]
    ) -> list[dict[str, Any]]: ...

    def execute_proc(self, proc_name: str, params: Sequence[ProcParam]) -> int: ...


def build_proc_call(proc_name: str, params: Sequence[ProcParam]) -> tuple[str, dict[str, Any]]:
    """Render `SELECT package.proc(:p1, ...)` with bind values in parameter order.

    Input parameters bind their value. The output cursor binds its own name,
    which the procedure uses as the portal name to open the result set on.
    """

    if not _PROC_NAME_RE.match(proc_name):
        raise ValueError(f"Unsafe procedure name: {proc_name!r}")

    placeholders: list[str] = []
    bind_values: dict[str, Any] = {}
    for param in params:
        if not _IDENTIFIER_RE.match(param.name):
            raise ValueError(f"Unsafe parameter name: {param.name!r}")
        if param.name in bind_values:
            raise ValueError(f"Duplicate parameter name: {param.name!r}")
        if param.direction is ParamDirection.OUTPUT and not param.is_cursor:
            raise ValueError(
                f"Output parameter {param.name!r} must be a ref cursor; scalar outputs are not supported."
            )
        placeholders.append(f":{param.name}")
        bind_values[param.name] = param.name if param.is_cursor else param.value

    return f"SELECT {proc_name}({', '.join(placeholders)})", bind_values


class DatabaseClient:
    """Minimal SQLAlchemy wrapper for stored-procedure calls."""

    def __init__(self, *, database_url: str) -> None:
        self._engine: Engine = create_engine(database_url, pool_pre_ping=True, future=True)
        self._request_log_table_available: bool | None = None

    def can_connect(self) -> bool:
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def table_exists(self, table_name: str) -> bool:
        self._validate_identifier(table_name)
        query = text("SELECT to_regclass(:table_name) IS NOT NULL AS exists_flag")
        with self._engine.connect() as connection:
            result = connection.execute(query, {"table_name": table_name}).scalar_one()
        return bool(result)

    def execute_proc_return_rows(
        self, proc_name: str, params: Sequence[ProcParam]
    ) -> list[dict[str, Any]]:
        """Call a procedure that opens one output cursor and fetch all of its rows."""

        cursor_params = [param for param in params if param.is_cursor]
        if len(cursor_params) != 1:
            raise ValueError(
                f"{proc_name} needs exactly one output cursor parameter, got {len(cursor_params)}."
            )
        query, bind_values = build_proc_call(proc_name, params)
        fetch_query = f'FETCH ALL FROM "{cursor_params[0].name}"'

        # The portal only lives until commit, so call and fetch share one transaction.
        with self._engine.begin() as connection:
            connection.execute(text(query), bind_values)
            rows = connection.execute(text(fetch_query)).mappings().all()
        return [dict(row) for row in rows]

    def execute_proc(self, proc_name: str, params: Sequence[ProcParam]) -> int:
        """Call a procedure without a cursor and return its affected-row count."""

        if any(param.is_cursor for param in params):
            raise ValueError(f"{proc_name} is executed without an output cursor.")
        query, bind_values = build_proc_call(proc_name, params)
        with self._engine.begin() as connection:
            result = connection.execute(text(query), bind_values).scalar()
        return int(result) if result is not None else 0

    def log_request(
        self,
        *,
        table_name: str,
        request_id: str,
        path: str,
        method: str,
        status_code: int,
        duration_ms: float,
        user_name: str | None = None,
        client_ip: str | None = None,
    ) -> None:
        safe_table = self._validate_identifier(table_name)
        if self._request_log_table_available is not True:
            self._request_log_table_available = self.table_exists(safe_table)
        if not self._request_log_table_available:
            return

        query = f"""
        INSERT INTO {safe_table}
            (request_id, path, method, status_code, duration_ms, user_name, client_ip, created_at)
        VALUES
            (:request_id, :path, :method, :status_code, :duration_ms, :user_name, :client_ip, NOW())
        """
        with self._engine.begin() as connection:
            connection.execute(
                text(query),
                {
                    "request_id": request_id,
                    "path": path,
                    "method": method,
                    "status_code": status_code,
                    "duration_ms": duration_ms,
                    "user_name": user_name,
                    "client_ip": client_ip,
                },
            )

    def _validate_identifier(self, identifier: str) -> str:
        if not _IDENTIFIER_RE.match(identifier):
            raise ValueError(f"Unsafe SQL identifier: {identifier!r}")
        return identifier
