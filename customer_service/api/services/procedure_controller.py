# This file implements the shared mechanics of a stored-procedure data-access controller.
# It exists so each entity controller only declares its procedures, parameters, and row mapping.
# Every row-returning call gets one trailing output cursor and maps each row into a fresh record.
# Controllers are built once per call and keep no mutable state between calls.

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

from customer_service.api.db_access import DEFAULT_CURSOR_PARAM_NAME, ProcedureExecutor, ProcParam

RecordT = TypeVar("RecordT")

logger = logging.getLogger(__name__)


class InstanceScope(str, Enum):
    """How long one controller instance serves calls."""

    PER_CALL = "per_call"
    PER_SESSION = "per_session"
    SINGLE = "single"


class StoredProcedureController(ABC, Generic[RecordT]):
    """Base class bridging a service contract to one database package."""

    __slots__ = ("_db", "_package")

    db_package: ClassVar[str]
    cursor_param_name: ClassVar[str] = DEFAULT_CURSOR_PARAM_NAME
    instance_scope: ClassVar[InstanceScope] = InstanceScope.PER_CALL

    def __init__(self, *, db: ProcedureExecutor, package: str | None = None) -> None:
        self._db = db
        self._package = package or self.db_package

    def qualified_name(self, proc: str) -> str:
        return f"{self._package}.{proc}"

    @abstractmethod
    def map_row(self, row: Mapping[str, Any]) -> RecordT:
        """Build one record from a result row keyed by column name."""

    def exec_proc(self, proc: str, params: Sequence[ProcParam]) -> list[RecordT]:
        """Run a row-returning procedure and map every row."""

        call_params = [*params, ProcParam.output_cursor(self.cursor_param_name)]
        proc_name = self.qualified_name(proc)
        logger.debug("Calling %s(%s)", proc_name, ", ".join(param.name for param in call_params))
        rows = self._db.execute_proc_return_rows(proc_name, call_params)
        return [self.map_row(row) for row in rows]

    def exec_proc_first(self, proc: str, params: Sequence[ProcParam]) -> RecordT | None:
        records = self.exec_proc(proc, params)
        return records[0] if records else None

    def exec_proc_no_cursor(self, proc: str, params: Sequence[ProcParam]) -> int:
        proc_name = self.qualified_name(proc)
        logger.debug("Calling %s(%s)", proc_name, ", ".join(param.name for param in params))
        return self._db.execute_proc(proc_name, list(params))
