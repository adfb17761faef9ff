# This file implements the customer service contract on top of the `pkg_customer` stored procedures.
# It exists as the only place that knows procedure names, parameter lists, and result columns.
# Backend failures (connectivity, missing procedure, constraint violations) propagate unchanged.
# Validation of customer content is left to the procedures themselves.

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from customer_service.api.api_config import ApiConfig
from customer_service.api.db_access import ParamType, ProcedureExecutor, ProcParam
from customer_service.api.schemas.customer_schemas import CustomerDto
from customer_service.api.services.procedure_controller import StoredProcedureController

CUSTOMER_COLUMN_MAP: dict[str, str] = {
    "customer_id": "id",
    "first_name": "first_name",
    "last_name": "last_name",
    "updated_by": "updated_by",
    "updated_at": "updated_at",
}


class CustomerDbController(StoredProcedureController[CustomerDto]):
    """Customer contract backed by stored procedures."""

    __slots__ = ()

    db_package = "pkg_customer"

    @classmethod
    def from_config(cls, *, config: ApiConfig, db: ProcedureExecutor) -> "CustomerDbController":
        return cls(db=db, package=config.customer_db_package)

    def sel_customer_list(self, last_name: str) -> list[CustomerDto]:
        params = [ProcParam("i_last_name", ParamType.STRING, last_name)]
        return self.exec_proc("sel_customer_list", params)

    def sel_customer(self, customer_id: int) -> CustomerDto | None:
        params = [ProcParam("i_customer_id", ParamType.NUMBER, customer_id)]
        return self.exec_proc_first("sel_customer", params)

    def ins_customer(self, customer: CustomerDto) -> CustomerDto | None:
        return self.exec_proc_first("ins_customer", self._generate_save_params(customer))

    def upd_customer(self, customer: CustomerDto) -> CustomerDto | None:
        return self.exec_proc_first("upd_customer", self._generate_save_params(customer))

    def del_customer(self, customer_id: int) -> int:
        params = [ProcParam("i_customer_id", ParamType.NUMBER, customer_id)]
        return self.exec_proc_no_cursor("del_customer", params)

    def map_row(self, row: Mapping[str, Any]) -> CustomerDto:
        return CustomerDto(**{field: row[column] for column, field in CUSTOMER_COLUMN_MAP.items()})

    @staticmethod
    def _generate_save_params(customer: CustomerDto) -> list[ProcParam]:
        return [
            ProcParam("i_customer_id", ParamType.NUMBER, customer.id),
            ProcParam("i_first_name", ParamType.STRING, customer.first_name),
            ProcParam("i_last_name", ParamType.STRING, customer.last_name),
        ]
