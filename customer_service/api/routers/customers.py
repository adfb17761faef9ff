# This file exposes the customer service contract as RESTful routes.
# It exists as a thin layer: parse the route, call the contract, and return the result with 200.
# Content validation is left to the stored procedures; only the route shape (integer ids) is checked here.
# A missing customer is a blank record, not a 404, so clients inspect the payload to detect absence.

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query

from customer_service.api.contracts import CustomerContract
from customer_service.api.dependencies import get_customer_service
from customer_service.api.schemas.common import ErrorResponse
from customer_service.api.schemas.customer_schemas import CustomerDto, CustomerWriteDto
from customer_service.api.service_call_hook import guard_service_call

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: {"model": ErrorResponse, "description": "Caller is not authenticated."},
    403: {"model": ErrorResponse, "description": "Caller may not perform this operation."},
    500: {"model": ErrorResponse, "description": "Stored procedure or database failure."},
}

router = APIRouter(
    tags=["customers"],
    dependencies=[Depends(guard_service_call)],
    responses=ERROR_RESPONSES,
)
CustomerServiceDep = Annotated[CustomerContract, Depends(get_customer_service)]


@router.get("", response_model=list[CustomerDto])
def sel_customer_list(
    service: CustomerServiceDep,
    last_name: str | None = Query(default=None, alias="lastName"),
) -> list[CustomerDto]:
    # No filter means every customer.
    return service.sel_customer_list(last_name or "")


@router.get("/{customer_id:int}", response_model=CustomerDto)
def sel_customer(customer_id: int, service: CustomerServiceDep) -> CustomerDto:
    return service.sel_customer(customer_id) or CustomerDto()


@router.post("", response_model=CustomerDto)
def ins_customer(
    service: CustomerServiceDep,
    customer: Annotated[CustomerWriteDto, Body()],
) -> CustomerDto:
    return service.ins_customer(customer.to_record(customer_id=None)) or CustomerDto()


@router.put("/{customer_id:int}", response_model=CustomerDto)
def upd_customer(
    customer_id: int,
    service: CustomerServiceDep,
    customer: Annotated[CustomerWriteDto, Body()],
) -> CustomerDto:
    return service.upd_customer(customer.to_record(customer_id=customer_id)) or CustomerDto()


@router.delete("/{customer_id:int}", response_model=int)
def del_customer(customer_id: int, service: CustomerServiceDep) -> int:
    return service.del_customer(customer_id)
