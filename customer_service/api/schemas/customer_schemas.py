# This file defines the customer transfer record exchanged at the service boundary.
# It exists so reads and writes share one flat, serialization-friendly shape.
# JSON uses camelCase field names while Python code works with snake_case attributes.
# Every field is optional so a blank record can stand for "not found" without an error status.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CustomerDto(BaseModel):
    """Customer record passed to the service contract and returned to clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    updated_by: str | None = None
    updated_at: datetime | None = None

    def is_blank(self) -> bool:
        return all(value is None for value in self.model_dump().values())


class CustomerWriteDto(BaseModel):
    """Request body for insert and update.

    Only the client-writable fields are declared. `id`, `updatedBy` and
    `updatedAt` in the body are dropped unparsed, so a stale or malformed
    server-owned value never fails the request.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    first_name: str | None = None
    last_name: str | None = None

    def to_record(self, *, customer_id: int | None) -> CustomerDto:
        return CustomerDto(id=customer_id, first_name=self.first_name, last_name=self.last_name)
