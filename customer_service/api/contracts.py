# This file declares the service contract: the operations clients may invoke for the customer entity.
# It exists so the HTTP layer and the hosting descriptor depend on an interface, not on one implementation.
# The operation names stay verb-shaped; the router re-expresses them as RESTful routes.
# Any class providing these methods can be activated through the hosting descriptor.

from __future__ import annotations

from typing import Final, Protocol, runtime_checkable

from customer_service.api.schemas.customer_schemas import CustomerDto

CUSTOMER_OPERATIONS: Final[tuple[str, ...]] = (
    "sel_customer_list",
    "sel_customer",
    "ins_customer",
    "upd_customer",
    "del_customer",
)


@runtime_checkable
class CustomerContract(Protocol):
    """Remotely callable customer operations."""

    def sel_customer_list(self, last_name: str) -> list[CustomerDto]:
        """Customers whose last name contains ``last_name``; empty list when none match."""
        ...

    def sel_customer(self, customer_id: int) -> CustomerDto | None:
        """One customer by id, or ``None`` when it does not exist."""
        ...

    def ins_customer(self, customer: CustomerDto) -> CustomerDto | None:
        """Insert and return the persisted customer with server-assigned fields."""
        ...

    def upd_customer(self, customer: CustomerDto) -> CustomerDto | None:
        """Update an existing customer and return it with refreshed audit fields."""
        ...

    def del_customer(self, customer_id: int) -> int:
        """Delete one customer and return the affected-row count."""
        ...
