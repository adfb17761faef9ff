# This file maps a logical service address to the class that implements its contract.
# It exists so deployments can activate a different implementation (for example a business-logic layer)
# by configuration alone, without touching routers.
# Activation honors the class's instance scope; the customer service runs call-scoped.

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import Any

from customer_service.api.api_config import ApiConfig
from customer_service.api.contracts import CUSTOMER_OPERATIONS
from customer_service.api.db_access import ProcedureExecutor
from customer_service.api.services.procedure_controller import InstanceScope

logger = logging.getLogger(__name__)


class ServiceActivationError(RuntimeError):
    """Raised when a hosting descriptor points at an unusable class."""


@dataclass(frozen=True)
class ServiceHostDescriptor:
    address: str
    service_class_path: str
    operations: tuple[str, ...]


def customer_host_descriptor(config: ApiConfig) -> ServiceHostDescriptor:
    return ServiceHostDescriptor(
        address=config.customer_route_prefix.lstrip("/"),
        service_class_path=config.customer_service_class,
        operations=CUSTOMER_OPERATIONS,
    )


def resolve_service_class(class_path: str, operations: tuple[str, ...]) -> type[Any]:
    """Import `package.module:ClassName` and check it provides every operation."""

    module_name, _, class_name = class_path.partition(":")
    try:
        module = importlib.import_module(module_name)
        service_class = getattr(module, class_name)
    except (ImportError, AttributeError) as exc:
        raise ServiceActivationError(f"Cannot import service class {class_path!r}") from exc

    missing = [name for name in operations if not callable(getattr(service_class, name, None))]
    if missing:
        raise ServiceActivationError(
            f"{class_path} does not implement: {', '.join(missing)}"
        )
    if not callable(getattr(service_class, "from_config", None)):
        raise ServiceActivationError(f"{class_path} must define a from_config classmethod.")
    declared = getattr(service_class, "instance_scope", InstanceScope.PER_CALL)
    try:
        scope = InstanceScope(declared)
    except ValueError as exc:
        raise ServiceActivationError(
            f"{class_path} declares unknown instance scope {declared!r}."
        ) from exc
    if scope != InstanceScope.PER_CALL:
        raise ServiceActivationError(
            f"{class_path} declares {scope.value} scope; only per-call services can be hosted."
        )
    return service_class


def activate_service(
    descriptor: ServiceHostDescriptor,
    *,
    config: ApiConfig,
    db: ProcedureExecutor,
) -> Any:
    """Build a fresh service instance for one call."""

    service_class = resolve_service_class(descriptor.service_class_path, descriptor.operations)
    logger.debug("Activating %s for /%s", service_class.__name__, descriptor.address)
    return service_class.from_config(config=config, db=db)
