# This file provides dependency factories for FastAPI routes and middleware.
# It exists so routers receive configured collaborators and tests can override them in one place.
# The database client is shared for the process because it only owns the connection pool.
# Contract implementations are activated fresh for every call and discarded with the request.

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from customer_service.api.api_config import ApiConfig, get_api_config
from customer_service.api.contracts import CustomerContract
from customer_service.api.db_access import DatabaseClient
from customer_service.api.hosting import activate_service, customer_host_descriptor


@lru_cache(maxsize=1)
def get_database_client() -> DatabaseClient:
    config = get_api_config()
    return DatabaseClient(database_url=config.database_url)


def get_config() -> ApiConfig:
    return get_api_config()


def get_customer_service(
    config: Annotated[ApiConfig, Depends(get_config)],
    db: Annotated[DatabaseClient, Depends(get_database_client)],
) -> CustomerContract:
    return activate_service(customer_host_descriptor(config), config=config, db=db)
