# This file defines liveness, readiness, and version endpoints for API operations.
# It exists so orchestration and monitoring systems can verify service health quickly.
# The readiness check confirms the database that hosts the customer procedures is reachable.
# These routes are operational and sit outside the guarded customer router.

from __future__ import annotations

import subprocess
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from customer_service.api.api_config import ApiConfig
from customer_service.api.db_access import DatabaseClient
from customer_service.api.dependencies import get_config, get_database_client
from customer_service.api.schemas.health_schemas import (
    HealthResponse,
    ReadinessResponse,
    VersionResponse,
)

router = APIRouter(tags=["health"])
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
DBDep = Annotated[DatabaseClient, Depends(get_database_client)]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _git_commit() -> str | None:
    try:
        completed = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            check=True,
            capture_output=True,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return completed.stdout.strip() or None


@router.get("/health", response_model=HealthResponse)
def health(
    request: Request,
    config: ConfigDep,
) -> dict[str, object]:
    return {
        "api_version": config.api_version_label(),
        "request_id": request.state.request_id,
        "status": "ok",
        "environment": config.environment,
        "service_name": config.api_name,
        "timestamp": _utc_now(),
    }


@router.get("/ready", response_model=ReadinessResponse)
def ready(
    request: Request,
    config: ConfigDep,
    db: DBDep,
) -> dict[str, object]:
    db_connected = db.can_connect()
    return {
        "api_version": config.api_version_label(),
        "request_id": request.state.request_id,
        "db_connected": db_connected,
        "ready": db_connected,
        "database": "reachable" if db_connected else "unreachable",
        "procedure_package": config.customer_db_package,
        "timestamp": _utc_now(),
    }


@router.get("/version", response_model=VersionResponse)
def version(
    request: Request,
    config: ConfigDep,
) -> dict[str, object]:
    return {
        "api_version": config.api_version_label(),
        "request_id": request.state.request_id,
        "api_version_path": config.api_version_path,
        "customer_base_path": config.customer_base_path(),
        "app_version": config.app_version,
        "git_commit": _git_commit(),
        "project": config.api_name,
        "timestamp": _utc_now(),
    }
