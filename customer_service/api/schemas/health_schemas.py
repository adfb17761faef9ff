# This file defines response schemas for health, readiness, and version endpoints.
# It exists so monitoring checks can rely on fields that do not drift between releases.
# Every operational payload carries the API version label, the request id, and a UTC timestamp.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class OperationalResponse(BaseModel):
    api_version: str
    request_id: str
    timestamp: datetime


class HealthResponse(OperationalResponse):
    status: str
    environment: str
    service_name: str


class ReadinessResponse(OperationalResponse):
    db_connected: bool
    ready: bool
    database: str
    procedure_package: str


class VersionResponse(OperationalResponse):
    api_version_path: str
    customer_base_path: str
    app_version: str
    git_commit: str | None = None
    project: str
