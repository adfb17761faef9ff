# This file implements the hook that runs before every customer endpoint body.
# It exists so authorization and call logging live in one place and no route can skip them.
# Routers attach it through `APIRouter(dependencies=[...])`, which FastAPI applies to every route they register.
# A denied call is aborted here; an allowed call is logged before the endpoint runs, whatever its outcome.

from __future__ import annotations

import logging
import re
import uuid
from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials

from customer_service.api.api_config import ApiConfig
from customer_service.api.dependencies import get_config
from customer_service.api.error_handlers import APIError
from customer_service.api.route_templates import route_template
from customer_service.api.security import (
    CallerIdentity,
    authorize_service_call,
    bearer_scheme,
    get_client_ip,
    resolve_caller_identity,
)

logger = logging.getLogger(__name__)

ConfigDep = Annotated[ApiConfig, Depends(get_config)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]

_CONTROL_CHAR_RE = re.compile(r"[\x00-\x1f\x7f]")


def _sanitize_log_value(value: object) -> str:
    """Replace control characters so user input cannot forge log lines."""
    return _CONTROL_CHAR_RE.sub("_", str(value))


def _route_template(request: Request) -> str:
    return route_template(request) or request.url.path


def _correlation_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
    return str(request_id)


def validate_service_call_authorization(
    request: Request,
    identity: CallerIdentity,
    *,
    config: ApiConfig,
    client_ip: str,
) -> None:
    route = _route_template(request)
    if authorize_service_call(identity, route=route, method=request.method, config=config):
        return

    logger.warning(
        "Service call not authorized. URL: %s, User: %s, Route: %s, Method: %s, IP: %s",
        _sanitize_log_value(request.url),
        _sanitize_log_value(identity.display_name),
        route,
        request.method,
        _sanitize_log_value(client_ip),
    )
    if not identity.is_authenticated:
        raise APIError(
            status_code=401,
            error_code="NOT_AUTHENTICATED",
            message="Authentication is required for this service call.",
        )
    raise APIError(
        status_code=403,
        error_code="ACCESS_DENIED",
        message="Service call not authorized.",
    )


def log_service_call(request: Request, identity: CallerIdentity, *, client_ip: str) -> None:
    route_params = ",".join(
        f"{name}={_sanitize_log_value(value)}" for name, value in sorted(request.path_params.items())
    )
    logger.info(
        "SERVICE_CALL request_id=%s user=%s method=%s url=%s route=%s params=%s "
        "client_ip=%s user_agent=%s timestamp=%s",
        _sanitize_log_value(_correlation_id(request)),
        _sanitize_log_value(identity.display_name),
        request.method,
        _sanitize_log_value(request.url),
        _route_template(request),
        route_params or "-",
        _sanitize_log_value(client_ip),
        _sanitize_log_value(request.headers.get("user-agent", "-")),
        datetime.now(tz=UTC).isoformat(),
    )


def guard_service_call(
    request: Request,
    config: ConfigDep,
    credentials: CredentialsDep,
) -> CallerIdentity:
    """Authorize, then log, the current service call."""

    identity = resolve_caller_identity(credentials, config)
    client_ip = get_client_ip(request, trust_forwarded_headers=config.trust_forwarded_headers)

    validate_service_call_authorization(request, identity, config=config, client_ip=client_ip)
    log_service_call(request, identity, client_ip=client_ip)

    request.state.caller = identity
    return identity
