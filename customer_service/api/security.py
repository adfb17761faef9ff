# This file resolves who is calling and decides whether the call is allowed.
# It exists so the service-call hook stays a thin sequence of authorize-then-log steps.
# Bearer tokens are JWTs verified with the configured secret; no token means an anonymous caller.
# The decision rule maps HTTP methods to the configured read and write roles.

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import jwt
from fastapi import Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from customer_service.api.api_config import ApiConfig
from customer_service.api.error_handlers import APIError

logger = logging.getLogger(__name__)

READ_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CallerIdentity:
    user_name: str | None
    roles: tuple[str, ...] = ()
    is_authenticated: bool = False

    @classmethod
    def anonymous(cls) -> "CallerIdentity":
        return cls(user_name=None)

    @property
    def display_name(self) -> str:
        return self.user_name or "anonymous"


def _roles_from_claims(claims: Mapping[str, Any]) -> tuple[str, ...]:
    raw = claims.get("roles")
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = raw.split(",")
    elif not isinstance(raw, (list, tuple)):
        raise APIError(
            status_code=401,
            error_code="INVALID_TOKEN",
            message="Token roles claim must be a list or a comma-separated string.",
        )
    return tuple(str(role).strip() for role in raw if str(role).strip())


def decode_identity(token: str, config: ApiConfig) -> CallerIdentity:
    """Verify a bearer JWT and turn its claims into a caller identity."""

    options = {"require": ["sub", "exp"]}
    try:
        claims = jwt.decode(
            token,
            config.jwt_secret,
            algorithms=[config.jwt_algorithm],
            audience=config.jwt_audience,
            issuer=config.jwt_issuer,
            options=options,
        )
    except jwt.ExpiredSignatureError as exc:
        raise APIError(status_code=401, error_code="INVALID_TOKEN", message="Token has expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise APIError(status_code=401, error_code="INVALID_TOKEN", message="Token is invalid.") from exc

    return CallerIdentity(
        user_name=str(claims["sub"]),
        roles=_roles_from_claims(claims),
        is_authenticated=True,
    )


def resolve_caller_identity(
    credentials: HTTPAuthorizationCredentials | None,
    config: ApiConfig,
) -> CallerIdentity:
    if credentials is None or not config.auth_enabled:
        return CallerIdentity.anonymous()
    return decode_identity(credentials.credentials, config)


def authorize_service_call(
    identity: CallerIdentity,
    *,
    route: str,
    method: str,
    config: ApiConfig,
) -> bool:
    """Decide whether ``identity`` may call ``method route``."""

    if not config.auth_enabled:
        return True
    if not identity.is_authenticated:
        return False

    method = method.upper()
    if method in READ_METHODS:
        allowed_roles = config.read_roles
    elif method in WRITE_METHODS:
        allowed_roles = config.write_roles
    else:
        logger.warning("No access rule for %s %s", method, route)
        return False
    return any(role in allowed_roles for role in identity.roles)


def get_client_ip(request: Request, *, trust_forwarded_headers: bool = False) -> str:
    if trust_forwarded_headers:
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
    if request.client is None:
        return "unknown"
    return request.client.host
