# This file builds the FastAPI application and registers all API routers.
# It exists so startup behavior, middleware, and error handling are configured in one place.
# Every response carries a request id and timing header and is counted in Prometheus metrics.
# The customer router is mounted under the versioned path with its configurable prefix.

from __future__ import annotations

import logging
import time
import uuid

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import RequestResponseEndpoint

from customer_service.api.api_config import ApiConfig, get_api_config
from customer_service.api.dependencies import get_database_client
from customer_service.api.error_handlers import register_error_handlers
from customer_service.api.route_templates import route_template
from customer_service.api.routers.customers import router as customers_router
from customer_service.api.routers.health import router as health_router
from customer_service.common.logging import configure_logging

logger = logging.getLogger(__name__)

REQUESTS_TOTAL = Counter(
    "customer_api_http_requests_total",
    "HTTP requests handled, by route template and status.",
    ["method", "route", "status_code"],
)
REQUEST_DURATION_SECONDS = Histogram(
    "customer_api_http_request_duration_seconds",
    "Wall-clock time spent handling a request.",
    ["method", "route"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)
INFLIGHT_REQUESTS = Gauge(
    "customer_api_http_inflight_requests",
    "Requests currently being handled.",
    ["method"],
)


def _route_label(request: Request) -> str:
    # Template, not raw path, so customer ids do not explode label cardinality.
    return route_template(request) or "unmatched"


def _persist_request_log(
    config: ApiConfig, request: Request, *, status_code: int, duration_ms: float
) -> None:
    caller = getattr(request.state, "caller", None)
    try:
        get_database_client().log_request(
            table_name=config.request_log_table_name,
            request_id=request.state.request_id,
            path=request.url.path,
            method=request.method,
            status_code=status_code,
            duration_ms=duration_ms,
            user_name=caller.user_name if caller is not None else None,
            client_ip=request.client.host if request.client else None,
        )
    except Exception:
        logger.warning(
            "Request log write failed for request_id=%s", request.state.request_id, exc_info=True
        )


def create_app() -> FastAPI:
    """Create configured FastAPI application instance."""

    configure_logging()
    config = get_api_config()

    app = FastAPI(
        title=config.api_name,
        description=(
            "CRUD API for customers. Every operation is served by a stored procedure "
            "in the configured database package."
        ),
        version=config.app_version,
        openapi_tags=[
            {"name": "health", "description": "Service liveness, readiness, and version metadata."},
            {"name": "customers", "description": "Customer search, read, insert, update, and delete."},
        ],
    )

    if config.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_context_middleware(
        request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request.state.request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        started = time.perf_counter()
        status_code = 500
        INFLIGHT_REQUESTS.labels(method=request.method).inc()
        try:
            response = await call_next(request)
            status_code = response.status_code
            duration_ms = (time.perf_counter() - started) * 1000.0
            response.headers["x-request-id"] = request.state.request_id
            response.headers["x-response-time-ms"] = f"{duration_ms:.2f}"
            if config.enable_request_logging:
                _persist_request_log(
                    config, request, status_code=status_code, duration_ms=duration_ms
                )
            return response
        finally:
            route = _route_label(request)
            REQUESTS_TOTAL.labels(
                method=request.method, route=route, status_code=str(status_code)
            ).inc()
            REQUEST_DURATION_SECONDS.labels(method=request.method, route=route).observe(
                time.perf_counter() - started
            )
            INFLIGHT_REQUESTS.labels(method=request.method).dec()

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.on_event("startup")
    def startup_checks() -> None:
        try:
            app.state.db_connected_at_startup = get_database_client().can_connect()
        except Exception:
            logger.warning("Database connectivity check failed at startup", exc_info=True)
            app.state.db_connected_at_startup = False

    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(customers_router, prefix=config.customer_base_path())

    return app


app = create_app()
