"""Telemetry middleware for request instrumentation."""

from __future__ import annotations

import time
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from echowell.telemetry import observe_request


def resolve_route(request: Request) -> str:
    """Return the matched route template, or the raw path before routing."""

    scope_route: Any = request.scope.get("route")
    path = getattr(scope_route, "path", None) if scope_route is not None else None
    return path or request.url.path


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Collect request count and latency for Prometheus."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            observe_request(
                request.method,
                resolve_route(request),
                500,
                time.perf_counter() - start_time,
            )
            raise

        # The route is only attached to the scope once the router matched.
        observe_request(
            request.method,
            resolve_route(request),
            response.status_code,
            time.perf_counter() - start_time,
        )
        return response
