"""API middleware: correlation ID, operator context, request audit log."""

import json
import logging
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from scan_engine.core.context import correlation_id_ctx, operator_id_ctx

logger = logging.getLogger(__name__)

OPERATOR_HEADER = "X-Operator-ID"
OPERATOR_NAME_HEADER = "X-Operator-Name"
CORRELATION_HEADER = "X-Correlation-ID"

# Paths usable without an operator (probes, scrapers)
PUBLIC_PATHS = frozenset({"/health", "/metrics"})


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Generate or preserve correlation ID; attach to request.state, response header, and logging context."""

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        correlation_id_ctx.set(correlation_id)

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class OperatorContextMiddleware(BaseHTTPMiddleware):
    """Extract X-Operator-ID (400 if missing) and optional X-Operator-Name; attach to request.state."""

    async def dispatch(self, request: Request, call_next) -> Response:
        operator_id = (request.headers.get(OPERATOR_HEADER) or "").strip()
        request.state.operator_name = (request.headers.get(OPERATOR_NAME_HEADER) or "").strip() or None
        if not operator_id:
            if request.url.path in PUBLIC_PATHS:
                request.state.operator_id = None
                return await call_next(request)
            return JSONResponse(
                status_code=400,
                content={"detail": "X-Operator-ID header is required"},
            )
        request.state.operator_id = operator_id
        operator_id_ctx.set(operator_id)
        return await call_next(request)


class AuditTriggerMiddleware(BaseHTTPMiddleware):
    """After response: log structured request event (correlation_id, operator_id, path, method, status_code)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        audit_event = {
            "event": "request_audit",
            "correlation_id": getattr(request.state, "correlation_id", None),
            "operator_id": getattr(request.state, "operator_id", None),
            "path": request.url.path,
            "method": request.method,
            "status_code": response.status_code,
        }
        logger.info(json.dumps(audit_event))
        return response
