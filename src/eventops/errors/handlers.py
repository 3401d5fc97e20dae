"""FastAPI exception handlers producing the shared ErrorResponse envelope."""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from eventops.errors.exceptions import AuthenticationError, EventOpsError
from eventops.models.common import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app."""

    @app.exception_handler(EventOpsError)
    async def eventops_error_handler(request: Request, exc: EventOpsError):
        trace_id = getattr(request.state, "trace_id", "unknown")
        if isinstance(exc, AuthenticationError):
            logger.warning(
                "Rejected unauthenticated call to %s %s (trace_id=%s)",
                request.method, request.url.path, trace_id,
            )
        error_response = ErrorResponse(
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
                trace_id=trace_id,
                timestamp=datetime.now(timezone.utc),
            ),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response.model_dump(mode="json", exclude_none=True),
        )
