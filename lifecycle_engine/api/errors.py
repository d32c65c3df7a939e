"""Map lifecycle errors onto HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from lifecycle_engine.core.errors import (
    AppConflict,
    AppForbidden,
    ClusterOperationFailed,
    LifecycleError,
    NotFoundError,
    PersistenceFailed,
)

logger = logging.getLogger(__name__)


STATUS_CODES = [
    (NotFoundError, 404),
    (AppConflict, 409),
    (AppForbidden, 403),
    (ClusterOperationFailed, 502),
    (PersistenceFailed, 500),
]


def http_status_for(error: LifecycleError) -> int:
    for error_type, status_code in STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


async def lifecycle_error_handler(request: Request, exc: LifecycleError) -> JSONResponse:
    status_code = http_status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"code": exc.code, "message": exc.message},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LifecycleError, lifecycle_error_handler)
