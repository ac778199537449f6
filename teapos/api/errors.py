"""Translate POS errors into HTTP responses."""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from teapos.core.errors import POSError

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    "network": 503,
    "data": 502,
    "validation": 400,
    "payment": 402,
    "not_found": 404,
    "conflict": 409,
}


def error_body(error: POSError) -> dict:
    """Alert payload: description, error kind and what the operator can do."""
    return {
        "detail": error.description,
        "kind": error.kind,
        "recovery": error.recovery_suggestion,
    }


async def pos_error_handler(request: Request, exc: POSError) -> JSONResponse:
    status_code = ERROR_STATUS_CODES.get(exc.kind, 500)
    log = logger.error if status_code >= 500 else logger.info
    log(f"[ERROR] {request.method} {request.url.path} -> {status_code}: {exc.description}")
    return JSONResponse(status_code=status_code, content=error_body(exc))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(POSError, pos_error_handler)
