"""
Exception handlers turning errors into the API's JSON error envelope:

    {"error": <type>, "message": <text>, "path": <url path>, "details": [...]}

`details` is only present for field-level validation failures.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import StatusMakerException, ValidationError

logger = logging.getLogger(__name__)


def error_response(
    request: Request,
    status_code: int,
    error: str,
    message: Any,
    details: Optional[List[Dict[str, Any]]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    body = {"error": error, "message": message, "path": request.url.path}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def statusmaker_exception_handler(request: Request, exc: StatusMakerException) -> JSONResponse:
    """Domain errors carry their own status code (400/401/403/404/409)"""
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.message}",
        extra={"status_code": exc.status_code, "exception_type": exc.__class__.__name__},
    )

    details = None
    if isinstance(exc, ValidationError) and exc.field:
        details = [{"field": exc.field, "message": exc.message}]

    return error_response(request, exc.status_code, exc.__class__.__name__, exc.message, details)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request body/query did not match its schema: 422 with one entry per field"""
    details = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(
        f"Request validation failed on {request.method} {request.url.path}",
        extra={"errors": details},
    )
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "ValidationError",
        "Request validation failed",
        details,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Auth dependencies raise these; WWW-Authenticate must survive
    logger.warning(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.detail}")
    return error_response(
        request,
        exc.status_code,
        "HTTPException",
        exc.detail,
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {exc.__class__.__name__} on {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    # Internal details stay in the log
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "InternalServerError",
        "An unexpected error occurred. Please try again later.",
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StatusMakerException, statusmaker_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
    logger.debug("Error handlers registered")
