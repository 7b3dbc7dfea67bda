"""
Problem-details error responses.

Every failure leaves the API as an RFC 7807 shaped body
``{type, title, status, detail, instance, code, errors}`` so clients can
branch on ``code`` and show ``detail`` as-is.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import DomainException, RepositoryException, ServiceException

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"

TITLES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def problem_response(
    request: Request,
    status: int,
    detail: str = "",
    *,
    code: Optional[str] = None,
    errors: Any = None,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    body: Dict[str, Any] = {
        "type": "about:blank",
        "title": TITLES.get(status, "Error"),
        "status": status,
        "detail": detail,
        "instance": request.url.path,
    }
    if code:
        body["code"] = code
    if errors is not None:
        body["errors"] = jsonable_encoder(errors)
    return JSONResponse(body, status_code=status, media_type=PROBLEM_MEDIA_TYPE, headers=headers)


def _from_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Unpack an HTTPException detail.

    Domain errors put ``{"message", "code", "details"}`` in the detail;
    framework errors use a plain string.
    """
    detail = exc.detail
    code = None
    errors = None
    if isinstance(detail, dict):
        code = detail.get("code") if isinstance(detail.get("code"), str) else None
        errors = detail.get("details") or detail.get("errors")
        message = detail.get("message") or detail.get("detail")
        detail = message if isinstance(message, str) else ""
    elif detail is None:
        detail = ""
    return problem_response(
        request,
        exc.status_code,
        str(detail),
        code=code,
        errors=errors,
        headers=getattr(exc, "headers", None),
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        return _from_http_exception(request, exc.to_http_exception())

    @app.exception_handler(RepositoryException)
    async def repository_exception_handler(request: Request, exc: RepositoryException) -> JSONResponse:
        logger.error("Store failure on %s: %s", request.url.path, exc)
        unavailable = ServiceException("The scheduling store is temporarily unavailable", code="STORE_UNAVAILABLE")
        return _from_http_exception(request, unavailable.to_http_exception())

    # fastapi.HTTPException subclasses the starlette one
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _from_http_exception(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return problem_response(
            request, 422, "Request validation failed", code="validation_error", errors=exc.errors()
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return problem_response(request, 500, "Internal Server Error", code="internal_server_error")
