from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ticketdesk.authz.errors import AuthzError, ValidationError

logger = logging.getLogger(__name__)


async def authz_error_handler(request: Request, exc: AuthzError) -> JSONResponse:
    logger.info(
        "Request refused kind=%s reason=%s path=%s method=%s",
        exc.kind,
        exc.reason,
        request.url.path,
        request.method,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))

    error = ValidationError("Invalid request body: " + "; ".join(problems))
    return await authz_error_handler(request, error)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthzError, authz_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
