from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class GigboardError(Exception):
    """
    Base of the domain error kinds. Each kind carries a stable `code` and
    the HTTP status it is rendered with; `message` is human readable and
    never empty.
    """

    code = "error"
    status_code = 500
    default_message = "Something went wrong."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(GigboardError):
    code = "validation_error"
    status_code = 400
    default_message = "Invalid request."


class InvalidTransitionError(ValidationError):
    code = "invalid_transition"


class NotFoundError(GigboardError):
    code = "not_found"
    status_code = 404
    default_message = "Resource not found."


class AuthorizationError(GigboardError):
    code = "forbidden"
    status_code = 403
    default_message = "You are not authorized to perform this action."


class ConflictError(GigboardError):
    code = "conflict"
    status_code = 409
    default_message = "The request conflicts with the current state."


class TransientError(GigboardError):
    """Storage aborted or timed out; the only kind that is safe to retry."""

    code = "transient"
    status_code = 503
    default_message = "The operation could not be completed. Please retry."


async def _handle_domain_error(request: Request, exc: GigboardError) -> JSONResponse:
    if isinstance(exc, TransientError):
        logger.warning(
            "transient failure",
            extra={"path": request.url.path, "detail": exc.message},
        )
        headers = {"Retry-After": "1"}
    else:
        headers = None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GigboardError, _handle_domain_error)
