"""
Error taxonomy and JSON error envelopes.

Services raise the SubTrackError subclasses below; the handlers registered
by register_exception_handlers() turn them (and framework errors) into the
uniform {"success": false, "message": ...} envelope.
"""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from subtrack.logging_config import get_logger, log_with_context

logger = get_logger("http")


class SubTrackError(Exception):
    """Base exception for all domain errors"""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message}


class Unauthenticated(SubTrackError):
    """Missing, invalid or expired token, or bad credentials"""

    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class Forbidden(SubTrackError):
    """Role mismatch or ownership mismatch"""

    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFound(SubTrackError):
    """Referenced entity does not exist"""

    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class Conflict(SubTrackError):
    """Duplicate unique key or lost concurrent update"""

    status_code = 409

    def __init__(self, message: str = "Conflict"):
        super().__init__(message)


class InvalidInput(SubTrackError):
    """Failed field validation or file content check"""

    status_code = 400

    def __init__(self, message: str = "Invalid input",
                 errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    errors = []
    for err in exc.errors():
        # loc is ("body", "email") / ("query", "limit"); drop the source
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        errors.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return errors


async def subtrack_error_handler(request: Request, exc: SubTrackError):
    log_with_context(logger, "WARNING",
        "{} on {} {}: {}".format(type(exc).__name__, request.method, request.url.path, exc.message),
        extra_data={"status_code": exc.status_code})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = _field_errors(exc)
    log_with_context(logger, "WARNING",
        "Validation failed on {} {}".format(request.method, request.url.path),
        extra_data={"errors": errors})
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": errors},
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    log_with_context(logger, "ERROR",
        "Unhandled error on {} {}: {}".format(request.method, request.url.path, exc),
        exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI):
    """Attach all error envelopes to the application."""
    app.add_exception_handler(SubTrackError, subtrack_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
