"""Error taxonomy shared by services and routers.

Services raise these; a single FastAPI handler renders them as
``{"success": false, "message": ..., "errors": [...]}``.
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass, asdict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


def field_errors_from_pydantic(
    exc: ValidationError | RequestValidationError,
    messages: Mapping[str, str] | None = None,
) -> list[FieldError]:
    """Flatten pydantic errors into (field, message) pairs.

    Missing fields read "<field> is required"; other failures use the
    field's entry in ``messages`` when there is one.
    """
    messages = messages or {}
    errors: list[FieldError] = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ())]
        if loc and loc[0] == "body":
            loc = loc[1:]
        field = ".".join(loc) or "__root__"
        if err.get("type") == "missing":
            message = f"{field} is required"
        elif field in messages:
            message = messages[field]
        else:
            message = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
        errors.append(FieldError(field, message))
    return errors


class PortalError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message}


class ValidationFailed(PortalError):
    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: list[FieldError], message: str | None = None):
        if message is None and errors:
            message = errors[0].message
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["errors"] = [asdict(e) for e in self.errors]
        return data


class ConflictError(PortalError):
    status_code = 400
    message = "Conflicting request"


class DuplicateEmail(ConflictError):
    message = "An application with this email already exists"


class CourseHasApplications(ConflictError):
    message = "Cannot delete course with existing applications"


class CourseHasEmailTemplates(ConflictError):
    message = "Cannot delete course with existing email templates"


class ApplicationNotFound(PortalError):
    status_code = 404
    message = "Application not found"


class CourseNotFound(PortalError):
    status_code = 404
    message = "Course not found"


class SelectedCourseMissing(CourseNotFound):
    """Referenced course is gone; the request itself is at fault."""
    status_code = 400
    message = "Selected course does not exist"


class EmailTemplateNotFound(PortalError):
    status_code = 404
    message = "Selected email not found"


class NotificationFailed(PortalError):
    status_code = 502
    message = "Failed to send notification email"


class InternalError(PortalError):
    status_code = 500


class NotAuthenticated(PortalError):
    status_code = 401
    message = "Admin session required"


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    failure = ValidationFailed(field_errors_from_pydantic(exc))
    return JSONResponse(status_code=failure.status_code, content=failure.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    failure = InternalError()
    return JSONResponse(status_code=failure.status_code, content=failure.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
