import logging

from fastapi.exceptions import RequestValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.services.errors import (
    ConflictException,
    IntegrityException,
    NotFoundException,
    PersistenceException,
    ProvisionerException,
    UnauthenticatedException,
    UpstreamException,
)

ERROR_STATUS = {
    UnauthenticatedException: 401,
    NotFoundException: 404,
    ConflictException: 400,
    IntegrityException: 409,
    PersistenceException: 500,
}

logger = logging.getLogger(__name__)


def _error_body(error: str, details: str | None = None) -> dict:
    body = {"error": error}
    if details is not None:
        body["details"] = details
    return body


def _exception_handler(request: Request, exc: ProvisionerException):
    if isinstance(exc, UpstreamException):
        status = exc.status_code
    else:
        status = ERROR_STATUS.get(type(exc), 500)
    if status >= 500:
        logger.error("Request failed path=%s status=%s error=%s details=%s", request.url.path, status, exc,
                     exc.details)
    else:
        logger.warning("Request failed path=%s status=%s error=%s", request.url.path, status, exc)
    return JSONResponse(_error_body(str(exc), exc.details), status_code=status)


def _validation_handler(request: Request, exc: RequestValidationError):
    logger.warning("Rejected request body path=%s errors=%s", request.url.path, exc.errors())
    return JSONResponse(_error_body("Invalid request body", str(exc.errors())), status_code=400)


def _unexpected_handler(request: Request, exc: Exception):
    logger.exception("Unexpected error for path=%s: %s", request.url.path, exc)
    # Served outside the CORS middleware, so the header is set here.
    return JSONResponse(
        _error_body("Internal server error", str(exc)),
        status_code=500,
        headers={"Access-Control-Allow-Origin": "*"},
    )


def register_exception_handlers(app):
    app.exception_handler(ProvisionerException)(_exception_handler)
    app.exception_handler(RequestValidationError)(_validation_handler)
    app.exception_handler(Exception)(_unexpected_handler)
