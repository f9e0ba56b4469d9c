import logging

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class of every error the services raise on purpose."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "UNEXPECTED_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class RoleError(AppError):
    """The entity exists but has the wrong role for the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "ROLE_ERROR"


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class RangeError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "OUT_OF_RANGE"


class PreconditionError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "PRECONDITION_FAILED"


class UnexpectedError(AppError):
    pass


def _error_response(request: Request, exc: AppError) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code, "request_id": request_id},
    )


async def app_exception_handler(request: Request, exc: AppError):
    if isinstance(exc, UnexpectedError):
        logger.error("Unexpected error on %s %s: %s", request.method, request.url.path, exc.message)
    return _error_response(request, exc)

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors()), "message": "Validation Error", "request_id": request_id},
    )

async def integrity_exception_handler(request: Request, exc: IntegrityError):
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": "Database conflict. A record with this identifier likely already exists.",
            "code": ConflictError.code,
            "request_id": request_id,
        },
    )

async def storage_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(request, UnexpectedError("An unexpected storage error occurred"))

async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    response = _error_response(request, UnexpectedError("An unexpected error occurred"))
    # Runs outside the request-id middleware, so the header is set here
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response
