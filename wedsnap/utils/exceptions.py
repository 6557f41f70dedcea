import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from wedsnap.utils.response import error_response

logger = logging.getLogger(__name__)


class AppException(Exception):
    code: str | None = None

    def __init__(self, message: str, status_code: int = 400, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        if code is not None:
            self.code = code


class NotFoundError(AppException):
    code = "not_found"

    def __init__(self, message: str = "Not found"):
        super().__init__(message, status_code=404)


class ForbiddenError(AppException):
    code = "forbidden"

    def __init__(self, message: str):
        super().__init__(message, status_code=403)


class ConflictError(AppException):
    code = "conflict"

    def __init__(self, message: str):
        super().__init__(message, status_code=409)


class QuotaExhaustedError(AppException):
    code = "quota_exhausted"

    def __init__(self, message: str = "No photos remaining"):
        super().__init__(message, status_code=409)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.message, code=exc.code),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_response("Internal server error"),
        )
