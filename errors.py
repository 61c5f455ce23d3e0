# errors.py: Erreurs typées des services et leur rendu en enveloppe JSON.
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Erreur métier portant un code HTTP et un message destiné au client."""

    status_code = 500
    default_message = "Server Error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Not authorized to access this route"


class Forbidden(AppError):
    status_code = 403
    default_message = "Not authorized to access this resource"


class NotFound(AppError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = 400
    default_message = "Duplicate value"


class PreconditionFailed(AppError):
    status_code = 400
    default_message = "Precondition failed"


class InternalError(AppError):
    status_code = 500


def _envelope(status_code: int, message: str, exc: Exception | None = None, include_stack: bool = False):
    content = {"success": False, "message": message}
    if include_stack and exc is not None and status_code >= 500:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=status_code, content=content)


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc)
        messages.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    return ", ".join(messages) or "Invalid request"


def register_exception_handlers(app: FastAPI, settings) -> None:
    """Point unique de rendu des erreurs: le client ne reçoit que le message."""
    include_stack = not settings.is_production

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.message,
            exc_info=exc.status_code >= 500)
        return _envelope(exc.status_code, exc.message, exc, include_stack)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.warning("%s %s -> 400 %s", request.method, request.url.path, message)
        return _envelope(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            message = f"Route not found - {request.url.path}"
        else:
            message = str(exc.detail)
        return _envelope(exc.status_code, message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Erreur non gérée sur %s %s", request.method, request.url.path)
        return _envelope(500, "Server Error", exc, include_stack)
