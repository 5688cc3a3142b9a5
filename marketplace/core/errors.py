from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from bson.errors import InvalidId
from jose import ExpiredSignatureError, JWTError
from pymongo.errors import DuplicateKeyError
from pydantic import ValidationError as PydanticValidationError
import logging

from marketplace.core.exceptions import MarketplaceError
from marketplace.schemas.response import ErrorResponse
from marketplace.core.config import settings

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, code: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, code=code, details=details).model_dump()
    )


def format_validation_errors(errors) -> list:
    """
    Flattens pydantic errors into {field, msg, type} dicts.
    The raw error list can carry exception objects in `ctx`, which are not JSON serializable.
    """
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({
            "field": ".".join(loc),
            "msg": err.get("msg"),
            "type": err.get("type"),
        })
    return details


def add_exception_handlers(app: FastAPI):
    """
    Registers exception handlers with the FastAPI app.
    """
    @app.exception_handler(MarketplaceError)
    async def marketplace_exception_handler(request: Request, exc: MarketplaceError):
        if exc.status_code >= 500:
            logger.error(f"{exc.code}: {exc.message}", extra={"url": str(request.url)})
        return error_response(exc.status_code, exc.message, exc.code, exc.details)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Handles standard HTTP exceptions (404, 405, etc.)
        """
        message = f"Not found - {request.url.path}" if exc.status_code == 404 else str(exc.detail)
        return error_response(exc.status_code, message, "HTTP_ERROR")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Handles Pydantic validation errors.
        """
        return error_response(400, "Validation failed", "VALIDATION_ERROR", format_validation_errors(exc.errors()))

    @app.exception_handler(PydanticValidationError)
    async def model_validation_handler(request: Request, exc: PydanticValidationError):
        """
        Validation of bodies parsed by hand (multipart product forms).
        """
        return error_response(400, "Validation failed", "VALIDATION_ERROR", format_validation_errors(exc.errors()))

    @app.exception_handler(InvalidId)
    async def invalid_id_handler(request: Request, exc: InvalidId):
        return error_response(400, f"Invalid _id: {exc}", "CAST_ERROR")

    @app.exception_handler(DuplicateKeyError)
    async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
        key_value = (exc.details or {}).get("keyValue") or {}
        value = next(iter(key_value.values()), "")
        return error_response(
            400,
            f"Duplicate field value: {value}. Please use another value!",
            "DUPLICATE_KEY",
            key_value or None
        )

    @app.exception_handler(ExpiredSignatureError)
    async def expired_token_handler(request: Request, exc: ExpiredSignatureError):
        return error_response(401, "Your token has expired! Please log in again.", "TOKEN_EXPIRED")

    @app.exception_handler(JWTError)
    async def invalid_token_handler(request: Request, exc: JWTError):
        return error_response(401, "Invalid token. Please log in again!", "INVALID_TOKEN")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all for unhandled exceptions.
        """
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "method": request.method,
                "url": str(request.url),
                "client": request.client.host if request.client else "unknown"
            },
            exc_info=True
        )

        message = "Something went wrong!" if settings.is_production else (str(exc) or "Something went wrong!")
        return error_response(500, message, "INTERNAL_ERROR")
