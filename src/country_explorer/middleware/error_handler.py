"""Global error handlers producing uniform ``{success, error, details?, statusCode}`` responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from country_explorer.config import Settings
from country_explorer.errors import ApiError, InternalError, error_body

logger = structlog.get_logger()


def setup_error_handlers(app: FastAPI, settings: Settings) -> None:
    """Register global exception handlers."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        """Render domain errors raised by services and dependencies."""
        if exc.status_code >= 500:
            logger.error("api_error", path=request.url.path, error=exc.error)
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(error_body(exc.status_code, exc.error, exc.details)),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle HTTP exceptions (unknown routes, wrong methods) with the same envelope."""
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Schema violations in body, query or path are client errors (400)."""
        details = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=jsonable_encoder(error_body(400, "Validation error", details)),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions, always returned as JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        err = InternalError(details=str(exc) if settings.debug else None)
        return JSONResponse(
            status_code=err.status_code,
            content=error_body(err.status_code, err.error, err.details),
        )
