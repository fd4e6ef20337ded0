import logging
import time
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cluster_monitor.api.schemas.monitoring import ErrorResponse
from cluster_monitor.config import settings
from cluster_monitor.core.exceptions import MonitoringError

logger = logging.getLogger(__name__)


def error_response(request: Request, status_code: int, message: str, details: Optional[Any] = None,
                   exc: Optional[BaseException] = None) -> JSONResponse:
    """Corps d'erreur uniforme pour toutes les routes"""
    logger.error(
        f"{request.method} {request.url.path} - Status: {status_code} - Message: {message}",
        exc_info=exc if status_code >= 500 else None,
    )
    body = ErrorResponse(
        status_code=status_code,
        path=request.url.path,
        method=request.method,
        message=message,
        details=details,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


async def monitoring_error_handler(request: Request, exc: MonitoringError) -> JSONResponse:
    return error_response(request, exc.status_code, exc.message, exc.details, exc)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = error_response(request, exc.status_code, str(exc.detail))
    if getattr(exc, "headers", None):
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(request, 422, "Validation failed", jsonable_errors(exc))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return error_response(request, 500, "Internal server error", exc=exc)


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


def setup_middlewares(app: FastAPI) -> None:
    """CORS, journalisation des requêtes et gestionnaires d'erreurs"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} - {response.status_code} - {duration_ms:.1f}ms")
        return response

    app.add_exception_handler(MonitoringError, monitoring_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
