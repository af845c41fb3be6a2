# src/gitconfig_server/middleware/error_handlers.py
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import BadRequestError, NotFoundError

logger = logging.getLogger("gitconfig_server.errors")


def not_found_response(path: str) -> JSONResponse:
    """Spring Boot style 404 body, which config clients know how to read."""
    ts = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return JSONResponse(
        status_code=404,
        content={"timestamp": ts, "status": 404, "error": "Not Found", "path": path},
    )


def add_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return not_found_response(request.url.path)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "status_code": exc.status_code},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        logger.debug("Not found: %s (%s)", request.url.path, exc)
        return not_found_response(request.url.path)

    @app.exception_handler(BadRequestError)
    async def bad_request_handler(request: Request, exc: BadRequestError):
        logger.info("Bad request %s: %s", request.url.path, exc.message)
        return JSONResponse(status_code=400, content={"detail": exc.message, "status_code": 400})

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})
