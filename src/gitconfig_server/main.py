# src/gitconfig_server/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from . import __version__
from .middleware import add_error_handlers, install_request_logging
from .routers import ROUTERS
from .state import AppState

logger = logging.getLogger("gitconfig_server")


def create_app(state: AppState) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        envs = list(state.registry)
        logger.info("Starting config server with %d environment(s): %s", len(envs), ", ".join(state.registry.names()))

        # a mirror that cannot be cloned/refreshed at startup aborts the process
        await state.mirror.sync_all(envs)
        state.mirror.start(envs)

        try:
            yield
        finally:
            await state.mirror.stop()
            logger.info("Shutdown complete")

    app = FastAPI(title="gitconfig-server", version=__version__, lifespan=lifespan)
    app.state.gitconfig = state

    install_request_logging(app)
    add_error_handlers(app)

    @app.get("/health", include_in_schema=False)
    async def health():
        return {"status": "ok"}

    base_path = state.http.normalized_base_path
    if base_path == "/":
        for router in ROUTERS:
            app.include_router(router)
    else:
        mounted = APIRouter(prefix=base_path)
        for router in ROUTERS:
            mounted.include_router(router)
        app.include_router(mounted)

    return app
