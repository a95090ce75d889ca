# backend/qrseat/main.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
import asyncio
import logging

from . import config
from .api import relay as relay_api
from .cleanup import run_cleanup
from .exceptions import RelayError, SessionInactiveError
from .logging_config import setup_logging
from .relay import RelayService
from .store import build_store

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message, **extra})


async def relay_error_handler(request: Request, exc: RelayError):
    if isinstance(exc, SessionInactiveError):
        return _error(exc.status_code, exc.message, sessionActive=False)
    if exc.status_code >= 500:
        logger.error("Relay failure on %s %s: %s", request.method, request.url.path, exc.message, exc_info=exc)
        return _error(exc.status_code, "Server error")
    return _error(exc.status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = sorted(
        {err["loc"][-1] for err in exc.errors() if err.get("loc") and isinstance(err["loc"][-1], str)}
    )
    if fields:
        message = "Missing or invalid fields: " + ", ".join(fields)
    else:
        message = "Invalid request body"
    return _error(400, message)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Server error")


def create_app(relay: Optional[RelayService] = None, cleanup: bool = True) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = relay is None
        app.state.relay = relay or RelayService(build_store())
        logger.info("Relay started: store=%s", app.state.relay.store.name)
        tasks = []
        if cleanup:
            tasks.append(asyncio.create_task(run_cleanup(app.state.relay)))
        yield
        for t in tasks:
            t.cancel()
        if owned:
            app.state.relay.close()

    app = FastAPI(lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # API
    app.include_router(relay_api.router, prefix="/api/qrseat")

    @app.get("/healthz")
    def healthz(request: Request):
        return {"ok": True, "store": request.app.state.relay.store.name}

    return app


setup_logging()
app = create_app()
