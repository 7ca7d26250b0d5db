# bshop/main.py

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import Settings, settings as default_settings
from .db import SnapshotRepository
from .errors import BookingError
from .routers.appointments_routes import router as appointments_router
from .routers.barbers_routes import router as barbers_router
from .routers.users_routes import router as users_router
from .scheduler import run_completion_loop
from .store import BookingStore

logger = logging.getLogger(__name__)


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("appointment_id", "client_id", "provider_id", "status", "penalty", "reason"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


def configure_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(asctime)s %(levelname)s:%(name)s:%(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if app.state.store is None:
        repository = SnapshotRepository.from_url(settings.database_url)
        app.state.store = BookingStore.from_settings(settings, repository=repository)
        logger.info("Store ready (%s)", settings.database_url)

    sweeper = None
    if settings.sweep_interval_seconds > 0:
        sweeper = asyncio.create_task(
            run_completion_loop(app.state.store, settings.sweep_interval_seconds)
        )

    yield

    if sweeper is not None:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
    logger.info("Shutting down")


def create_app(settings: Optional[Settings] = None, store: Optional[BookingStore] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(title="BShop Booking", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error": type(exc).__name__, "context": exc.context},
        )

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    app.include_router(barbers_router)
    app.include_router(appointments_router)
    app.include_router(users_router)
    return app


configure_logging(default_settings.log_level)
app = create_app()
