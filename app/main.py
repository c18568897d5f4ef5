from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api import router
from app.schemas import ErrorResponse
from datastore.errors import ValidationError
from datastore.store import build_default_store
from logging_config import configure_logging
from services.seeder import seed_store
from services.simulator import build_default_simulator
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    store = build_default_store()
    simulator = None
    try:
        # Schema failures propagate and abort startup.
        await run_in_threadpool(store.init_schema)
        if settings.seed_on_startup:
            await run_in_threadpool(seed_store, store)

        simulator = build_default_simulator()
        if settings.simulator_enabled:
            simulator.start()
        yield
    finally:
        if simulator is not None:
            simulator.shutdown()
            # Lets the deferred scheduler stop run on this loop.
            await asyncio.sleep(0)
        build_default_simulator.cache_clear()
        store.close()
        build_default_store.cache_clear()


async def _validation_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.warning("Rejected malformed request", extra={"reason": str(exc)})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error="Invalid request").model_dump(),
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Building Sensor Telemetry",
        description="Polling API over simulated building-sensor readings.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.include_router(router)
    return app

app = create_app()
