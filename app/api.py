"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from app.schemas import (
    ErrorResponse,
    HealthResponse,
    HistoryResponse,
    LatestReadingsResponse,
    Reading,
    SensorWithLatestReading,
)
from datastore.errors import StorageError
from datastore.store import SensorStore, build_default_store, parse_limit
from settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_store() -> SensorStore:
    return build_default_store()


def _error(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error=message).model_dump(),
    )


@router.get(
    "/sensors/latest",
    response_model=LatestReadingsResponse,
    responses={500: {"model": ErrorResponse}},
    summary="All sensors with their most recent reading.",
)
async def latest_readings(
    store: SensorStore = Depends(get_store),
) -> Union[LatestReadingsResponse, JSONResponse]:
    try:
        snapshots = await run_in_threadpool(store.latest_per_sensor)
    except StorageError:
        logger.exception("Error fetching sensors")
        return _error("Failed to fetch sensor data")

    data = [SensorWithLatestReading.model_validate(snapshot) for snapshot in snapshots]
    return LatestReadingsResponse(
        count=len(data),
        data=data,
        timestamp=datetime.now(timezone.utc),
    )


@router.get(
    "/sensors/{sensor_id}/history",
    response_model=HistoryResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Newest-first readings for one sensor.",
)
async def sensor_history(
    sensor_id: str,
    limit: Optional[str] = Query(None, description="Maximum number of readings (default 100)."),
    store: SensorStore = Depends(get_store),
) -> Union[HistoryResponse, JSONResponse]:
    settings = get_settings()
    bounded = parse_limit(
        limit,
        default=settings.history_default_limit,
        maximum=settings.history_max_limit,
    )
    try:
        points = await run_in_threadpool(store.history, sensor_id, bounded)
    except StorageError:
        logger.exception(
            "Error fetching sensor history", extra={"sensor_id": sensor_id, "limit": bounded}
        )
        return _error("Failed to fetch sensor history")

    data = [Reading.model_validate(point) for point in points]
    return HistoryResponse(count=len(data), data=data)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> HealthResponse:
    return HealthResponse(timestamp=datetime.now(timezone.utc))
