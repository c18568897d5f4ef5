"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class SensorWithLatestReading(BaseModel):
    """A sensor and the channels of its most recent reading."""

    model_config = ConfigDict(from_attributes=True)

    sensor_id: str
    element_id: str
    element_name: Optional[str] = None
    location: Optional[str] = None
    sensor_type: str
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    co2: Optional[float] = None
    timestamp: Optional[datetime] = Field(
        default=None, description="Observation time of the latest reading, if any."
    )


class Reading(BaseModel):
    """One historical observation, without its owning sensor."""

    model_config = ConfigDict(from_attributes=True)

    temperature: Optional[float] = None
    humidity: Optional[float] = None
    co2: Optional[float] = None
    timestamp: datetime


class LatestReadingsResponse(BaseModel):
    success: Literal[True] = True
    count: int = Field(..., ge=0)
    data: List[SensorWithLatestReading]
    timestamp: datetime


class HistoryResponse(BaseModel):
    success: Literal[True] = True
    count: int = Field(..., ge=0)
    data: List[Reading] = Field(..., description="Readings ordered newest first.")


class HealthResponse(BaseModel):
    success: Literal[True] = True
    status: Literal["healthy"] = "healthy"
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Failure payload; never carries internal error detail."""

    success: Literal[False] = False
    error: str
