"""Domain models shared across the store, ingestion and query layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(slots=True, frozen=True)
class SensorDescriptor:
    """Provisioning input for a sensor bound to one building element."""

    sensor_id: str
    element_id: str
    sensor_type: str = "multi"
    element_name: Optional[str] = None
    location: Optional[str] = None


@dataclass(slots=True, frozen=True)
class ReadingValues:
    """One generated temperature/humidity/CO2 triple."""

    temperature: Optional[float]
    humidity: Optional[float]
    co2: Optional[float]


@dataclass(slots=True)
class HistoryPoint:
    """A reading projected onto its channels and timestamp."""

    temperature: Optional[float]
    humidity: Optional[float]
    co2: Optional[float]
    timestamp: datetime


@dataclass(slots=True)
class SensorSnapshot:
    """A sensor joined with its most recent reading, if it has one."""

    sensor_id: str
    element_id: str
    element_name: Optional[str]
    location: Optional[str]
    sensor_type: str
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    co2: Optional[float] = None
    timestamp: Optional[datetime] = None


@dataclass
class SeedReport:
    added: List[str] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    reading_count: int = 0


@dataclass
class TickReport:
    updated: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
