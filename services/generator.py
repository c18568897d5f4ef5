"""Randomized reading generation for seeding and live simulation."""

from __future__ import annotations

import math
import random
from datetime import datetime, timedelta, timezone
from typing import Iterator, Optional

from models.records import ReadingValues

TEMPERATURE_SPREAD = 4.0
HUMIDITY_SPREAD = 10.0
CO2_SPREAD = 100.0

TEMPERATURE_AMPLITUDE = 2.0
HUMIDITY_AMPLITUDE = 5.0
CO2_AMPLITUDE = 100.0

BACKFILL_STEP = timedelta(minutes=30)
BACKFILL_POINTS = 49


def _jitter(rng: random.Random, spread: float) -> float:
    return rng.uniform(-spread / 2, spread / 2)


def generate_reading(
    base_temperature: float = 22,
    base_humidity: float = 45,
    base_co2: float = 400,
    rng: Optional[random.Random] = None,
) -> ReadingValues:
    """Return ``base +/- spread/2`` per channel, rounded like a real sensor reports."""
    rng = rng or random.Random()
    return ReadingValues(
        temperature=round(base_temperature + _jitter(rng, TEMPERATURE_SPREAD), 1),
        humidity=round(base_humidity + _jitter(rng, HUMIDITY_SPREAD), 1),
        co2=float(round(base_co2 + _jitter(rng, CO2_SPREAD))),
    )


def diurnal_factor(timestamp: datetime) -> float:
    """Day/night weight in ``[0, 1)``; zero at midnight UTC, peaking at noon."""
    hour = timestamp.astimezone(timezone.utc).hour
    return math.sin(hour / 24 * math.pi)


def apply_diurnal(values: ReadingValues, timestamp: datetime) -> ReadingValues:
    factor = diurnal_factor(timestamp)
    return ReadingValues(
        temperature=round(values.temperature + factor * TEMPERATURE_AMPLITUDE, 1),
        humidity=round(values.humidity - factor * HUMIDITY_AMPLITUDE, 1),
        co2=float(round(values.co2 + factor * CO2_AMPLITUDE)),
    )


def sensor_bases(index: int) -> tuple[float, float, float]:
    """Per-sensor base values so seeded sensors do not all look alike."""
    return (20 + index % 5, 40 + index % 15, 400 + index * 20)


def backfill_readings(
    index: int,
    now: datetime,
    rng: Optional[random.Random] = None,
) -> Iterator[tuple[datetime, ReadingValues]]:
    """Yield the preceding 24 hours of readings at 30 minute spacing, oldest first."""
    rng = rng or random.Random()
    base_temperature, base_humidity, base_co2 = sensor_bases(index)
    for step in range(BACKFILL_POINTS - 1, -1, -1):
        timestamp = now - step * BACKFILL_STEP
        values = generate_reading(base_temperature, base_humidity, base_co2, rng=rng)
        yield timestamp, apply_diurnal(values, timestamp)
