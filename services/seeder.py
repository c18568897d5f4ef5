"""One-time provisioning of the demo sensors and their backfilled history."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Optional, Sequence

from datastore.errors import DuplicateSensorError, SensorStoreError
from datastore.store import SensorStore
from models.records import SeedReport, SensorDescriptor
from services.generator import backfill_readings

logger = logging.getLogger(__name__)

DEFAULT_SENSORS: tuple[SensorDescriptor, ...] = (
    SensorDescriptor("SENS-001", "wall-001", "multi", "Exterior Wall - North", "Floor 1, North Wall"),
    SensorDescriptor("SENS-002", "room-001", "multi", "Conference Room A", "Floor 1, Room 101"),
    SensorDescriptor("SENS-003", "hvac-001", "multi", "HVAC Unit 1", "Floor 1, Mechanical Room"),
    SensorDescriptor("SENS-004", "wall-002", "multi", "Interior Wall - Office", "Floor 2, Office Space"),
    SensorDescriptor("SENS-005", "room-002", "multi", "Server Room", "Floor 1, Room 105"),
    SensorDescriptor("SENS-006", "window-001", "multi", "Window - South Facade", "Floor 2, South Side"),
    SensorDescriptor("SENS-007", "room-003", "multi", "Meeting Room B", "Floor 1, Room 102"),
    SensorDescriptor("SENS-008", "corridor-001", "multi", "Main Corridor", "Floor 1, Main Hallway"),
)


def seed_store(
    store: SensorStore,
    sensors: Sequence[SensorDescriptor] = DEFAULT_SENSORS,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> SeedReport:
    """Add every sensor, then backfill a day of history for the ones that are new.

    Sensors that already exist are reported as duplicates and left untouched,
    so running this twice changes neither sensor nor reading counts.
    """
    report = SeedReport()
    now = now or datetime.now(timezone.utc)
    rng = rng or random.Random()

    for descriptor in sensors:
        try:
            store.add_sensor(descriptor)
        except DuplicateSensorError:
            report.duplicates.append(descriptor.sensor_id)
            logger.warning("Sensor already exists", extra={"sensor_id": descriptor.sensor_id})
            continue
        except SensorStoreError as exc:
            report.failed.append(descriptor.sensor_id)
            logger.error(
                "Failed to add sensor",
                extra={"sensor_id": descriptor.sensor_id, "reason": str(exc)},
            )
            continue
        report.added.append(descriptor.sensor_id)
        logger.info(
            "Added sensor",
            extra={"sensor_id": descriptor.sensor_id, "element_id": descriptor.element_id},
        )

    added = set(report.added)
    for index, descriptor in enumerate(sensors):
        if descriptor.sensor_id not in added:
            continue
        for timestamp, values in backfill_readings(index, now, rng=rng):
            try:
                store.add_reading(
                    descriptor.sensor_id,
                    values.temperature,
                    values.humidity,
                    values.co2,
                    timestamp=timestamp,
                )
            except SensorStoreError as exc:
                logger.error(
                    "Failed to add backfill reading",
                    extra={"sensor_id": descriptor.sensor_id, "reason": str(exc)},
                )
                continue
            report.reading_count += 1

    logger.info(
        "Seeding complete",
        extra={
            "sensor_count": len(report.added),
            "duplicate_count": len(report.duplicates),
            "failed_count": len(report.failed),
            "reading_count": report.reading_count,
        },
    )
    return report
