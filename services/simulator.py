"""Periodic simulated readings for every known sensor."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from datastore.errors import SensorStoreError
from datastore.store import SensorStore, build_default_store
from models.records import TickReport
from services.generator import generate_reading
from settings import get_settings

logger = logging.getLogger(__name__)

TICK_JOB_ID = "simulated-readings"


class SimulatorService:
    """Owns the scheduled job that appends one reading per sensor each tick."""

    def __init__(
        self,
        store: SensorStore,
        interval_seconds: float = 30.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.interval_seconds = interval_seconds
        self.rng = rng or random.Random()
        self.scheduler = AsyncIOScheduler()

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self) -> None:
        """Schedule the tick. Must be called from a running event loop."""
        if self.scheduler.get_job(TICK_JOB_ID) is not None:
            return
        self.scheduler.add_job(
            self.run_tick,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=TICK_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info(
            "Simulated updates scheduled",
            extra={"interval_seconds": self.interval_seconds},
        )

    def shutdown(self) -> None:
        """Drop the tick job, then stop the scheduler.

        APScheduler 3.11 defers the asyncio scheduler shutdown to the next loop
        iteration; removing the job first guarantees no further tick fires.
        """
        if self.scheduler.get_job(TICK_JOB_ID) is not None:
            self.scheduler.remove_job(TICK_JOB_ID)
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def run_tick(self, now: Optional[datetime] = None) -> TickReport:
        """Insert one default-base reading per sensor, tolerating per-sensor failures."""
        report = TickReport()
        timestamp = now or datetime.now(timezone.utc)

        try:
            sensors = self.store.latest_per_sensor()
        except SensorStoreError as exc:
            logger.error("Could not list sensors for update", extra={"reason": str(exc)})
            return report

        for sensor in sensors:
            values = generate_reading(rng=self.rng)
            try:
                self.store.add_reading(
                    sensor.sensor_id,
                    values.temperature,
                    values.humidity,
                    values.co2,
                    timestamp=timestamp,
                )
            except SensorStoreError as exc:
                report.failed.append(sensor.sensor_id)
                logger.warning(
                    "Simulated reading not stored",
                    extra={"sensor_id": sensor.sensor_id, "reason": str(exc)},
                )
                continue
            report.updated.append(sensor.sensor_id)

        logger.info(
            "Updated sensors",
            extra={"sensor_count": len(report.updated), "failed_count": len(report.failed)},
        )
        return report


@lru_cache
def build_default_simulator(interval_seconds: Optional[float] = None) -> SimulatorService:
    """Factory that wires the simulator to the default store."""
    settings = get_settings()
    interval = interval_seconds or settings.update_interval_seconds
    return SimulatorService(store=build_default_store(), interval_seconds=interval)
