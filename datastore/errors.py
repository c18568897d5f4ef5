"""Failures raised by the sensor store and the ingestion paths built on it."""

from __future__ import annotations


class SensorStoreError(Exception):
    """Base class for every error the store surfaces to callers."""


class DuplicateSensorError(SensorStoreError):
    def __init__(self, sensor_id: str) -> None:
        super().__init__(f"Sensor {sensor_id!r} already exists.")
        self.sensor_id = sensor_id


class ReferentialError(SensorStoreError):
    def __init__(self, sensor_id: str) -> None:
        super().__init__(f"Sensor {sensor_id!r} does not exist.")
        self.sensor_id = sensor_id


class StorageError(SensorStoreError):
    """Any persistence failure that is not a known constraint violation."""


class ValidationError(SensorStoreError):
    """Malformed input rejected before it reaches the database."""
