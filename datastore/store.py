"""SQLite-backed persistence and queries for sensors and readings."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Union

from sqlalchemy import and_, create_engine, delete, event, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from datastore.errors import (
    DuplicateSensorError,
    ReferentialError,
    StorageError,
    ValidationError,
)
from datastore.schema import Base, Sensor, SensorReading
from models.records import HistoryPoint, SensorDescriptor, SensorSnapshot
from settings import get_settings

logger = logging.getLogger(__name__)

TimestampInput = Union[datetime, str, None]

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _enable_sqlite_pragmas(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
    finally:
        cursor.close()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string into an aware UTC datetime."""
    candidate = value.strip()
    if not candidate:
        raise ValidationError("Timestamp is empty.")

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValidationError(f"Invalid timestamp {value!r}.") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _to_storage(value: TimestampInput) -> datetime:
    if value is None:
        return datetime.now(timezone.utc).replace(tzinfo=None)
    if isinstance(value, str):
        value = parse_timestamp(value)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _from_storage(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)


def parse_limit(raw: Union[str, int, None], default: int = 100, maximum: int = 1000) -> int:
    """Turn a caller-supplied history limit into a positive bounded integer.

    Only the leading integer counts, so ``"10.5"`` and ``"10abc"`` both mean 10.
    """
    if raw is None:
        return default
    match = _LEADING_INT.match(str(raw))
    if match is None:
        return default
    parsed = int(match.group(1))
    if parsed <= 0:
        return default
    return min(parsed, maximum)


class SensorStore:
    """Owns the database file and every read and write against it."""

    def __init__(self, database_path: Path) -> None:
        self.database_path = database_path
        self.engine: Engine = create_engine(
            f"sqlite:///{database_path}",
            future=True,
            connect_args={"check_same_thread": False},
        )
        event.listen(self.engine, "connect", _enable_sqlite_pragmas)
        self._session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )

    def init_schema(self) -> None:
        """Create tables and indexes unless they already exist."""
        try:
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
            Base.metadata.create_all(bind=self.engine)
        except (OSError, SQLAlchemyError) as exc:
            raise StorageError(
                f"Could not initialize database at {self.database_path}: {exc}"
            ) from exc
        logger.info("Database initialized", extra={"database_path": str(self.database_path)})

    def close(self) -> None:
        self.engine.dispose()

    def add_sensor(self, descriptor: SensorDescriptor) -> int:
        for field_name in ("sensor_id", "element_id", "sensor_type"):
            if not (getattr(descriptor, field_name) or "").strip():
                raise ValidationError(f"Sensor field {field_name!r} is required.")

        sensor = Sensor(
            sensor_id=descriptor.sensor_id,
            element_id=descriptor.element_id,
            element_name=descriptor.element_name,
            location=descriptor.location,
            sensor_type=descriptor.sensor_type,
        )
        try:
            with self._session_factory() as session, session.begin():
                session.add(sensor)
        except IntegrityError as exc:
            if "UNIQUE" in str(exc.orig):
                raise DuplicateSensorError(descriptor.sensor_id) from exc
            raise StorageError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc
        return sensor.id

    def add_reading(
        self,
        sensor_id: str,
        temperature: Optional[float],
        humidity: Optional[float],
        co2: Optional[float],
        timestamp: TimestampInput = None,
    ) -> int:
        reading = SensorReading(
            sensor_id=sensor_id,
            temperature=temperature,
            humidity=humidity,
            co2=co2,
            timestamp=_to_storage(timestamp),
        )
        try:
            with self._session_factory() as session, session.begin():
                session.add(reading)
        except IntegrityError as exc:
            if "FOREIGN KEY" in str(exc.orig):
                raise ReferentialError(sensor_id) from exc
            raise StorageError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc
        return reading.id

    def delete_sensor(self, sensor_id: str) -> bool:
        """Remove a sensor; its readings go with it through the cascade."""
        try:
            with self._session_factory() as session, session.begin():
                result = session.execute(delete(Sensor).where(Sensor.sensor_id == sensor_id))
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc
        return result.rowcount > 0

    def latest_per_sensor(self) -> list[SensorSnapshot]:
        ranked = select(
            SensorReading.id.label("reading_id"),
            func.row_number()
            .over(
                partition_by=SensorReading.sensor_id,
                order_by=(SensorReading.timestamp.desc(), SensorReading.id.desc()),
            )
            .label("position"),
        ).subquery()
        latest_ids = select(ranked.c.reading_id).where(ranked.c.position == 1)

        statement = (
            select(Sensor, SensorReading)
            .outerjoin(
                SensorReading,
                and_(
                    SensorReading.sensor_id == Sensor.sensor_id,
                    SensorReading.id.in_(latest_ids),
                ),
            )
            .order_by(Sensor.sensor_id)
        )

        try:
            with self._session_factory() as session:
                rows = session.execute(statement).all()
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

        snapshots: list[SensorSnapshot] = []
        for sensor, reading in rows:
            snapshot = SensorSnapshot(
                sensor_id=sensor.sensor_id,
                element_id=sensor.element_id,
                element_name=sensor.element_name,
                location=sensor.location,
                sensor_type=sensor.sensor_type,
            )
            if reading is not None:
                snapshot.temperature = reading.temperature
                snapshot.humidity = reading.humidity
                snapshot.co2 = reading.co2
                snapshot.timestamp = _from_storage(reading.timestamp)
            snapshots.append(snapshot)
        return snapshots

    def history(self, sensor_id: str, limit: int = 100) -> list[HistoryPoint]:
        if limit <= 0:
            raise ValidationError("History limit must be a positive integer.")

        statement = (
            select(
                SensorReading.temperature,
                SensorReading.humidity,
                SensorReading.co2,
                SensorReading.timestamp,
            )
            .where(SensorReading.sensor_id == sensor_id)
            .order_by(SensorReading.timestamp.desc(), SensorReading.id.desc())
            .limit(limit)
        )
        try:
            with self._session_factory() as session:
                rows = session.execute(statement).all()
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

        return [
            HistoryPoint(
                temperature=row.temperature,
                humidity=row.humidity,
                co2=row.co2,
                timestamp=_from_storage(row.timestamp),
            )
            for row in rows
        ]

    def count_sensors(self) -> int:
        return self._count(Sensor)

    def count_readings(self, sensor_id: Optional[str] = None) -> int:
        return self._count(SensorReading, sensor_id)

    def _count(self, model: type[Base], sensor_id: Optional[str] = None) -> int:
        statement = select(func.count()).select_from(model)
        if sensor_id is not None:
            statement = statement.where(model.sensor_id == sensor_id)
        try:
            with self._session_factory() as session:
                return int(session.execute(statement).scalar_one())
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc


@lru_cache
def build_default_store(path: Optional[str] = None) -> SensorStore:
    settings = get_settings()
    database_path = settings.database_path if path is None else path
    return SensorStore(database_path=Path(database_path))
