"""Unit tests for the SQLite sensor store and its queries."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from datastore.errors import (
    DuplicateSensorError,
    ReferentialError,
    StorageError,
    ValidationError,
)
from datastore.store import SensorStore, parse_limit
from models.records import SensorDescriptor

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _descriptor(sensor_id: str = "SENS-001") -> SensorDescriptor:
    return SensorDescriptor(
        sensor_id=sensor_id,
        element_id=f"element-{sensor_id}",
        sensor_type="multi",
        element_name="Conference Room A",
        location="Floor 1, Room 101",
    )


@pytest.fixture
def store(tmp_path: Path) -> SensorStore:
    sensor_store = SensorStore(database_path=tmp_path / "sensors.sqlite")
    sensor_store.init_schema()
    yield sensor_store
    sensor_store.close()


def test_init_schema_is_idempotent(store: SensorStore) -> None:
    store.add_sensor(_descriptor())

    store.init_schema()

    assert store.count_sensors() == 1


def test_init_schema_creates_missing_parent_directory(tmp_path: Path) -> None:
    nested = SensorStore(database_path=tmp_path / "nested" / "dir" / "sensors.sqlite")
    try:
        nested.init_schema()
        assert (tmp_path / "nested" / "dir" / "sensors.sqlite").exists()
    finally:
        nested.close()


def test_init_schema_failure_raises_storage_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("occupied")
    broken = SensorStore(database_path=blocker / "sensors.sqlite")

    with pytest.raises(StorageError):
        broken.init_schema()
    broken.close()


def test_data_survives_reopening_the_database(tmp_path: Path) -> None:
    path = tmp_path / "sensors.sqlite"
    first = SensorStore(database_path=path)
    first.init_schema()
    first.add_sensor(_descriptor())
    first.add_reading("SENS-001", 21.5, 44.0, 410.0, timestamp=T0)
    first.close()

    reopened = SensorStore(database_path=path)
    reopened.init_schema()
    try:
        assert reopened.count_sensors() == 1
        assert reopened.count_readings("SENS-001") == 1
    finally:
        reopened.close()


def test_duplicate_sensor_raises(store: SensorStore) -> None:
    store.add_sensor(_descriptor())

    with pytest.raises(DuplicateSensorError) as excinfo:
        store.add_sensor(_descriptor())

    assert excinfo.value.sensor_id == "SENS-001"
    assert store.count_sensors() == 1


@pytest.mark.parametrize("field_name", ["sensor_id", "element_id", "sensor_type"])
def test_add_sensor_requires_identifying_fields(store: SensorStore, field_name: str) -> None:
    values = {"sensor_id": "SENS-009", "element_id": "wall-009", "sensor_type": "multi"}
    values[field_name] = "  "

    with pytest.raises(ValidationError):
        store.add_sensor(SensorDescriptor(**values))

    assert store.count_sensors() == 0


def test_reading_for_unknown_sensor_is_rejected(store: SensorStore) -> None:
    store.add_sensor(_descriptor())
    store.add_reading("SENS-001", 22.0, 45.0, 400.0, timestamp=T0)

    with pytest.raises(ReferentialError) as excinfo:
        store.add_reading("SENS-404", 22.0, 45.0, 400.0)

    assert excinfo.value.sensor_id == "SENS-404"
    assert store.count_readings() == 1


def test_reading_channels_are_nullable(store: SensorStore) -> None:
    store.add_sensor(_descriptor())

    store.add_reading("SENS-001", None, 50.0, None, timestamp=T0)

    [point] = store.history("SENS-001")
    assert point.temperature is None
    assert point.humidity == 50.0
    assert point.co2 is None


def test_reading_timestamp_defaults_to_now(store: SensorStore) -> None:
    store.add_sensor(_descriptor())
    before = datetime.now(timezone.utc)

    store.add_reading("SENS-001", 22.0, 45.0, 400.0)

    [point] = store.history("SENS-001")
    after = datetime.now(timezone.utc)
    assert point.timestamp.tzinfo is not None
    assert before - timedelta(seconds=1) <= point.timestamp <= after + timedelta(seconds=1)


def test_reading_accepts_iso_strings(store: SensorStore) -> None:
    store.add_sensor(_descriptor())

    store.add_reading("SENS-001", 22.0, 45.0, 400.0, timestamp="2024-03-01T10:00:00Z")
    store.add_reading("SENS-001", 23.0, 46.0, 401.0, timestamp="2024-03-01T12:30:00+02:00")

    timestamps = [point.timestamp for point in store.history("SENS-001")]
    assert timestamps == [
        datetime(2024, 3, 1, 10, 30, tzinfo=timezone.utc),
        datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc),
    ]


def test_reading_with_malformed_timestamp_is_rejected(store: SensorStore) -> None:
    store.add_sensor(_descriptor())

    with pytest.raises(ValidationError):
        store.add_reading("SENS-001", 22.0, 45.0, 400.0, timestamp="yesterday")

    assert store.count_readings() == 0


def test_history_scenario_returns_newest_first(store: SensorStore) -> None:
    store.add_sensor(_descriptor())
    store.add_reading("SENS-001", 20.0, 40.0, 390.0, timestamp=T0)
    store.add_reading("SENS-001", 23.0, 43.0, 430.0, timestamp=T0 + timedelta(minutes=2))
    store.add_reading("SENS-001", 21.0, 41.0, 410.0, timestamp=T0 + timedelta(minutes=1))

    history = store.history("SENS-001", 2)

    assert [point.timestamp for point in history] == [
        T0 + timedelta(minutes=2),
        T0 + timedelta(minutes=1),
    ]
    assert history[0].temperature == 23.0

    [latest] = store.latest_per_sensor()
    assert (latest.temperature, latest.humidity, latest.co2) == (23.0, 43.0, 430.0)
    assert latest.timestamp == T0 + timedelta(minutes=2)


def test_history_is_bounded_and_scoped_to_sensor(store: SensorStore) -> None:
    store.add_sensor(_descriptor("SENS-001"))
    store.add_sensor(_descriptor("SENS-002"))
    for minute in range(10):
        store.add_reading("SENS-001", 20.0 + minute, 40.0, 400.0, timestamp=T0 + timedelta(minutes=minute))
        store.add_reading("SENS-002", 30.0, 50.0, 500.0, timestamp=T0 + timedelta(minutes=minute))

    history = store.history("SENS-001", 4)

    assert len(history) == 4
    assert all(point.temperature < 30.0 for point in history)
    timestamps = [point.timestamp for point in history]
    assert timestamps == sorted(timestamps, reverse=True)


def test_history_for_unknown_sensor_is_empty(store: SensorStore) -> None:
    assert store.history("SENS-404") == []


def test_history_rejects_non_positive_limit(store: SensorStore) -> None:
    with pytest.raises(ValidationError):
        store.history("SENS-001", 0)


def test_latest_includes_every_sensor_once_ordered_by_id(store: SensorStore) -> None:
    for sensor_id in ("SENS-003", "SENS-001", "SENS-002"):
        store.add_sensor(_descriptor(sensor_id))
    for minute in range(3):
        store.add_reading("SENS-001", 20.0, 40.0, 400.0, timestamp=T0 + timedelta(minutes=minute))
    store.add_reading("SENS-003", 25.0, 55.0, 450.0, timestamp=T0)

    snapshots = store.latest_per_sensor()

    assert [snapshot.sensor_id for snapshot in snapshots] == ["SENS-001", "SENS-002", "SENS-003"]
    without_readings = snapshots[1]
    assert without_readings.element_id == "element-SENS-002"
    assert without_readings.temperature is None
    assert without_readings.humidity is None
    assert without_readings.co2 is None
    assert without_readings.timestamp is None


def test_latest_breaks_timestamp_ties_by_insertion_order(store: SensorStore) -> None:
    store.add_sensor(_descriptor())
    store.add_reading("SENS-001", 20.0, 40.0, 400.0, timestamp=T0)
    store.add_reading("SENS-001", 24.0, 48.0, 480.0, timestamp=T0)

    [latest] = store.latest_per_sensor()
    history = store.history("SENS-001")

    assert latest.temperature == 24.0
    assert [point.temperature for point in history] == [24.0, 20.0]


def test_delete_sensor_cascades_to_readings(store: SensorStore) -> None:
    store.add_sensor(_descriptor("SENS-001"))
    store.add_sensor(_descriptor("SENS-002"))
    store.add_reading("SENS-001", 22.0, 45.0, 400.0, timestamp=T0)
    store.add_reading("SENS-001", 22.5, 45.5, 405.0, timestamp=T0 + timedelta(minutes=1))
    store.add_reading("SENS-002", 21.0, 44.0, 399.0, timestamp=T0)

    assert store.delete_sensor("SENS-001") is True

    assert store.count_readings("SENS-001") == 0
    assert store.count_readings() == 1
    assert [snapshot.sensor_id for snapshot in store.latest_per_sensor()] == ["SENS-002"]


def test_delete_unknown_sensor_returns_false(store: SensorStore) -> None:
    assert store.delete_sensor("SENS-404") is False


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, 100),
        ("", 100),
        ("abc", 100),
        ("0", 100),
        ("-5", 100),
        ("25", 25),
        (" 7 ", 7),
        (50, 50),
        ("5000", 1000),
        ("10.5", 10),
        ("10abc", 10),
        ("+7", 7),
        ("abc10", 100),
    ],
)
def test_parse_limit(raw, expected: int) -> None:
    assert parse_limit(raw, default=100, maximum=1000) == expected
