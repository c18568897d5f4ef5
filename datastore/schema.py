"""SQLAlchemy table layout for sensors and their readings."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utc_now_naive() -> datetime:
    """Current UTC time without tzinfo, the form SQLite columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class Sensor(Base):
    __tablename__ = "sensors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sensor_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    element_id: Mapped[str] = mapped_column(String, nullable=False)
    element_name: Mapped[Optional[str]] = mapped_column(String)
    location: Mapped[Optional[str]] = mapped_column(String)
    sensor_type: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now_naive
    )

    readings: Mapped[List["SensorReading"]] = relationship(
        back_populates="sensor", passive_deletes=True
    )


class SensorReading(Base):
    __tablename__ = "sensor_readings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sensor_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("sensors.sensor_id", ondelete="CASCADE"),
        nullable=False,
    )
    temperature: Mapped[Optional[float]] = mapped_column(Float)
    humidity: Mapped[Optional[float]] = mapped_column(Float)
    co2: Mapped[Optional[float]] = mapped_column(Float)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now_naive
    )

    sensor: Mapped[Sensor] = relationship(back_populates="readings")

    __table_args__ = (
        Index("idx_sensor_readings_sensor_id", "sensor_id"),
        Index("idx_sensor_readings_timestamp", "timestamp"),
        Index("idx_sensor_readings_sensor_ts", "sensor_id", text("timestamp DESC")),
    )
