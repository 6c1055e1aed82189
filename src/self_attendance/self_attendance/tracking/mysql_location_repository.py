from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import LocationSample
from .repository import LocationSampleRepository


class MySQLLocationSampleRepository(LocationSampleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(
        self,
        *,
        attendance_id: int,
        employee_id: int,
        latitude: float,
        longitude: float,
        captured_at: datetime,
        accuracy: Optional[float] = None,
        address: Optional[str] = None,
    ) -> LocationSample:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO location_tracking(
                    attendance_id, employee_id, latitude, longitude, accuracy, address, captured_at, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (int(attendance_id), int(employee_id), latitude, longitude, accuracy, address, captured_at),
            )
            return LocationSample(
                sample_id=int(cur.lastrowid),
                attendance_id=int(attendance_id),
                employee_id=int(employee_id),
                latitude=latitude,
                longitude=longitude,
                captured_at=captured_at,
                accuracy=accuracy,
                address=address,
                is_active=True,
            )

    def deactivate(self, *, attendance_id: int, employee_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE location_tracking
                SET is_active=0
                WHERE attendance_id=%s AND employee_id=%s AND is_active=1
                """,
                (int(attendance_id), int(employee_id)),
            )
            return int(cur.rowcount or 0)

    def list_for_attendance(self, *, attendance_id: int, employee_id: int) -> Sequence[LocationSample]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT sample_id, attendance_id, employee_id, latitude, longitude, accuracy,
                       address, captured_at, is_active
                FROM location_tracking
                WHERE attendance_id=%s AND employee_id=%s
                ORDER BY captured_at ASC, sample_id ASC
                """,
                (int(attendance_id), int(employee_id)),
            )
            return [
                LocationSample(
                    sample_id=int(r["sample_id"]),
                    attendance_id=int(r["attendance_id"]),
                    employee_id=int(r["employee_id"]),
                    latitude=float(r["latitude"]),
                    longitude=float(r["longitude"]),
                    captured_at=r["captured_at"],
                    accuracy=float(r["accuracy"]) if r.get("accuracy") is not None else None,
                    address=r.get("address"),
                    is_active=bool(r.get("is_active")),
                )
                for r in fetchall(cur)
            ]
