from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import AttendanceRecord, DeviceFingerprint, GeoLocation, HourBreakdown
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, check_in_time, check_out_time, status,
    is_remote, shift_id, check_in_selfie, check_out_selfie, check_in_location,
    check_out_location, device_info, ip_address, total_hours, regular_hours,
    overtime_hours, break_hours, notes
"""


def _opt_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    hours = None
    if r.get("total_hours") is not None:
        hours = HourBreakdown(
            total_hours=float(r["total_hours"]),
            regular_hours=_opt_float(r.get("regular_hours")),
            overtime_hours=_opt_float(r.get("overtime_hours")),
            break_hours=_opt_float(r.get("break_hours")),
        )
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        status=AttendanceStatus(r["status"]),
        is_remote=bool(r.get("is_remote")),
        shift_id=int(r["shift_id"]) if r.get("shift_id") is not None else None,
        check_in_selfie=r.get("check_in_selfie"),
        check_out_selfie=r.get("check_out_selfie"),
        check_in_location=GeoLocation.from_dict(load_json(r.get("check_in_location"))),
        check_out_location=GeoLocation.from_dict(load_json(r.get("check_out_location"))),
        device_info=DeviceFingerprint.from_dict(load_json(r.get("device_info"))),
        ip_address=r.get("ip_address"),
        hours=hours,
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create_checkin(
        self,
        *,
        employee_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
        is_remote: bool = False,
        shift_id: Optional[int] = None,
        selfie: Optional[str] = None,
        location: Optional[GeoLocation] = None,
        device_info: Optional[DeviceFingerprint] = None,
        ip_address: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        try:
            return self._insert_checkin(
                employee_id=employee_id,
                work_date=work_date,
                check_in_time=check_in_time,
                status=status,
                is_remote=is_remote,
                shift_id=shift_id,
                selfie=selfie,
                location=location,
                device_info=device_info,
                ip_address=ip_address,
                notes=notes,
            )
        except mysql.connector.IntegrityError as e:
            if e.errno != errorcode.ER_DUP_ENTRY:
                raise
            # Another device inserted today's row first (uq_attendance_employee_date).
            raise ConflictError(
                "Already checked in for today. You can only check out now.",
                code="ALREADY_CHECKED_IN",
            ) from None

    def _insert_checkin(self, *, employee_id, work_date, check_in_time, status, is_remote, shift_id,
                        selfie, location, device_info, ip_address, notes) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, work_date, check_in_time, status, is_remote, shift_id,
                    check_in_selfie, check_in_location, device_info, ip_address, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    work_date,
                    check_in_time,
                    status.value,
                    int(bool(is_remote)),
                    shift_id,
                    selfie,
                    dump_json(location.to_dict() if location else None),
                    dump_json(device_info.to_dict() if device_info else None),
                    ip_address,
                    notes,
                ),
            )
            return int(cur.lastrowid)

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        status: AttendanceStatus,
        hours: HourBreakdown,
        selfie: Optional[str] = None,
        location: Optional[GeoLocation] = None,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, status=%s, total_hours=%s, regular_hours=%s,
                    overtime_hours=%s, break_hours=%s, check_out_selfie=%s,
                    check_out_location=%s, notes=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (
                    check_out_time,
                    status.value,
                    hours.total_hours,
                    hours.regular_hours,
                    hours.overtime_hours,
                    hours.break_hours,
                    selfie,
                    dump_json(location.to_dict() if location else None),
                    notes,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0
