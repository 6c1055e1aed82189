from __future__ import annotations

from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import Shift
from .repository import ShiftRepository

_SELECT_SHIFT = "SELECT shift_id, shift_name, start_time, end_time, break_minutes FROM shifts WHERE shift_id=%s"


def _to_shift(r: Dict[str, Any]) -> Shift:
    return Shift(
        shift_id=int(r["shift_id"]),
        shift_name=r["shift_name"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        break_minutes=int(r.get("break_minutes") or 0),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_SHIFT, (int(shift_id),))
            row = fetchone(cur)
        return _to_shift(row) if row else None
