from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee
from .repository import EmployeeRepository


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, full_name, email, shift_id, is_active
                FROM employees
                WHERE employee_id=%s
                """,
                (int(employee_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Employee(
                employee_id=int(r["employee_id"]),
                full_name=r["full_name"],
                email=r.get("email"),
                shift_id=int(r["shift_id"]) if r.get("shift_id") is not None else None,
                is_active=bool(r.get("is_active", 1)),
            )
