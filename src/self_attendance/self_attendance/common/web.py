from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request

from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

EMPLOYEE_HEADER = "X-Employee-Id"


def json_ok(data: Optional[dict] = None, *, message: Optional[str] = None, status: int = 200):
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def json_error(error: str, *, code: str, status: int = 400):
    return jsonify({"success": False, "error": error, "code": code}), status


def current_employee_id() -> int:
    raw = (request.headers.get(EMPLOYEE_HEADER) or "").strip()
    if not raw:
        raise AuthenticationError("Authentication required")
    try:
        return int(raw)
    except ValueError:
        raise AuthenticationError("Authentication required") from None


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def client_ip() -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr


def api_endpoint(failure_message: str, failure_code: str):
    """Translate domain exceptions raised by a JSON view into error responses."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except AuthenticationError as e:
                return json_error(str(e), code="AUTH_REQUIRED", status=401)
            except NotFoundError as e:
                return json_error(str(e), code=e.code, status=404)
            except ConflictError as e:
                return json_error(str(e), code=e.code)
            except ValidationError as e:
                return json_error(str(e), code="VALIDATION_ERROR")
            except Exception:
                logger.exception("%s (%s %s)", failure_message, request.method, request.path)
                return json_error(failure_message, code=failure_code, status=500)

        return wrapper

    return decorator
