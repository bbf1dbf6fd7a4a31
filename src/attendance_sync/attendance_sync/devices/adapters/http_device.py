from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

import pytz

from ...common.datetime_utils import parse_device_timestamp
from ...core.enums import PunchType
from ..model import RawPunchEvent
from .http_base import HttpAdapterBase

logger = logging.getLogger(__name__)

_EMPLOYEE_FIELDS = ("employee_id", "employeeId", "emp_code", "employee_code", "user_id", "userId")
_TIME_FIELDS = ("punch_time", "punchTime", "timestamp", "time", "checktime")
_TYPE_FIELDS = ("type", "punch_type", "punchType", "direction", "punch_state")

_OUT_MARKERS = ("out", "1", "check-out", "checkout", "check_out")


def _first(record: Mapping[str, Any], fields) -> Any:
    for field in fields:
        value = record.get(field)
        if value not in (None, ""):
            return value
    return None


def _punch_type(value: Any) -> PunchType:
    text = str(value if value is not None else "").strip().lower()
    if text in _OUT_MARKERS:
        return PunchType.CHECK_OUT
    return PunchType.CHECK_IN


class HttpDeviceAdapter(HttpAdapterBase):
    """Devices or middleware exposing a plain JSON log endpoint.

    ``GET {api_url}{logs_path}?since=<iso>`` must return either a list of
    records or an object wrapping them under ``logs``, ``data`` or ``results``.
    """

    vendor = "HTTP"
    required_fields = ("api_url",)

    def _fetch(self, since: Optional[datetime]) -> List[RawPunchEvent]:
        params: Dict[str, str] = {}
        if since is not None:
            params["since"] = since.astimezone(pytz.utc).isoformat()

        data = self._request("GET", str(self._config.get("logs_path") or "/logs"), params=params)
        if isinstance(data, dict):
            data = data.get("logs") or data.get("data") or data.get("results") or []
        if data is None:
            data = []
        if not isinstance(data, list):
            raise ValueError(f"Unexpected log payload: {type(data).__name__}")

        return self._normalize(data, self._to_event)

    def _to_event(self, record: Mapping[str, Any]) -> Optional[RawPunchEvent]:
        employee = _first(record, _EMPLOYEE_FIELDS)
        punched_at = _first(record, _TIME_FIELDS)
        if employee is None or punched_at is None:
            logger.debug("Skipping HTTP device record without employee/time: %s", record)
            return None
        return self._event(
            employee,
            parse_device_timestamp(punched_at, self._tz),
            _punch_type(_first(record, _TYPE_FIELDS)),
            raw=dict(record),
        )
