from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Type

import pytz

from ...common.datetime_utils import ensure_aware
from ...common.validators import require_fields
from ...core.enums import PunchType
from ...core.exceptions import DeviceConnectionError, ValidationError
from ..model import RawPunchEvent

logger = logging.getLogger(__name__)


class DeviceAdapter(ABC):
    """Capability set every punch-clock transport implements.

    Subclasses own their connection state privately and only implement the
    ``_open`` / ``_close`` / ``_fetch`` / ``_probe`` hooks; config validation,
    error containment and watermark filtering live here.
    """

    vendor: str = "device"
    required_fields: Tuple[str, ...] = ()
    transport_errors: Tuple[Type[BaseException], ...] = (OSError,)
    # Raised while normalizing one vendor record; that record alone is dropped.
    record_errors: Tuple[Type[BaseException], ...] = (ValueError, TypeError, AttributeError, KeyError, OverflowError)

    def __init__(self, *, default_timezone: pytz.BaseTzInfo = pytz.utc):
        self._default_tz = default_timezone
        self._tz = default_timezone
        self._config: Dict[str, Any] = {}
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def name(self) -> str:
        return str(self._config.get("name") or self.vendor)

    def connect(self, config: Mapping[str, Any]) -> bool:
        self._config = dict(config)
        try:
            require_fields(self._config, *self.required_fields)
            self._tz = self._resolve_timezone()
            self._open()
        except (ValidationError, pytz.UnknownTimeZoneError) as exc:
            logger.error("Invalid %s device config for %s: %s", self.vendor, self.name, exc)
            self._connected = False
            return False
        except self.transport_errors as exc:
            logger.error("Failed to connect to %s device %s: %s", self.vendor, self.name, exc)
            self._connected = False
            return False

        self._connected = True
        logger.info("%s device connected: %s", self.vendor, self.name)
        return True

    def disconnect(self) -> None:
        try:
            self._close()
        except self.transport_errors as exc:
            logger.warning("Error while disconnecting %s device %s: %s", self.vendor, self.name, exc)
        finally:
            if self._connected:
                logger.info("%s device disconnected: %s", self.vendor, self.name)
            self._connected = False

    def fetch_logs(self, since: Optional[datetime] = None) -> List[RawPunchEvent]:
        if not self._connected:
            raise DeviceConnectionError("Device not connected. Call connect() first.")

        logger.info(
            "Fetching logs from %s device %s since %s",
            self.vendor,
            self.name,
            since.isoformat() if since else "beginning",
        )
        try:
            events = self._fetch(since)
        except self.transport_errors as exc:
            raise DeviceConnectionError(f"Failed to fetch logs from {self.vendor} device: {exc}") from exc

        if since is None:
            return events
        return [e for e in events if e.punch_time >= since]

    def test_connection(self) -> bool:
        if not self._connected:
            return self.connect(self._config)
        try:
            return self._probe()
        except self.transport_errors as exc:
            logger.error("%s device %s did not answer: %s", self.vendor, self.name, exc)
            return False

    def _resolve_timezone(self) -> pytz.BaseTzInfo:
        tz_name = self._config.get("timezone")
        return pytz.timezone(tz_name) if tz_name else self._default_tz

    def _normalize(self, records: Iterable[Any], convert: Callable[[Any], Optional[RawPunchEvent]]) -> List[RawPunchEvent]:
        """Apply ``convert`` to each vendor record, skipping Nones and malformed records."""
        events: List[RawPunchEvent] = []
        for record in records:
            try:
                event = convert(record)
            except self.record_errors as exc:
                logger.warning("Dropping malformed %s record from %s: %s (%r)", self.vendor, self.name, exc, record)
                continue
            if event is not None:
                events.append(event)
        return events

    def _event(self, employee_code: Any, punch_time: datetime, punch_type: PunchType, raw: Any = None) -> RawPunchEvent:
        return RawPunchEvent(
            device_id=self._config["id"],
            employee_code=str(employee_code).strip(),
            punch_time=ensure_aware(punch_time, self._tz),
            punch_type=punch_type,
            raw=raw,
        )

    @abstractmethod
    def _open(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def _close(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def _fetch(self, since: Optional[datetime]) -> List[RawPunchEvent]:
        raise NotImplementedError

    def _probe(self) -> bool:
        return True
