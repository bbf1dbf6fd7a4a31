from __future__ import annotations

import logging
from datetime import datetime
from functools import partial
from typing import Any, Dict, List, Optional

import pytz

from ...common.datetime_utils import parse_device_timestamp
from ...core.constants import DEFAULT_EVENT_PAGE_LIMIT
from ...core.enums import PunchType
from ..model import RawPunchEvent
from .http_base import HttpAdapterBase

logger = logging.getLogger(__name__)

# BioStar 2 search operators.
_OPERATOR_GREATER = 5


class SupremaAdapter(HttpAdapterBase):
    """Suprema BioStar 2 event log over its HTTP API.

    The API key is sent as the BioStar session header. T&A keys decide the
    punch direction; by default key "1" is check-in and "2" check-out, which
    ``check_in_keys`` / ``check_out_keys`` connection params can override.
    """

    vendor = "Suprema"
    required_fields = ("ip_address", "api_key")
    api_key_header = "bs-session-id"

    def _tna_keys(self, name: str, default: List[str]) -> set[str]:
        return {str(k) for k in (self._config.get(name) or default)}

    def _page_limit(self) -> int:
        return int(self._config.get("limit") or DEFAULT_EVENT_PAGE_LIMIT)

    def _query(self, since: Optional[datetime], offset: int = 0) -> Dict[str, Any]:
        conditions = []
        if since is not None:
            since_utc = since.astimezone(pytz.utc).strftime("%Y-%m-%dT%H:%M:%S.00Z")
            conditions.append({"column": "datetime", "operator": _OPERATOR_GREATER, "values": [since_utc]})
        return {
            "Query": {
                "limit": self._page_limit(),
                "offset": offset,
                "conditions": conditions,
                "orders": [{"column": "datetime", "descending": False}],
            }
        }

    def _fetch(self, since: Optional[datetime]) -> List[RawPunchEvent]:
        check_in_keys = self._tna_keys("check_in_keys", ["1"])
        check_out_keys = self._tna_keys("check_out_keys", ["2"])
        convert = partial(self._to_event, check_in_keys=check_in_keys, check_out_keys=check_out_keys)

        limit = self._page_limit()
        events: List[RawPunchEvent] = []
        seen_ids: set = set()
        offset = 0
        while True:
            data = self._request("POST", "/api/events/search", json=self._query(since, offset))
            rows = ((data or {}).get("EventCollection") or {}).get("rows") or []
            events.extend(self._normalize(rows, convert))
            if len(rows) < limit:
                return events

            page_ids = {row.get("id") for row in rows if isinstance(row, dict)}
            if page_ids and page_ids <= seen_ids:
                logger.warning("Suprema device %s repeated a page at offset %s; stopping", self.name, offset)
                return events
            seen_ids |= page_ids
            offset += len(rows)

    def _to_event(self, row: Dict[str, Any], *, check_in_keys: set, check_out_keys: set) -> Optional[RawPunchEvent]:
        user = row.get("user_id") or {}
        user_id = user.get("user_id") if isinstance(user, dict) else user
        if not user_id or not row.get("datetime"):
            return None

        tna_key = str(row.get("tna_key") or "")
        if tna_key in check_in_keys:
            punch_type = PunchType.CHECK_IN
        elif tna_key in check_out_keys:
            punch_type = PunchType.CHECK_OUT
        else:
            logger.debug("Skipping Suprema event %s without T&A key", row.get("id"))
            return None

        return self._event(user_id, parse_device_timestamp(row["datetime"], self._tz), punch_type, raw=row)
