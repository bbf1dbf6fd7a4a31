from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from ...core.constants import DEFAULT_HTTP_TIMEOUT_SECONDS
from .base import DeviceAdapter

_HTTPS_PORTS = (443, 8443)


class HttpAdapterBase(DeviceAdapter):
    """Shared session handling for devices reached over HTTP."""

    transport_errors = (requests.RequestException, ValueError)
    api_key_header: str = "X-API-Key"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._session: Optional[requests.Session] = None

    @property
    def timeout(self) -> float:
        return float(self._config.get("timeout") or DEFAULT_HTTP_TIMEOUT_SECONDS)

    def base_url(self) -> str:
        api_url = self._config.get("api_url")
        if api_url:
            return str(api_url).rstrip("/")

        port = int(self._config.get("port") or 80)
        scheme = "https" if port in _HTTPS_PORTS else "http"
        return f"{scheme}://{self._config['ip_address']}:{port}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        api_key = self._config.get("api_key")
        if api_key:
            headers[str(self._config.get("api_key_header") or self.api_key_header)] = str(api_key)
        return headers

    def _open(self) -> None:
        session = requests.Session()
        session.headers.update(self._headers())
        session.verify = bool(self._config.get("verify_ssl", True))
        self._session = session

    def _close(self) -> None:
        session, self._session = self._session, None
        if session is not None:
            session.close()

    def _probe(self) -> bool:
        path = str(self._config.get("health_path") or "")
        resp = self._session.get(f"{self.base_url()}{path}", timeout=self.timeout)
        return resp.status_code < 500

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        resp = self._session.request(method, f"{self.base_url()}{path}", timeout=self.timeout, **kwargs)
        resp.raise_for_status()
        return resp.json()
