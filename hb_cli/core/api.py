"""Health Buddie backend API client with retry and rate limiting."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import requests

from hb_cli.core.constants import API_BASE

logger = logging.getLogger(__name__)


class APIError(RuntimeError):
    """Raised for API failures after retries."""


class HealthBuddieAPI:
    """Thin wrapper around the Health Buddie REST API."""

    def __init__(
        self,
        token: str = "",
        phone_number: str = "",
        base_url: str = API_BASE,
        rate_limit_delay: float = 0.0,
        max_retries: int = 3,
        timeout_seconds: int = 30,
    ) -> None:
        self.token = token
        self.phone_number = phone_number
        self.base_url = base_url.rstrip("/")
        self.rate_limit_delay = rate_limit_delay
        self.max_retries = max_retries
        self.timeout_seconds = timeout_seconds
        self._has_sent_request = False

    @property
    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.phone_number:
            headers["X-Phone-Number"] = self.phone_number
        return headers

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                if self.rate_limit_delay > 0 and self._has_sent_request:
                    time.sleep(self.rate_limit_delay)

                self._has_sent_request = True
                response = requests.request(
                    method=method,
                    url=url,
                    headers=self._headers,
                    params=params,
                    json=json_data,
                    timeout=self.timeout_seconds,
                )
                if response.status_code in (429, 500, 502, 503, 504):
                    raise requests.HTTPError(response.text, response=response)
                response.raise_for_status()

                if not response.text:
                    return {}
                return response.json()
            except (requests.RequestException, ValueError) as exc:
                last_error = exc
                if attempt >= self.max_retries:
                    break
                logger.debug("Retrying %s %s after attempt %d: %s", method, path, attempt, exc)
                time.sleep(min(2**attempt, 8))

        raise APIError(f"API request failed for {method} {path}: {last_error}")

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("GET", path, params=params)

    def post(self, path: str, payload: Dict[str, Any]) -> Any:
        return self._request("POST", path, json_data=payload)

    def login(self, phone_number: str) -> Dict[str, Any]:
        return self.post("/login", {"phoneNumber": phone_number})

    def get_health_data(self, days: int = 7) -> Dict[str, Any]:
        params: Dict[str, Any] = {"days": days}
        if self.phone_number:
            params["phoneNumber"] = self.phone_number
        return self.get("/health-data", params=params)

    def get_messages(self) -> Dict[str, Any]:
        params = {"phoneNumber": self.phone_number} if self.phone_number else None
        return self.get("/messages", params=params)

    def test_connection(self) -> Dict[str, Any]:
        """Check that the server root (base URL without /api) answers."""
        root = self.base_url[: -len("/api")] if self.base_url.endswith("/api") else self.base_url
        try:
            response = requests.get(f"{root}/", timeout=self.timeout_seconds)
            if response.status_code >= 400:
                return {"success": False, "message": f"API is not reachable (HTTP {response.status_code})"}
        except requests.RequestException as exc:
            return {"success": False, "message": f"API is not reachable: {exc}"}
        return {"success": True, "message": "API is reachable"}
