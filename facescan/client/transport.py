"""
HTTP transport for the scan API.

Dependencies: requests
System role: Client side of the scan HTTP API
"""

import logging
from typing import Any
from uuid import UUID

import requests

from facescan.client.exceptions import TransportError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {408, 409, 425, 429}


class HttpJobTransport:
    """Calls the scan API over HTTP."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        """
        Initialize transport.

        Args:
            base_url: API base URL including the version prefix
            timeout: Per-request timeout in seconds
            session: HTTP session (tests inject a mock)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def create_scan(self, url: str) -> dict[str, Any]:
        """Register a folder; returns the ScanResponse body."""
        return self._request("POST", "/scans", json={"url": url})

    def analyze(
        self,
        job_id: UUID | str,
        token: str | None = None,
        face: bytes | None = None,
        face_content_type: str = "image/jpeg",
        batch_size: int | None = None,
    ) -> dict[str, Any]:
        """Run one tick; returns the AnalyzeResponse body."""
        data: dict[str, Any] = {}
        if token:
            data["token"] = token
        if batch_size is not None:
            data["batch_size"] = str(batch_size)
        files = None
        if face is not None:
            files = {"face": ("face", face, face_content_type)}
        return self._request("POST", f"/jobs/{job_id}/analyze", data=data, files=files)

    def get_job(self, job_id: UUID | str) -> dict[str, Any]:
        """Read the job snapshot; returns the JobSnapshotResponse body."""
        return self._request("GET", f"/jobs/{job_id}")

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("_request - %s %s failed: %s", method, path, e)
            raise TransportError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            retryable = response.status_code >= 500 or response.status_code in RETRYABLE_STATUS
            raise TransportError(
                f"{method} {path} returned {response.status_code}: {_detail(response)}",
                status_code=response.status_code,
                retryable=retryable,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"{method} {path} returned invalid JSON") from e


def _detail(response: requests.Response) -> str:
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        return response.text[:200]
    if isinstance(detail, dict):
        return detail.get("message") or str(detail)
    return str(detail)
