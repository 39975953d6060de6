from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from ..core.exceptions import RemoteFunctionError

logger = logging.getLogger(__name__)


class CallableFunctionsClient:
    """Invoke Firebase callable functions over HTTPS.

    Callable functions take ``{"data": ...}`` and answer ``{"result": ...}``
    or ``{"error": {...}}``.
    """

    def __init__(
        self,
        *,
        project_id: str,
        region: str = "asia-southeast1",
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = (base_url or f"https://{region}-{project_id}.cloudfunctions.net").rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def call(self, name: str, data: dict[str, Any], *, id_token: Optional[str] = None) -> Any:
        url = f"{self._base_url}/{name}"
        headers = {"Content-Type": "application/json"}
        if id_token:
            headers["Authorization"] = f"Bearer {id_token}"

        try:
            response = self._session.post(url, json={"data": data}, headers=headers, timeout=self._timeout)
        except requests.exceptions.RequestException as e:
            logger.error("Callable %s unreachable: %s", name, e)
            raise RemoteFunctionError(f"Could not reach {name}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400 or "error" in body:
            error = body.get("error") or {}
            logger.error("Callable %s failed (%s): %s", name, response.status_code, error)
            raise RemoteFunctionError(
                error.get("message") or f"{name} failed with HTTP {response.status_code}",
                status=error.get("status"),
            )
        return body.get("result")
