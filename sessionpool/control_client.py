"""
HTTP client for the session pool control API.

Useful for scripting load ramps against a running pool:

    client = ControlClient("http://localhost:8080")
    client.add(many=500, cookie="sessionid=...")
    print(client.count())
    client.clean()
"""

import requests
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8080"


class ControlClientError(Exception):
    """The control API rejected a request."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class ControlClient:
    def __init__(self, api_url: str = DEFAULT_API_URL, timeout: float = 30.0):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def add(
        self,
        session_id: Optional[str] = None,
        many: int = 0,
        centrifugo_url: Optional[str] = None,
        cookie: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Add one session, or ``many`` sessions with ids "0".."many-1".

        Returns:
            Per-id results, e.g. [{"id": "0", "status": "added", ...}].
        """
        body: Dict[str, Any] = {}
        if session_id:
            body["id"] = session_id
        if many:
            body["many"] = many
        if centrifugo_url:
            body["centrifugoUrl"] = centrifugo_url
        if cookie:
            body["cookie"] = cookie

        return self._post("/connection.add", body)["results"]

    def remove(self, session_id: str) -> Dict[str, Any]:
        return self._post("/connection.remove", {"id": session_id})

    def clean(self) -> Dict[str, Any]:
        return self._post("/connection.clean")

    def count(self) -> Dict[str, int]:
        response = requests.get(f"{self.api_url}/connection.count", timeout=self.timeout)
        return self._check(response)

    def _post(self, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = requests.post(f"{self.api_url}{path}", json=body, timeout=self.timeout)
        return self._check(response)

    @staticmethod
    def _check(response: requests.Response) -> Dict[str, Any]:
        if response.status_code >= 400:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            logger.warning(f"Control API error {response.status_code}: {detail}")
            raise ControlClientError(response.status_code, str(detail))
        return response.json()
