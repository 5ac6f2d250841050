"""
Kube-OVN resource API client.

Thin REST wrapper around the resource store: collections live at
{base_url}/{kind} and single resources at {base_url}/{kind}/{name}.
Uses only urllib.request. Every failure (HTTP status >= 400, transport
error, undecodable body) raises ResourceStoreError so the caller decides
how to surface it.
"""

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Optional

from ..config import DEFAULT_CONFIG, OvnTopoConfig
from ..errors import ResourceStoreError

logger = logging.getLogger(__name__)


class ResourceStoreClient:
    """Client for list/create/patch/delete against the resource API.

    Args:
        base_url: API root, e.g. "http://localhost:8000/api".
        timeout: Per-request timeout in seconds.
    """

    def __init__(self, base_url: str = DEFAULT_CONFIG.api_base_url, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: OvnTopoConfig) -> "ResourceStoreClient":
        return cls(config.api_base_url, config.request_timeout)

    def _url(self, kind: str, name: Optional[str] = None) -> str:
        url = f"{self.base_url}/{urllib.parse.quote(kind, safe='')}"
        if name is not None:
            url += f"/{urllib.parse.quote(name, safe='')}"
        return url

    def _request(self, method: str, url: str, payload: Optional[dict] = None) -> Any:
        """Perform one request and decode a JSON body (None when empty)."""
        data = None
        headers = {"Accept": "application/json"}
        if payload is not None:
            data = json.dumps(payload).encode()
            headers["Content-Type"] = "application/json"

        req = urllib.request.Request(url, data=data, headers=headers, method=method)
        logger.debug("%s %s", method, url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read()
        except urllib.error.HTTPError as exc:
            text = exc.read().decode(errors="replace") if exc.fp else ""
            logger.warning("%s %s failed: HTTP %d", method, url, exc.code)
            raise ResourceStoreError(
                f"{method} {url} failed: {exc.code} {exc.reason}", status=exc.code, body=text,
            ) from exc
        except urllib.error.URLError as exc:
            logger.warning("%s %s network error: %s", method, url, exc.reason)
            raise ResourceStoreError(f"{method} {url} failed: {exc.reason}") from exc
        except OSError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ResourceStoreError(f"{method} {url} failed: {exc}") from exc

        if not body:
            return None
        try:
            return json.loads(body)
        except ValueError as exc:
            raise ResourceStoreError(f"{method} {url} returned invalid JSON") from exc

    def list(self, kind: str) -> list:
        """GET a collection. A non-list payload is treated as empty."""
        data = self._request("GET", self._url(kind))
        if not isinstance(data, list):
            logger.debug("Collection %s returned %s, treating as empty", kind, type(data).__name__)
            return []
        return data

    def create(self, kind: str, name: str, spec: dict, namespace: Optional[str] = None) -> Any:
        body = {"name": name, "spec": spec}
        if namespace:
            body["namespace"] = namespace
        return self._request("POST", self._url(kind), body)

    def patch(self, kind: str, name: str, spec: dict) -> Any:
        return self._request("PATCH", self._url(kind, name), {"spec": spec})

    def delete(self, kind: str, name: str) -> Any:
        return self._request("DELETE", self._url(kind, name))
