from __future__ import annotations

import json
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any


class ApiClientError(RuntimeError):
    def __init__(self, status: int, error: str, message: str) -> None:
        super().__init__(f"HTTP {status} {error}: {message}")
        self.status = status
        self.error = error
        self.message = message


@dataclass(frozen=True)
class ApiClient:
    """
    Minimal JSON client for the `/api/<resource>.<method>` endpoints.
    Retries once on 429 and on connection errors; never retries other HTTP errors.
    """

    base_url: str
    token: str | None = None
    timeout_seconds: int = 30

    def post(self, path: str, body: dict[str, Any] | None = None, *, retries: int = 1) -> dict[str, Any]:
        url = self.base_url.rstrip("/") + "/api/" + path.lstrip("/")
        data = json.dumps(body or {}).encode("utf-8")

        last_err: Exception | None = None
        for attempt in range(retries + 1):
            req = urllib.request.Request(url, data=data, method="POST")
            req.add_header("Content-Type", "application/json")
            req.add_header("Accept", "application/json")
            if self.token:
                req.add_header("Authorization", f"Bearer {self.token}")
            try:
                with urllib.request.urlopen(req, timeout=self.timeout_seconds) as resp:
                    raw = resp.read()
            except urllib.error.HTTPError as e:
                payload = _decode(e.read())
                if e.code == 429 and attempt < retries:
                    time.sleep(min(2 * (attempt + 1), 10))
                    last_err = ApiClientError(429, "rate_limit_exceeded", "Rate limited")
                    continue
                raise ApiClientError(
                    e.code,
                    str(payload.get("error") or "http_error"),
                    str(payload.get("message") or e.reason),
                ) from e
            except urllib.error.URLError as e:
                last_err = e
                time.sleep(min(1 * (attempt + 1), 5))
                continue
            payload = _decode(raw)
            if not payload:
                raise ApiClientError(502, "invalid_response", f"Invalid JSON from {path}")
            return payload
        raise ApiClientError(503, "unavailable", f"Request to {path} failed after retries: {last_err}")


def _decode(raw: bytes) -> dict[str, Any]:
    try:
        value = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return {}
    return value if isinstance(value, dict) else {}
