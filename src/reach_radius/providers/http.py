from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests.exceptions import ReadTimeout, ConnectionError


@dataclass
class HTTPClient:
    user_agent: str
    timeout_s: int = 15
    tries: int = 2
    backoff_s: float = 0.5

    def __post_init__(self) -> None:
        self.s = requests.Session()
        self.s.headers.update(
            {
                "User-Agent": self.user_agent,
                "Accept": "application/geo+json, application/json, text/plain;q=0.9, */*;q=0.8",
            }
        )

    def _send(self, method: str, url: str, timeout_s: Optional[int], **kwargs: Any) -> requests.Response:
        timeout = timeout_s if timeout_s is not None else self.timeout_s
        last_err: Optional[Exception] = None
        for attempt in range(self.tries):
            try:
                r = self.s.request(method, url, timeout=timeout, **kwargs)
                r.raise_for_status()
                return r
            except (ReadTimeout, ConnectionError) as e:
                last_err = e
                if attempt < self.tries - 1:
                    time.sleep(self.backoff_s * (2**attempt))
        raise last_err if last_err else RuntimeError(f"HTTP {method} failed")

    def get_json(self, url: str, timeout_s: Optional[int] = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._send("GET", url, timeout_s, params=params).json()

    def post_json(
        self,
        url: str,
        json: Optional[Any] = None,
        data: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout_s: Optional[int] = None,
    ) -> Any:
        return self._send("POST", url, timeout_s, json=json, data=data, headers=headers).json()
