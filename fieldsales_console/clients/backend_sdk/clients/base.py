from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..http_client import HttpClient


@dataclass
class BaseClient:
    http: HttpClient
    access_token: str | None = None
    token_source: Callable[[], str | None] | None = None

    def _auth_headers(self) -> dict[str, str]:
        api_key = self.http.config.anon_key
        token = self.token_source() if self.token_source else self.access_token
        return {
            "apikey": api_key,
            "Authorization": f"Bearer {token or api_key}",
        }

    def _request(self, method: str, path: str, **kwargs):
        headers = kwargs.pop("headers", None) or {}
        merged = {**self._auth_headers(), **headers}
        return self.http.request(method, path, headers=merged, **kwargs)
