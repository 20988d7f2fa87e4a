from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Sequence
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .error_mapper import map_error
from .exceptions import ApiError, AuthError, QueryError, TransportError

ResponseHook = Callable[[requests.Response], None]
# Returns a fresh access token when the failed request may be replayed with it.
AuthFailureHandler = Callable[[ApiError, bool], str | None]
Params = dict[str, Any] | Sequence[tuple[str, str]]


@dataclass
class LastOperation:
    operation: str
    duration_ms: int
    result: str
    status_code: int


@dataclass
class HttpClient:
    config: ClientConfig
    session: requests.Session | None = None
    on_auth_error: AuthFailureHandler | None = None
    last_operation: LastOperation | None = None

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=self.config.max_connections,
                pool_maxsize=self.config.max_connections,
            )
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)

    def _build_url(self, path: str) -> str:
        base = self.config.api_base_url.rstrip("/") + "/"
        return urljoin(base, path.lstrip("/"))

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        params: Params | None = None,
        response_hook: ResponseHook | None = None,
        retry_mutation: bool = False,
        operation: str = "unknown",
        allow_token_retry: bool = True,
    ) -> dict[str, Any] | list[Any] | None:
        if self.session is None:
            raise RuntimeError("HTTP session not initialized")
        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)

        normalized_method = method.upper()
        url = self._build_url(path)
        can_retry = normalized_method in {"GET", "HEAD"} or retry_mutation
        attempts = self.config.retries + 1 if can_retry else 1

        started = time.monotonic()
        response: requests.Response | None = None
        for attempt in range(attempts):
            try:
                response = self.session.request(
                    method=normalized_method,
                    url=url,
                    headers=request_headers,
                    json=json_body,
                    params=params,
                    timeout=(self.config.connect_timeout_seconds, self.config.read_timeout_seconds),
                    verify=self.config.verify_ssl,
                )
            except requests.RequestException as exc:
                if attempt >= attempts - 1:
                    self._record_operation(operation, started, "error", 0)
                    raise TransportError(
                        code="TRANSPORT_ERROR",
                        message=str(exc),
                        details={"type": type(exc).__name__},
                        status_code=0,
                    ) from exc
            else:
                if response.status_code < 500 or attempt >= attempts - 1:
                    break
            time.sleep(self.config.retry_backoff_seconds * (2**attempt))

        if response is None:
            raise RuntimeError("HTTP request finished without a response")

        if response_hook:
            response_hook(response)
        if response.ok:
            self._record_operation(operation, started, "success", response.status_code)
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                raise QueryError(
                    code="INVALID_JSON",
                    message="Backend returned a response that is not JSON",
                    details={"content_type": response.headers.get("Content-Type")},
                    status_code=response.status_code,
                ) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {"message": response.text or response.reason}
        self._record_operation(operation, started, "error", response.status_code)
        error = map_error(response.status_code, payload)
        if isinstance(error, AuthError) and self.on_auth_error:
            can_replay = allow_token_retry and "Authorization" in request_headers
            fresh_token = self.on_auth_error(error, can_replay)
            if fresh_token and can_replay:
                return self.request(
                    method,
                    path,
                    headers={**request_headers, "Authorization": f"Bearer {fresh_token}"},
                    json_body=json_body,
                    params=params,
                    response_hook=response_hook,
                    retry_mutation=retry_mutation,
                    operation=operation,
                    allow_token_retry=False,
                )
        raise error

    def _record_operation(self, operation: str, started: float, result: str, status_code: int) -> None:
        self.last_operation = LastOperation(
            operation=operation,
            duration_ms=int((time.monotonic() - started) * 1000),
            result=result,
            status_code=status_code,
        )
