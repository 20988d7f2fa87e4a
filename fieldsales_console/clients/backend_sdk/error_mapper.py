from __future__ import annotations

from typing import Mapping

from .exceptions import (
    ApiError,
    AuthError,
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    QueryError,
    RateLimitError,
    ServerError,
)

# GoTrue answers bad credentials and expired refresh tokens with 400.
_AUTH_CODES = {"invalid_grant", "invalid_credentials", "refresh_token_not_found", "session_not_found", "bad_jwt"}


def _first_text(payload: Mapping[str, object], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = payload.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def map_error(status_code: int, payload: object | None) -> ApiError:
    body: Mapping[str, object] = payload if isinstance(payload, Mapping) else {}
    code = _first_text(body, ("error_code", "code", "error")) or "HTTP_ERROR"
    message = _first_text(body, ("message", "error_description", "msg", "error")) or "Request failed"
    details = body.get("details") or body.get("hint")
    mapped: type[ApiError]
    if status_code == 401 or code in _AUTH_CODES:
        mapped = AuthError
    elif status_code == 403:
        mapped = ForbiddenError
    elif status_code == 404:
        mapped = NotFoundError
    elif status_code in {400, 422}:
        mapped = BadRequestError
    elif status_code == 409:
        mapped = ConflictError
    elif status_code == 429:
        mapped = RateLimitError
    elif status_code >= 500:
        mapped = ServerError
    else:
        mapped = QueryError
    return mapped(
        code=code,
        message=message,
        details=details,
        status_code=status_code,
        raw_payload=dict(body) if body else payload,
    )
