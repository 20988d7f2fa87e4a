from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: object | None
    status_code: int
    raw_payload: object | None = None

    def __str__(self) -> str:
        return f"[{self.status_code}] {self.code}: {self.message}"


class AuthError(ApiError):
    """Credentials rejected or session no longer valid."""


class QueryError(ApiError):
    """Backend fetch, count or mutation failure."""


class ForbiddenError(QueryError):
    """Row-level security or grant rejected the request."""


class NotFoundError(QueryError):
    pass


class BadRequestError(QueryError):
    """400/422 style rejection of a query or payload."""


class ConflictError(QueryError):
    """409 or unique-constraint violations."""


class RateLimitError(QueryError):
    """429 throttling error."""


class ServerError(QueryError):
    """5xx server-side failures."""


class TransportError(QueryError):
    """Network/transport failure before an HTTP response was returned."""
