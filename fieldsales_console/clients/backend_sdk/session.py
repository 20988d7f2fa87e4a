from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from .auth_store import AuthStore
from .clients.auth import AuthClient
from .clients.functions import FunctionsClient
from .clients.tables import TableClient
from .config import ClientConfig
from .exceptions import ApiError
from .http_client import HttpClient
from .models import AuthUser, SessionData, TokenResponse

SessionListener = Callable[["ApiSession"], None]

# PostgREST and GoTrue codes for an access token that has run out.
_EXPIRED_TOKEN_CODES = {"PGRST301", "PGRST303", "bad_jwt"}


def is_expired_token(error: ApiError) -> bool:
    return error.code in _EXPIRED_TOKEN_CODES or "expired" in error.message.lower()


@dataclass
class ApiSession:
    """Session context shared by every client: created at start, refreshed on token change, cleared on sign-out."""

    config: ClientConfig
    auth_store: AuthStore | None = None
    http: HttpClient | None = None
    persist: bool = True
    access_token: str | None = None
    refresh_token: str | None = None
    user: AuthUser | None = None
    role: str | None = None
    display_name: str | None = None
    _listeners: list[SessionListener] = field(default_factory=list, repr=False)
    _refreshing: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        if self.http is None:
            self.http = HttpClient(config=self.config)
        self.http.on_auth_error = self._handle_auth_error
        if self.persist:
            self.auth_store = self.auth_store or AuthStore()
            stored = self.auth_store.load()
            if stored and not self.access_token and stored.env_name in (None, self.config.env_name):
                self.access_token = stored.access_token
                self.refresh_token = stored.refresh_token
                self.user = stored.user
                self.role = stored.role
                self.display_name = stored.display_name

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token and self.user and self.role)

    def auth_client(self) -> AuthClient:
        return AuthClient(http=self.http, token_source=self._current_token)

    def table_client(self) -> TableClient:
        return TableClient(http=self.http, token_source=self._current_token)

    def functions_client(self) -> FunctionsClient:
        return FunctionsClient(http=self.http, token_source=self._current_token)

    def on_change(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def establish(self, token: TokenResponse, *, role: str, display_name: str | None = None) -> None:
        self.access_token = token.access_token
        self.refresh_token = token.refresh_token or self.refresh_token
        self.user = token.user or self.user
        self.role = role
        self.display_name = display_name or self.display_name
        if self.persist and self.auth_store:
            self.auth_store.save(
                SessionData(
                    access_token=self.access_token,
                    refresh_token=self.refresh_token,
                    user=self.user,
                    role=self.role,
                    display_name=self.display_name,
                    env_name=self.config.env_name,
                )
            )
        self._notify()

    def refresh(self) -> None:
        if not self.refresh_token or not self.role:
            raise RuntimeError("No refresh token available")
        token = self.auth_client().refresh(self.refresh_token)
        self.establish(token, role=self.role)

    def clear(self) -> None:
        had_session = self.access_token is not None
        self.access_token = None
        self.refresh_token = None
        self.user = None
        self.role = None
        self.display_name = None
        if self.persist and self.auth_store:
            self.auth_store.clear()
        if had_session:
            self._notify()

    def _current_token(self) -> str | None:
        return self.access_token

    def _handle_auth_error(self, error: ApiError, can_replay: bool) -> str | None:
        if self._refreshing:
            return None
        if can_replay and self.refresh_token and self.role and is_expired_token(error):
            self._refreshing = True
            try:
                self.refresh()
            except ApiError:
                self.clear()
                return None
            finally:
                self._refreshing = False
            return self.access_token
        if self.access_token:
            self.clear()
        return None

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
