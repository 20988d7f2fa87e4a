from __future__ import annotations

from ..models import AuthUser, TokenResponse
from .base import BaseClient


class AuthClient(BaseClient):
    def sign_in_with_password(self, password: str, *, email: str | None = None, phone: str | None = None) -> TokenResponse:
        if bool(email) == bool(phone):
            raise ValueError("Provide exactly one of email or phone")
        payload = {"email": email} if email else {"phone": phone}
        payload["password"] = password
        data = self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json_body=payload,
            operation="auth:sign_in",
        )
        return TokenResponse.model_validate(data)

    def refresh(self, refresh_token: str) -> TokenResponse:
        data = self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json_body={"refresh_token": refresh_token},
            operation="auth:refresh",
        )
        return TokenResponse.model_validate(data)

    def sign_out(self) -> None:
        self._request("POST", "/auth/v1/logout", operation="auth:sign_out")

    def get_user(self) -> AuthUser:
        data = self._request("GET", "/auth/v1/user", operation="auth:user")
        return AuthUser.model_validate(data)
