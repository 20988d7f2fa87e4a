from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    email: str | None = None
    phone: str | None = None
    app_metadata: dict[str, Any] = Field(default_factory=dict)
    user_metadata: dict[str, Any] = Field(default_factory=dict)


class TokenResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int | None = None
    expires_at: int | None = None
    user: AuthUser | None = None


class SessionData(BaseModel):
    access_token: str
    refresh_token: str | None = None
    user: AuthUser | None = None
    role: str | None = None
    display_name: str | None = None
    env_name: str | None = None


class ProvisionResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    success: bool = True
    message: str | None = None
    user_id: str | None = None
