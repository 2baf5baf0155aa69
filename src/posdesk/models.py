from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    ADMIN = "admin"
    CASHIER = "cashier"
    INVENTORY_MANAGER = "inventory_manager"
    USER = "user"


class AuthUser(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    email: str | None = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


class TokenResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int | None = None
    expires_at: int | None = None
    user: AuthUser | None = None


class SignUpResponse(BaseModel):
    """Sign-up answers with a session when confirmation is off, or with the bare user otherwise."""

    model_config = ConfigDict(extra="allow")

    user: AuthUser | None = None
    session: TokenResponse | None = None


class Profile(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    username: str | None = None
    full_name: str | None = None
    email: str | None = None
    role: Role | None = None
    created_at: datetime | None = None

    @field_validator("role", mode="before")
    @classmethod
    def _blank_role(cls, value: Any) -> Any:
        if value in ("", None):
            return None
        return value

    @property
    def effective_role(self) -> Role:
        return self.role or Role.CASHIER


class ProfileUpsert(BaseModel):
    id: str
    email: str | None = None
    username: str | None = None
    role: Role = Role.CASHIER
    created_at: datetime | None = None


class SessionData(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = None
    user: Optional[AuthUser] = None
    profile: Optional[Profile] = None
    env_name: str | None = None
