from __future__ import annotations

from dataclasses import dataclass

from ..exceptions import AuthError
from ..models import AuthUser, SignUpResponse, TokenResponse
from .base import BaseClient


@dataclass
class AuthClient(BaseClient):
    @property
    def _path(self) -> str:
        return self.http.config.auth_path

    def sign_in_with_password(self, email: str, password: str) -> TokenResponse:
        data = self._request(
            "POST",
            f"{self._path}/token",
            params={"grant_type": "password"},
            json_body={"email": email, "password": password},
            table="auth",
            operation="sign_in",
        )
        if not isinstance(data, dict):
            raise ValueError("Expected sign-in response to be a JSON object")
        return TokenResponse.model_validate(data)

    def refresh_session(self, refresh_token: str) -> TokenResponse:
        data = self._request(
            "POST",
            f"{self._path}/token",
            params={"grant_type": "refresh_token"},
            json_body={"refresh_token": refresh_token},
            table="auth",
            operation="refresh",
        )
        if not isinstance(data, dict):
            raise ValueError("Expected refresh response to be a JSON object")
        return TokenResponse.model_validate(data)

    def sign_up(self, email: str, password: str, username: str | None = None) -> SignUpResponse:
        payload = {
            "email": email,
            "password": password,
            "data": {"username": username or email},
        }
        data = self._request("POST", f"{self._path}/signup", json_body=payload, table="auth", operation="sign_up")
        if not isinstance(data, dict):
            raise ValueError("Expected sign-up response to be a JSON object")
        if "access_token" in data:
            session = TokenResponse.model_validate(data)
            return SignUpResponse(user=session.user, session=session)
        if "user" in data:
            return SignUpResponse.model_validate(data)
        # email confirmation enabled: the body is the user itself
        return SignUpResponse(user=AuthUser.model_validate(data))

    def get_user(self) -> AuthUser:
        if not self.access_token:
            raise AuthError(
                code="NO_SESSION",
                message="No active session",
                details=None,
                trace_id=None,
                status_code=401,
            )
        data = self._request("GET", f"{self._path}/user", table="auth", operation="get_user")
        if not isinstance(data, dict):
            raise ValueError("Expected user response to be a JSON object")
        return AuthUser.model_validate(data)

    def sign_out(self) -> None:
        if not self.access_token:
            return
        self._request("POST", f"{self._path}/logout", table="auth", operation="sign_out")
