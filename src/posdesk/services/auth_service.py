from __future__ import annotations

import logging

from ..exceptions import ServiceError
from ..models import AuthUser, Profile, ProfileUpsert, Role
from ..session import BackendSession
from .errors import normalize_error

logger = logging.getLogger(__name__)


class AuthServiceError(ServiceError):
    pass


class AuthService:
    def __init__(self, session: BackendSession) -> None:
        self.session = session

    def has_active_session(self) -> bool:
        return bool(self.session.token)

    def login(self, email: str, password: str) -> Profile:
        logger.info("login_attempt")
        try:
            token = self.session.auth_client().sign_in_with_password(email, password)
        except Exception as exc:
            logger.warning("login_failure", extra={"error": type(exc).__name__})
            raise normalize_error(exc, AuthServiceError, "Sign-in failed") from exc
        self.session.establish(token)
        try:
            profile = self.load_profile()
        except AuthServiceError:
            self.session.clear()
            raise
        logger.info("login_success", extra={"user_id": profile.id, "role": profile.effective_role.value})
        return profile

    def load_profile(self) -> Profile:
        user_id = self.session.user_id
        if not user_id:
            raise AuthServiceError(message="Not signed in", code="NO_SESSION")
        try:
            profile = self.session.profiles_client().get_profile(user_id)
        except Exception as exc:
            logger.warning("profile_load_failure", extra={"user_id": user_id})
            raise normalize_error(exc, AuthServiceError, "Profile not found") from exc
        if profile.email is None and self.session.user is not None:
            profile = profile.model_copy(update={"email": self.session.user.email})
        self.session.set_profile(profile)
        return profile

    def sign_up(self, email: str, password: str, username: str | None = None) -> AuthUser:
        logger.info("sign_up_attempt")
        try:
            response = self.session.auth_client().sign_up(email, password, username=username)
            user = response.user or (response.session.user if response.session else None)
            if user is None:
                raise AuthServiceError(message="Sign-up did not return a user", code="SIGN_UP_NO_USER")
            if response.session is not None:
                self.session.establish(response.session, user=user)
            self.session.profiles_client().upsert_profile(
                ProfileUpsert(
                    id=user.id,
                    email=email,
                    username=username or email,
                    role=Role.CASHIER,
                    created_at=user.created_at,
                )
            )
        except Exception as exc:
            logger.warning("sign_up_failure", extra={"error": type(exc).__name__})
            raise normalize_error(exc, AuthServiceError, "Sign-up failed") from exc
        logger.info("sign_up_success", extra={"user_id": user.id})
        return user

    def logout(self) -> None:
        logger.info("logout")
        self.session.logout()
