from __future__ import annotations

import logging
from dataclasses import dataclass

from .auth_store import AuthStore
from .clients.auth import AuthClient
from .clients.products_client import ProductsClient
from .clients.profiles_client import ProfilesClient
from .clients.tickets_client import TicketsClient
from .config import ClientConfig
from .exceptions import ApiError
from .http_client import HttpClient
from .models import AuthUser, Profile, SessionData, TokenResponse
from .record_store import BackendRecordStore
from .tracing import TraceContext

logger = logging.getLogger(__name__)


@dataclass
class BackendSession:
    config: ClientConfig
    auth_store: AuthStore | None = None
    trace: TraceContext | None = None
    token: str | None = None
    refresh_token: str | None = None
    user: AuthUser | None = None
    profile: Profile | None = None

    def __post_init__(self) -> None:
        self.auth_store = self.auth_store or AuthStore()
        self.trace = self.trace or TraceContext()
        stored = self.auth_store.load()
        if stored and not self.token and stored.env_name in (None, self.config.env_name):
            self.token = stored.access_token
            self.refresh_token = stored.refresh_token
            self.user = stored.user
            self.profile = stored.profile

    def _http(self) -> HttpClient:
        return HttpClient(config=self.config, trace=self.trace)

    def auth_client(self) -> AuthClient:
        return AuthClient(http=self._http(), access_token=self.token)

    def profiles_client(self) -> ProfilesClient:
        return ProfilesClient(http=self._http(), access_token=self.token)

    def products_client(self) -> ProductsClient:
        return ProductsClient(http=self._http(), access_token=self.token)

    def tickets_client(self) -> TicketsClient:
        return TicketsClient(http=self._http(), access_token=self.token)

    def record_store(self) -> BackendRecordStore:
        return BackendRecordStore(products=self.products_client, tickets=self.tickets_client)

    @property
    def user_id(self) -> str | None:
        if self.user is not None:
            return self.user.id
        if self.profile is not None:
            return self.profile.id
        return None

    def establish(self, token: TokenResponse, user: AuthUser | None = None, profile: Profile | None = None) -> None:
        self.token = token.access_token
        self.refresh_token = token.refresh_token
        self.user = user or token.user
        self.profile = profile
        self._persist(expires_at=token.expires_at)

    def set_profile(self, profile: Profile | None) -> None:
        self.profile = profile
        if self.token:
            self._persist()

    def clear(self) -> None:
        self.token = None
        self.refresh_token = None
        self.user = None
        self.profile = None
        if self.auth_store:
            self.auth_store.clear()

    def logout(self) -> None:
        if self.token:
            try:
                self.auth_client().sign_out()
            except ApiError as exc:
                logger.warning("remote_sign_out_failed", extra={"code": exc.code, "trace_id": exc.trace_id})
        self.clear()

    def _persist(self, expires_at: int | None = None) -> None:
        if not self.auth_store or not self.token:
            return
        self.auth_store.save(
            SessionData(
                access_token=self.token,
                refresh_token=self.refresh_token,
                expires_at=expires_at,
                user=self.user,
                profile=self.profile,
                env_name=self.config.env_name,
            )
        )
