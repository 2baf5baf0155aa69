from .auth_store import AuthStore
from .cart import Cart, CartLine
from .checkout import CheckoutOrchestrator, CheckoutResult, CheckoutStage
from .config import ClientConfig, ConfigError, load_config
from .exceptions import (
    ApiError,
    CheckoutError,
    EmptyCartError,
    InsufficientStockError,
    NotFoundError,
    RecordNotFoundError,
    RecordStoreError,
    StockShortage,
    StockShortageError,
    TicketCreationFailedError,
    WriteError,
)
from .http_client import HttpClient
from .models import AuthUser, Profile, Role, SessionData, TokenResponse
from .models_inventory import Product, ProductInput, ProductQuery
from .models_tickets import TicketLineRecord, TicketRecord
from .navigation import Route, home_route, resolve_route
from .receipt import ReceiptPresenter, ReceiptView, format_amount, format_sale_date
from .record_store import BackendRecordStore, RecordStore
from .session import BackendSession
from .tracing import TraceContext
from .ui_errors import UserFacingError, to_user_facing_error

__all__ = [
    "ApiError",
    "AuthStore",
    "AuthUser",
    "BackendRecordStore",
    "BackendSession",
    "Cart",
    "CartLine",
    "CheckoutError",
    "CheckoutOrchestrator",
    "CheckoutResult",
    "CheckoutStage",
    "ClientConfig",
    "ConfigError",
    "EmptyCartError",
    "HttpClient",
    "InsufficientStockError",
    "NotFoundError",
    "Product",
    "ProductInput",
    "ProductQuery",
    "Profile",
    "ReceiptPresenter",
    "ReceiptView",
    "RecordNotFoundError",
    "RecordStore",
    "RecordStoreError",
    "Role",
    "Route",
    "SessionData",
    "StockShortage",
    "StockShortageError",
    "TicketCreationFailedError",
    "TicketLineRecord",
    "TicketRecord",
    "TokenResponse",
    "TraceContext",
    "UserFacingError",
    "WriteError",
    "format_amount",
    "format_sale_date",
    "home_route",
    "load_config",
    "resolve_route",
    "to_user_facing_error",
]
