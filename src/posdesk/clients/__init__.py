from .auth import AuthClient
from .products_client import ProductsClient
from .profiles_client import ProfilesClient
from .tickets_client import TicketsClient

__all__ = [
    "AuthClient",
    "ProductsClient",
    "ProfilesClient",
    "TicketsClient",
]
