from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ServiceError
from ..models_inventory import Product, ProductId, ProductInput, ProductQuery
from ..navigation import ROUTE_ROLES, Route
from ..session import BackendSession
from .errors import normalize_error

logger = logging.getLogger(__name__)

INVENTORY_ROLES = ROUTE_ROLES[Route.INVENTORY]


class InventoryServiceError(ServiceError):
    pass


class InventoryService:
    def __init__(self, session: BackendSession) -> None:
        self.session = session

    def can_manage(self) -> bool:
        profile = self.session.profile
        return profile is not None and profile.effective_role in INVENTORY_ROLES

    def list_products(self) -> list[Product]:
        self._require_manager()
        try:
            return self.session.products_client().list_products(ProductQuery())
        except Exception as exc:
            raise normalize_error(exc, InventoryServiceError, "Could not load products") from exc

    def save_product(self, values: ProductInput | Mapping[str, Any], product_id: ProductId | None = None) -> Product:
        self._require_manager()
        payload = self._payload(values)
        client = self.session.products_client()
        try:
            if product_id is None:
                product = client.create_product(payload)
                logger.info("product_created", extra={"product_id": product.id})
            else:
                product = client.update_product(product_id, payload)
                logger.info("product_updated", extra={"product_id": product.id})
        except Exception as exc:
            action = "create" if product_id is None else "update"
            raise normalize_error(exc, InventoryServiceError, f"Could not {action} product") from exc
        return product

    def delete_product(self, product_id: ProductId) -> None:
        self._require_manager()
        try:
            self.session.products_client().delete_product(product_id)
        except Exception as exc:
            raise normalize_error(exc, InventoryServiceError, "Could not delete product") from exc
        logger.info("product_deleted", extra={"product_id": product_id})

    def _require_manager(self) -> None:
        if not self.can_manage():
            role = self.session.profile.effective_role if self.session.profile else None
            logger.warning("inventory_access_denied", extra={"role": getattr(role, "value", None)})
            raise InventoryServiceError(
                message="You do not have permission to manage inventory",
                code="FORBIDDEN",
                extra={"allowed_roles": sorted(r.value for r in INVENTORY_ROLES)},
            )

    @staticmethod
    def _payload(values: ProductInput | Mapping[str, Any]) -> ProductInput:
        if isinstance(values, ProductInput):
            return values
        try:
            return ProductInput.model_validate(dict(values))
        except PydanticValidationError as exc:
            fields = sorted({str(error["loc"][0]) for error in exc.errors() if error.get("loc")})
            raise InventoryServiceError(
                message="Invalid product data",
                details=", ".join(fields) or None,
                code="VALIDATION_ERROR",
                extra={"fields": fields},
            ) from exc
