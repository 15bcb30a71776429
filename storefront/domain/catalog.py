"""
Catalog domain service - product create/read/update/delete.

Reads are open to everyone; write authorization is decided at the API
layer, which only forwards calls made by admin accounts.
"""

from dataclasses import dataclass
from typing import Any

from .exceptions import ProductNotFound, ValidationFailed
from .ports import Product, ProductRepository

PRODUCT_FIELDS = frozenset(
    {"name", "price", "description", "image", "extra_images", "category", "sub_category"}
)

# Columns that always hold a value; partial updates may change but not null them
REQUIRED_PRODUCT_FIELDS = frozenset({"name", "price", "description", "extra_images"})


@dataclass
class CatalogService:
    """Domain service for the product catalog."""

    repository: ProductRepository

    def search(self, query: str | None = None) -> list[Product]:
        """Case-insensitive substring match on product name; blank lists all."""
        return self.repository.search((query or "").strip())

    def get(self, product_id: str) -> Product:
        product = self.repository.get(product_id)
        if product is None:
            raise ProductNotFound()
        return product

    def create(self, product: Product) -> Product:
        self._validate_name(product.name)
        self._validate_price(product.price)
        return self.repository.insert(product)

    def update(self, product_id: str, changes: dict[str, Any]) -> Product:
        unknown = sorted(set(changes) - PRODUCT_FIELDS)
        if unknown:
            raise ValidationFailed(f"Unknown product fields: {', '.join(unknown)}")
        cleared = sorted(
            name for name in REQUIRED_PRODUCT_FIELDS & set(changes) if changes[name] is None
        )
        if cleared:
            raise ValidationFailed(f"Fields cannot be null: {', '.join(cleared)}")
        if "name" in changes:
            self._validate_name(changes["name"])
        if "price" in changes:
            self._validate_price(changes["price"])
        if not changes:
            return self.get(product_id)

        product = self.repository.update_fields(product_id, changes)
        if product is None:
            raise ProductNotFound()
        return product

    def delete(self, product_id: str) -> None:
        if not self.repository.delete(product_id):
            raise ProductNotFound()

    def _validate_name(self, name: str | None) -> None:
        if not name or not name.strip():
            raise ValidationFailed("Product name is required")

    def _validate_price(self, price: float | None) -> None:
        if price is None or price < 0:
            raise ValidationFailed("Product price must be zero or more")
