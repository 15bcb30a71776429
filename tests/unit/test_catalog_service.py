"""
Unit tests for CatalogService.
"""

import pytest

from storefront.domain.exceptions import ProductNotFound, ValidationFailed
from storefront.domain.ports import Product


class TestSearch:
    """Tests for search()."""

    def test_blank_query_lists_everything(self, catalog_service) -> None:
        catalog_service.create(Product(name="Red Shirt", price=10))
        catalog_service.create(Product(name="Blue Jeans", price=40))

        assert [p.name for p in catalog_service.search("")] == ["Red Shirt", "Blue Jeans"]
        assert len(catalog_service.search(None)) == 2

    def test_query_is_case_insensitive_substring(self, catalog_service) -> None:
        catalog_service.create(Product(name="Red Shirt", price=10))
        catalog_service.create(Product(name="Blue Jeans", price=40))

        assert [p.name for p in catalog_service.search("SHIRT")] == ["Red Shirt"]
        assert catalog_service.search("socks") == []


class TestCrud:
    """Tests for create(), get(), update() and delete()."""

    def test_create_assigns_id(self, catalog_service) -> None:
        product = catalog_service.create(
            Product(name="Mug", price=5.5, extra_images=["a.png", "b.png"], category="home")
        )

        assert product.id
        assert catalog_service.get(product.id) == product

    @pytest.mark.parametrize("name,price", [("", 1), ("  ", 1), ("Mug", -1)])
    def test_create_validates(self, catalog_service, name, price) -> None:
        with pytest.raises(ValidationFailed):
            catalog_service.create(Product(name=name, price=price))

    def test_get_missing(self, catalog_service) -> None:
        with pytest.raises(ProductNotFound):
            catalog_service.get("missing")

    def test_update_changes_only_given_fields(self, catalog_service) -> None:
        product = catalog_service.create(Product(name="Mug", price=5, description="white"))

        updated = catalog_service.update(product.id, {"price": 7})

        assert updated.price == 7
        assert updated.description == "white"

    def test_update_rejects_unknown_fields(self, catalog_service) -> None:
        product = catalog_service.create(Product(name="Mug", price=5))

        with pytest.raises(ValidationFailed):
            catalog_service.update(product.id, {"id": "hijack"})

    def test_update_rejects_negative_price(self, catalog_service) -> None:
        product = catalog_service.create(Product(name="Mug", price=5))

        with pytest.raises(ValidationFailed):
            catalog_service.update(product.id, {"price": -3})

    @pytest.mark.parametrize("field", ["name", "price", "description", "extra_images"])
    def test_update_rejects_null_required_field(self, catalog_service, field) -> None:
        product = catalog_service.create(Product(name="Mug", price=5, description="white"))

        with pytest.raises(ValidationFailed):
            catalog_service.update(product.id, {field: None})

        assert catalog_service.get(product.id) == product

    def test_update_allows_clearing_optional_field(self, catalog_service) -> None:
        product = catalog_service.create(Product(name="Mug", price=5, category="home"))

        assert catalog_service.update(product.id, {"category": None}).category is None

    def test_update_missing(self, catalog_service) -> None:
        with pytest.raises(ProductNotFound):
            catalog_service.update("missing", {"price": 1})

    def test_delete(self, catalog_service) -> None:
        product = catalog_service.create(Product(name="Mug", price=5))

        catalog_service.delete(product.id)

        with pytest.raises(ProductNotFound):
            catalog_service.get(product.id)
        with pytest.raises(ProductNotFound):
            catalog_service.delete(product.id)
