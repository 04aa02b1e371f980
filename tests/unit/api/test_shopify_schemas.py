"""Tests unitarios para los modelos del webhook de Shopify."""

import pytest
from pydantic import ValidationError

from printavo_sync.api.v1.schemas import ShopifyOrderPayload


def payload(**overrides):
    data = {
        "id": 820982911946154508,
        "name": "#9999",
        "order_number": 1234,
        "email": None,
        "contact_email": "Buyer@Example.com",
        "tags": "rush, vip",
        "financial_status": "paid",
        "total_price": "199.65",
        "billing_address": {"first_name": "Bob", "last_name": "Norman", "province_code": "KY", "latitude": 45.4},
        "customer": {"id": 115310627314723954, "email": "bob@example.com", "first_name": "Bob"},
        "line_items": [
            {
                "id": 866550311766439020,
                "title": "IPod Nano - 8GB",
                "name": "IPod Nano - 8GB - Pink",
                "price": 199.0,
                "quantity": 1,
                "sku": "",
                "variant_title": "Pink",
                "gift_card": False,
                "requires_shipping": True,
                "properties": [{"name": "Size", "value": 2}, {"name": "_hidden", "value": None}],
            }
        ],
    }
    data.update(overrides)
    return data


class TestShopifyOrderPayload:
    def test_to_domain(self):
        """Debe convertir el payload de Shopify al snapshot de dominio."""
        order = ShopifyOrderPayload.model_validate(payload()).to_domain()

        assert order.id == "820982911946154508"
        assert order.order_number == "1234"
        assert order.display_name == "#9999"
        assert order.email == "Buyer@Example.com"
        assert order.tags == "rush, vip"
        assert order.is_paid
        assert order.billing_address.province_code == "KY"
        assert order.customer.id == "115310627314723954"

    def test_line_item_conversion(self):
        """Debe normalizar precio, sku vacío y valores de propiedades."""
        [item] = ShopifyOrderPayload.model_validate(payload()).to_domain().line_items

        assert item.name == "IPod Nano - 8GB - Pink"
        assert item.price == "199.0"
        assert item.sku is None
        assert [(p.name, p.value) for p in item.properties] == [("Size", "2"), ("_hidden", "")]

    def test_title_used_without_name(self):
        """Debe usar el título si el artículo no trae nombre."""
        data = payload(line_items=[{"title": "Mug", "price": "9.50"}])

        [item] = ShopifyOrderPayload.model_validate(data).to_domain().line_items

        assert item.name == "Mug"
        assert item.quantity == 1

    def test_null_tags_and_missing_sections(self):
        """Debe tolerar etiquetas nulas y secciones ausentes."""
        order = ShopifyOrderPayload.model_validate({"id": 1, "tags": None}).to_domain()

        assert order.tags == ""
        assert order.customer is None
        assert order.line_items == ()

    def test_order_email_preferred_over_contact_email(self):
        """Debe preferir email sobre contact_email."""
        order = ShopifyOrderPayload.model_validate(payload(email="order@example.com")).to_domain()

        assert order.email == "order@example.com"

    def test_id_required(self):
        """Debe rechazar un pedido sin id."""
        with pytest.raises(ValidationError):
            ShopifyOrderPayload.model_validate({"name": "#1"})
