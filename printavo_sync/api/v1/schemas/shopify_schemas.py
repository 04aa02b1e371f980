"""
Modelos Pydantic para el webhook orders/create de Shopify.

El payload REST del webhook usa snake_case. Solo se modelan los campos que
usa la reconciliación; el resto se ignora. `to_domain()` produce el
snapshot inmutable SourceOrder que consume el núcleo.
"""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from printavo_sync.domain.models import (
    LineItemProperty,
    SourceAddress,
    SourceCustomer,
    SourceLineItem,
    SourceOrder,
)


class ShopifyWebhookModel(BaseModel):
    """Base para modelos del webhook: ignora campos desconocidos."""

    model_config = ConfigDict(extra="ignore")


class ShopifyAddress(ShopifyWebhookModel):
    """Modelo para direcciones."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    province_code: Optional[str] = None
    zip: Optional[str] = None
    country_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    def to_domain(self) -> SourceAddress:
        return SourceAddress(**self.model_dump())


class ShopifyCustomer(ShopifyWebhookModel):
    """Modelo para cliente."""

    id: Optional[Union[int, str]] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None

    def to_domain(self) -> SourceCustomer:
        return SourceCustomer(
            id=str(self.id) if self.id is not None else None,
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
            phone=self.phone,
            company=self.company,
        )


class ShopifyLineItemProperty(ShopifyWebhookModel):
    name: str
    value: Optional[Any] = None


class ShopifyLineItem(ShopifyWebhookModel):
    """Modelo para línea de pedido."""

    id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    title: Optional[str] = None
    sku: Optional[str] = None
    price: str = "0"
    quantity: int = 1
    product_type: Optional[str] = None
    requires_shipping: bool = True
    variant_title: Optional[str] = None
    taxable: bool = False
    gift_card: bool = False
    properties: List[ShopifyLineItemProperty] = Field(default_factory=list)

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, value: Any) -> str:
        # Shopify sends prices as strings; tests and replays sometimes send numbers
        return "0" if value is None else str(value)

    def to_domain(self) -> SourceLineItem:
        return SourceLineItem(
            name=self.name or self.title or "",
            price=self.price,
            quantity=self.quantity,
            sku=self.sku or None,
            product_type=self.product_type,
            requires_shipping=self.requires_shipping,
            variant_title=self.variant_title,
            taxable=self.taxable,
            gift_card=self.gift_card,
            properties=tuple(
                LineItemProperty(name=prop.name, value="" if prop.value is None else str(prop.value))
                for prop in self.properties
            ),
        )


class ShopifyOrderPayload(ShopifyWebhookModel):
    """Modelo para el pedido recibido en orders/create."""

    id: Union[int, str]
    name: Optional[str] = None
    order_number: Optional[Union[int, str]] = None
    email: Optional[str] = None
    contact_email: Optional[str] = None
    phone: Optional[str] = None
    tags: Optional[str] = ""
    financial_status: Optional[str] = None
    note: Optional[str] = None
    created_at: Optional[str] = None
    billing_address: Optional[ShopifyAddress] = None
    shipping_address: Optional[ShopifyAddress] = None
    customer: Optional[ShopifyCustomer] = None
    line_items: List[ShopifyLineItem] = Field(default_factory=list)

    def to_domain(self) -> SourceOrder:
        """Convierte el payload al snapshot de dominio."""
        return SourceOrder(
            id=str(self.id),
            name=self.name,
            order_number=str(self.order_number) if self.order_number is not None else None,
            email=self.email or self.contact_email,
            phone=self.phone,
            tags=self.tags or "",
            financial_status=self.financial_status,
            note=self.note,
            created_at=self.created_at,
            billing_address=self.billing_address.to_domain() if self.billing_address else None,
            shipping_address=self.shipping_address.to_domain() if self.shipping_address else None,
            customer=self.customer.to_domain() if self.customer else None,
            line_items=tuple(item.to_domain() for item in self.line_items),
        )
