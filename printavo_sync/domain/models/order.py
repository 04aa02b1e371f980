"""
Source order domain model.

Immutable snapshot of a Shopify order as received in the orders/create
webhook. Built by the webhook schema layer and never mutated afterwards.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class LineItemProperty:
    """Arbitrary name/value pair attached to a line item at checkout."""

    name: str
    value: str = ""


@dataclass(frozen=True)
class SourceAddress:
    """Billing or shipping address on a Shopify order."""

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

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


@dataclass(frozen=True)
class SourceCustomer:
    """Customer record embedded in a Shopify order."""

    id: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None


@dataclass(frozen=True)
class SourceLineItem:
    """
    One line item of a Shopify order.

    Attributes:
        name: Display name ("Product - Variant" in Shopify's payload)
        price: Per-unit price exactly as received (string)
        quantity: Ordered quantity
        product_type: Shopify product type, used by the eligibility filter
        requires_shipping: False for digital goods and services
        variant_title: Variant descriptor, usually "Size / Color"
        gift_card: Shopify's own gift-card flag
        properties: Custom properties captured at checkout
    """

    name: str
    price: str = "0"
    quantity: int = 1
    sku: Optional[str] = None
    product_type: Optional[str] = None
    requires_shipping: bool = True
    variant_title: Optional[str] = None
    taxable: bool = False
    gift_card: bool = False
    properties: tuple[LineItemProperty, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SourceOrder:
    """
    Shopify order snapshot (read-only).

    Attributes:
        id: Shopify order ID (numeric, as string)
        name: Display name, e.g. "#1001"
        order_number: Numeric order number, e.g. "1001"
        tags: Comma-joined tag string as sent by Shopify
        financial_status: Shopify financial status ("paid", "pending", ...)
    """

    id: str
    name: Optional[str] = None
    order_number: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    tags: str = ""
    financial_status: Optional[str] = None
    note: Optional[str] = None
    created_at: Optional[str] = None
    billing_address: Optional[SourceAddress] = None
    shipping_address: Optional[SourceAddress] = None
    customer: Optional[SourceCustomer] = None
    line_items: tuple[SourceLineItem, ...] = field(default_factory=tuple)

    @property
    def display_name(self) -> str:
        """Order name with order number as fallback."""
        return self.name or self.order_number or ""

    @property
    def display_number(self) -> str:
        """Order number with name as fallback."""
        return self.order_number or self.name or ""

    @property
    def is_paid(self) -> bool:
        return (self.financial_status or "").lower() == "paid"
