"""
Pydantic models for the Printavo v2 GraphQL API.

Input models are serialized with `to_variables()` (camelCase field names,
None values dropped). Response models parse only the fields requested by
the queries in `printavo_sync.db.printavo_queries`.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_serializer

from printavo_sync.domain.value_objects import LineItemSize


class PrintavoInput(BaseModel):
    """Base class for mutation inputs."""

    def to_variables(self) -> Dict[str, Any]:
        """Serialize as GraphQL variables."""
        return self.model_dump(mode="json", exclude_none=True)


# Input Models


class AddressInput(PrintavoInput):
    """Modelo para dirección de facturación o envío."""

    name: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None


class ContactInput(PrintavoInput):
    firstName: str
    lastName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class CustomerCreateInput(PrintavoInput):
    """Input for customerCreate: a customer with its primary contact."""

    primaryContact: ContactInput
    companyName: Optional[str] = None
    billingAddress: Optional[AddressInput] = None
    shippingAddress: Optional[AddressInput] = None
    internalNote: Optional[str] = None


class LineItemSizeCount(PrintavoInput):
    size: LineItemSize
    count: int = Field(..., ge=0)


class LineItemCreateInput(PrintavoInput):
    """
    One quote line item.

    price is the per-unit price; quantity lives in sizes[].count.
    """

    position: int = Field(..., ge=1)
    description: Optional[str] = None
    itemNumber: Optional[str] = None
    color: Optional[str] = None
    price: Optional[Decimal] = None
    taxed: bool = False
    sizes: List[LineItemSizeCount] = Field(default_factory=list)

    @field_serializer("price")
    def serialize_price(self, value: Optional[Decimal]) -> Optional[float]:
        # Printavo's price field is a GraphQL Float
        return float(value) if value is not None else None


class LineItemGroupCreateInput(PrintavoInput):
    position: int = Field(..., ge=1)
    lineItems: List[LineItemCreateInput] = Field(default_factory=list)


class ContactReference(PrintavoInput):
    id: str


class QuoteCreateInput(PrintavoInput):
    """Input for quoteCreate."""

    contact: ContactReference
    customerDueAt: date
    dueAt: datetime
    nickname: Optional[str] = None
    visualPoNumber: Optional[str] = None
    customerNote: Optional[str] = None
    productionNote: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    billingAddress: Optional[AddressInput] = None
    shippingAddress: Optional[AddressInput] = None
    lineItemGroups: List[LineItemGroupCreateInput] = Field(default_factory=list)


# Response Models


class PrintavoEmail(BaseModel):
    email: str


class PrintavoCustomerRef(BaseModel):
    id: str
    companyName: Optional[str] = None


class PrintavoContact(BaseModel):
    """Contact returned by the contacts lookup."""

    id: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    emails: List[PrintavoEmail] = Field(default_factory=list)
    customer: Optional[PrintavoCustomerRef] = None

    def has_email(self, email: str) -> bool:
        """Case-insensitive membership test against the contact's emails."""
        target = email.strip().lower()
        return any(entry.email.strip().lower() == target for entry in self.emails)


class PrintavoPrimaryContact(BaseModel):
    id: Optional[str] = None
    emails: List[PrintavoEmail] = Field(default_factory=list)


class PrintavoCustomer(BaseModel):
    """Customer returned by customerCreate."""

    id: str
    companyName: Optional[str] = None
    primaryContact: Optional[PrintavoPrimaryContact] = None


class PrintavoQuoteLineItem(BaseModel):
    id: str
    description: Optional[str] = None
    itemNumber: Optional[str] = None


class PrintavoLineItemGroup(BaseModel):
    id: str
    position: int
    lineItems: List[PrintavoQuoteLineItem] = Field(default_factory=list)


class PrintavoQuote(BaseModel):
    """Quote returned by quoteCreate."""

    id: str
    nickname: Optional[str] = None
    contact: Optional[ContactReference] = None
    lineItemGroups: List[PrintavoLineItemGroup] = Field(default_factory=list)
