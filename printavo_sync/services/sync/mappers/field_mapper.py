"""
FieldMapper service - converts a Shopify order into a Printavo quote draft.

Pure transformation: no I/O. The draft carries everything quoteCreate needs
except the contact, which is only known after contact resolution.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Optional

from printavo_sync.api.v1.schemas.printavo_schemas import (
    AddressInput,
    ContactReference,
    LineItemCreateInput,
    LineItemGroupCreateInput,
    LineItemSizeCount,
    QuoteCreateInput,
)
from printavo_sync.core.config import SyncConfig
from printavo_sync.domain.models import MerchantPolicy, SourceAddress, SourceLineItem, SourceOrder
from printavo_sync.domain.value_objects import SizeResolution
from printavo_sync.services.sync.mappers.size_mapper import resolve_size
from printavo_sync.utils.error_handler import NoEligibleItemsException, ValidationException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuoteDraft:
    """
    Quote fields derived from an order, waiting for a contact.

    Attributes:
        line_items: Eligible line items, positions starting at 1
        low_confidence_sizes: Descriptions of items whose size defaulted to medium
    """

    customer_due_at: date
    due_at: datetime
    nickname: str
    visual_po_number: str
    production_note: str
    tags: list[str]
    line_items: list[LineItemCreateInput]
    customer_note: Optional[str] = None
    billing_address: Optional[AddressInput] = None
    shipping_address: Optional[AddressInput] = None
    low_confidence_sizes: tuple[str, ...] = field(default_factory=tuple)

    def to_input(self, contact_id: str) -> QuoteCreateInput:
        """Build the quoteCreate input for a resolved contact."""
        return QuoteCreateInput(
            contact=ContactReference(id=contact_id),
            customerDueAt=self.customer_due_at,
            dueAt=self.due_at,
            nickname=self.nickname,
            visualPoNumber=self.visual_po_number,
            customerNote=self.customer_note,
            productionNote=self.production_note,
            tags=list(self.tags),
            billingAddress=self.billing_address,
            shippingAddress=self.shipping_address,
            lineItemGroups=[LineItemGroupCreateInput(position=1, lineItems=list(self.line_items))],
        )


def is_line_item_eligible(item: SourceLineItem, policy: MerchantPolicy, config: SyncConfig) -> bool:
    """Check a line item against product type, shipping and skip-property filters."""
    product_type = (item.product_type or "").strip().lower()

    if policy.skip_gift_cards and (item.gift_card or product_type in config.gift_card_product_types):
        return False
    if product_type in config.non_physical_product_types:
        return False
    if policy.skip_non_physical and not item.requires_shipping:
        return False

    if policy.respect_line_item_skip_property and item.properties:
        skip_property = (
            policy.line_item_skip_property_name.strip() or config.default_line_item_skip_property
        ).lower()
        if any(prop.name.strip().lower() == skip_property for prop in item.properties):
            return False

    return True


def filter_line_items(
    items: tuple[SourceLineItem, ...] | list[SourceLineItem], policy: MerchantPolicy, config: SyncConfig
) -> list[SourceLineItem]:
    """
    Keep the eligible line items, in order.

    Raises:
        NoEligibleItemsException: If nothing survives the filters
    """
    eligible = [item for item in items if is_line_item_eligible(item, policy, config)]
    if not eligible:
        raise NoEligibleItemsException(total_items=len(items))

    skipped = len(items) - len(eligible)
    if skipped:
        logger.debug(f"Filtered out {skipped} of {len(items)} line items")
    return eligible


def map_address(address: SourceAddress | None) -> AddressInput | None:
    """Map a Shopify address to a Printavo address input."""
    if address is None:
        return None
    return AddressInput(
        name=address.full_name,
        address1=address.address1,
        address2=address.address2,
        city=address.city,
        state=address.province or address.province_code,
        zip=address.zip,
        country=address.country_code,
        phone=address.phone,
    )


def describe_line_item(item: SourceLineItem) -> str:
    return f"{item.name} - {item.variant_title}" if item.variant_title else item.name


def _unit_price(item: SourceLineItem) -> Decimal:
    try:
        return Decimal(str(item.price).strip() or "0")
    except InvalidOperation as e:
        raise ValidationException(
            message=f"Invalid price for line item {item.name!r}",
            field="price",
            invalid_value=item.price,
        ) from e


def build_line_items(
    items: list[SourceLineItem], sizes: list[SizeResolution] | None = None
) -> list[LineItemCreateInput]:
    """
    Build Printavo line items.

    price is the per-unit price, never extended by quantity; the quantity
    goes in the single sizes[] entry.
    """
    if sizes is None:
        sizes = [resolve_size(item) for item in items]

    return [
        LineItemCreateInput(
            position=index,
            description=describe_line_item(item),
            itemNumber=item.sku or None,
            price=_unit_price(item),
            taxed=item.taxable,
            sizes=[LineItemSizeCount(size=size.size, count=item.quantity)],
        )
        for index, (item, size) in enumerate(zip(items, sizes), start=1)
    ]


def build_tags(order: SourceOrder, source_tag: str) -> list[str]:
    tags = [source_tag]
    if order.is_paid:
        tags.append("paid")
    tags.extend(tag.strip() for tag in (order.tags or "").split(",") if tag.strip())
    return tags


def build_production_note(order: SourceOrder) -> str:
    lines = [
        f"Shopify Order ID: {order.id}",
        f"Order Number: {order.display_name}",
        f"Created: {order.created_at or ''}",
    ]
    if order.note:
        lines.append(f"Customer Note: {order.note}")
    return "\n".join(lines)


class FieldMapper:
    """Maps orders to quote drafts (SRP: field mapping only)."""

    def __init__(self, config: SyncConfig):
        self.config = config

    def map_order(self, order: SourceOrder, policy: MerchantPolicy, now: datetime) -> QuoteDraft:
        """
        Map an order to a quote draft.

        Args:
            order: Source order snapshot
            policy: Merchant policy (line item filters)
            now: Submission time; due dates are computed from it

        Raises:
            NoEligibleItemsException: If every line item is filtered out
            ValidationException: If a line item price is not a number
        """
        items = filter_line_items(order.line_items, policy, self.config)
        sizes = [resolve_size(item) for item in items]
        low_confidence = tuple(
            describe_line_item(item) for item, size in zip(items, sizes) if size.is_fallback
        )

        due = now + timedelta(days=self.config.quote_due_days)

        return QuoteDraft(
            customer_due_at=due.date(),
            due_at=due,
            nickname=f"Shopify {order.display_name}",
            visual_po_number=f"Shopify-{order.display_number}",
            customer_note=order.note or None,
            production_note=build_production_note(order),
            tags=build_tags(order, self.config.quote_source_tag),
            billing_address=map_address(order.billing_address),
            shipping_address=map_address(order.shipping_address),
            line_items=build_line_items(items, sizes),
            low_confidence_sizes=low_confidence,
        )
