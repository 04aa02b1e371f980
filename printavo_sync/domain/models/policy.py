"""
Merchant policy domain model.

Per-merchant sync configuration. Owned by the settings surface and
read-only to the reconciliation engine.
"""

from dataclasses import dataclass, field
from enum import Enum


class SyncMode(str, Enum):
    """Legacy sync mode kept for merchants configured before include/exclude tags."""

    ALL = "all"
    TAGGED = "tagged"


@dataclass(frozen=True)
class MerchantPolicy:
    """
    Inclusion/exclusion rules for one merchant.

    Attributes:
        sync_enabled: Master switch for the merchant
        api_credential: Merchant's Printavo API key (may be blank)
        exclude_tag: Orders carrying this tag are skipped (blank disables)
        require_include_tag: Only sync orders carrying include_tag
        include_tag: Tag required when require_include_tag is on (blank disables)
        respect_line_item_skip_property: Honor the per-item skip property
        line_item_skip_property_name: Property name that excludes a line item
        skip_gift_cards: Drop gift-card line items
        skip_non_physical: Drop line items that do not require shipping
        sync_mode: Legacy mode; TAGGED requires an intersection with included_tags
        included_tags: Legacy tag allow-list (lowercased)
    """

    sync_enabled: bool = True
    api_credential: str = ""
    exclude_tag: str = "no-printavo"
    require_include_tag: bool = False
    include_tag: str = "printavo"
    respect_line_item_skip_property: bool = False
    line_item_skip_property_name: str = "printavo_skip"
    skip_gift_cards: bool = True
    skip_non_physical: bool = True
    sync_mode: SyncMode = SyncMode.ALL
    included_tags: frozenset[str] = field(default_factory=frozenset)

    @staticmethod
    def parse_included_tags(raw: str | None) -> frozenset[str]:
        """Parse the stored comma-joined legacy tag list."""
        return frozenset(tag.strip().lower() for tag in (raw or "").split(",") if tag.strip())
