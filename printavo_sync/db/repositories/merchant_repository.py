"""Merchant configuration store."""

import logging
from typing import Any, Mapping

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from printavo_sync.db.repositories.base import BaseRepository, log_operation, with_retry
from printavo_sync.domain.models import MerchantPolicy, SyncMode
from printavo_sync.utils.error_handler import DatabaseException, MerchantNotFoundException

logger = logging.getLogger(__name__)

SELECT_MERCHANT = """
SELECT shop, printavo_api_key, sync_enabled, sync_mode, included_tags, exclude_tag,
       require_include_tag, include_tag, respect_line_item_skip, line_item_skip_property,
       skip_gift_cards, skip_non_physical
FROM merchants
WHERE shop = :shop
"""

UPSERT_MERCHANT = """
INSERT INTO merchants
    (shop, printavo_api_key, sync_enabled, sync_mode, included_tags, exclude_tag,
     require_include_tag, include_tag, respect_line_item_skip, line_item_skip_property,
     skip_gift_cards, skip_non_physical)
VALUES
    (:shop, :printavo_api_key, :sync_enabled, :sync_mode, :included_tags, :exclude_tag,
     :require_include_tag, :include_tag, :respect_line_item_skip, :line_item_skip_property,
     :skip_gift_cards, :skip_non_physical)
ON CONFLICT(shop) DO UPDATE SET
    printavo_api_key = excluded.printavo_api_key,
    sync_enabled = excluded.sync_enabled,
    sync_mode = excluded.sync_mode,
    included_tags = excluded.included_tags,
    exclude_tag = excluded.exclude_tag,
    require_include_tag = excluded.require_include_tag,
    include_tag = excluded.include_tag,
    respect_line_item_skip = excluded.respect_line_item_skip,
    line_item_skip_property = excluded.line_item_skip_property,
    skip_gift_cards = excluded.skip_gift_cards,
    skip_non_physical = excluded.skip_non_physical,
    updated_at = CURRENT_TIMESTAMP
"""


def _flag(value: Any, default: bool) -> bool:
    return default if value is None else bool(value)


def _row_to_policy(row: Mapping[str, Any]) -> MerchantPolicy:
    # NULL columns fall back to the same defaults as a new merchant
    defaults = MerchantPolicy()
    try:
        sync_mode = SyncMode((row["sync_mode"] or SyncMode.ALL.value).strip().lower())
    except ValueError:
        logger.warning(f"Unknown sync_mode {row['sync_mode']!r} for {row['shop']}, using 'all'")
        sync_mode = SyncMode.ALL

    return MerchantPolicy(
        sync_enabled=_flag(row["sync_enabled"], defaults.sync_enabled),
        api_credential=row["printavo_api_key"] or "",
        exclude_tag=row["exclude_tag"] if row["exclude_tag"] is not None else defaults.exclude_tag,
        require_include_tag=_flag(row["require_include_tag"], defaults.require_include_tag),
        include_tag=row["include_tag"] if row["include_tag"] is not None else defaults.include_tag,
        respect_line_item_skip_property=_flag(row["respect_line_item_skip"], defaults.respect_line_item_skip_property),
        line_item_skip_property_name=row["line_item_skip_property"] or defaults.line_item_skip_property_name,
        skip_gift_cards=_flag(row["skip_gift_cards"], defaults.skip_gift_cards),
        skip_non_physical=_flag(row["skip_non_physical"], defaults.skip_non_physical),
        sync_mode=sync_mode,
        included_tags=MerchantPolicy.parse_included_tags(row["included_tags"]),
    )


class MerchantRepository(BaseRepository):
    """Repository for merchants (read by the engine, written by settings)."""

    @log_operation()
    @with_retry()
    async def get_policy(self, shop: str) -> MerchantPolicy:
        """
        Load a merchant's policy.

        Raises:
            MerchantNotFoundException: If the shop has no merchant row
            DatabaseException: On storage failure
        """
        try:
            async with self.get_session() as session:
                result = await session.execute(text(SELECT_MERCHANT), {"shop": shop})
                row = result.mappings().first()
        except SQLAlchemyError as e:
            raise DatabaseException(f"Merchant lookup failed: {e}", operation="merchant_lookup") from e

        if row is None:
            raise MerchantNotFoundException(shop)
        return _row_to_policy(row)

    @log_operation()
    async def save_policy(self, shop: str, policy: MerchantPolicy) -> None:
        """Create or update a merchant's policy."""
        params = {
            "shop": shop,
            "printavo_api_key": policy.api_credential,
            "sync_enabled": int(policy.sync_enabled),
            "sync_mode": policy.sync_mode.value,
            "included_tags": ",".join(sorted(policy.included_tags)),
            "exclude_tag": policy.exclude_tag,
            "require_include_tag": int(policy.require_include_tag),
            "include_tag": policy.include_tag,
            "respect_line_item_skip": int(policy.respect_line_item_skip_property),
            "line_item_skip_property": policy.line_item_skip_property_name,
            "skip_gift_cards": int(policy.skip_gift_cards),
            "skip_non_physical": int(policy.skip_non_physical),
        }
        try:
            async with self.get_session() as session:
                await session.execute(text(UPSERT_MERCHANT), params)
                await session.commit()
        except SQLAlchemyError as e:
            raise DatabaseException(f"Merchant save failed: {e}", operation="merchant_save") from e

        logger.info(f"Saved sync settings for {shop}")
