"""
Idempotency ledger: one row per (shop, shopify_order_id).

Rows are only ever inserted. The UNIQUE key decides races between duplicate
webhooks; the loser gets the winner's row back.
"""

import logging
from datetime import datetime
from typing import Any, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from printavo_sync.db.repositories.base import BaseRepository, log_operation, with_retry
from printavo_sync.domain.models import LedgerWriteResult, LedgerWriteStatus, OrderMapping
from printavo_sync.utils.error_handler import DatabaseException

logger = logging.getLogger(__name__)

SELECT_MAPPING = """
SELECT shop, shopify_order_id, shopify_order_name, printavo_quote_id,
       printavo_contact_id, printavo_customer_id, created_at
FROM order_mappings
WHERE shop = :shop AND shopify_order_id = :shopify_order_id
"""

INSERT_MAPPING = """
INSERT INTO order_mappings
    (shop, shopify_order_id, shopify_order_name, printavo_quote_id,
     printavo_contact_id, printavo_customer_id, created_at)
VALUES
    (:shop, :shopify_order_id, :shopify_order_name, :printavo_quote_id,
     :printavo_contact_id, :printavo_customer_id, :created_at)
"""


def _row_to_mapping(row: Mapping[str, Any]) -> OrderMapping:
    return OrderMapping(
        shop=row["shop"],
        shopify_order_id=row["shopify_order_id"],
        shopify_order_name=row["shopify_order_name"],
        printavo_quote_id=row["printavo_quote_id"],
        printavo_contact_id=row["printavo_contact_id"],
        printavo_customer_id=row["printavo_customer_id"],
        recorded_at=datetime.fromisoformat(row["created_at"]),
    )


class LedgerRepository(BaseRepository):
    """Repository for order_mappings."""

    @log_operation()
    @with_retry()
    async def lookup(self, shop: str, shopify_order_id: str) -> Optional[OrderMapping]:
        """Return the mapping recorded for an order, if any."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text(SELECT_MAPPING), {"shop": shop, "shopify_order_id": str(shopify_order_id)}
                )
                row = result.mappings().first()
        except SQLAlchemyError as e:
            raise DatabaseException(f"Ledger lookup failed: {e}", operation="ledger_lookup") from e

        return _row_to_mapping(row) if row else None

    @log_operation()
    async def record(self, mapping: OrderMapping) -> LedgerWriteResult:
        """
        Insert a mapping.

        Returns:
            LedgerWriteResult: CREATED with the new row, or ALREADY_EXISTS with
                the row that won the unique-key race

        Raises:
            DatabaseException: On any storage failure other than the conflict
        """
        params = {
            "shop": mapping.shop,
            "shopify_order_id": str(mapping.shopify_order_id),
            "shopify_order_name": mapping.shopify_order_name,
            "printavo_quote_id": mapping.printavo_quote_id,
            "printavo_contact_id": mapping.printavo_contact_id,
            "printavo_customer_id": mapping.printavo_customer_id,
            "created_at": mapping.recorded_at.isoformat(),
        }

        try:
            async with self.get_session() as session:
                try:
                    await session.execute(text(INSERT_MAPPING), params)
                    await session.commit()
                    return LedgerWriteResult(status=LedgerWriteStatus.CREATED, mapping=mapping)
                except IntegrityError:
                    await session.rollback()
        except SQLAlchemyError as e:
            raise DatabaseException(f"Ledger write failed: {e}", operation="ledger_record") from e

        existing = await self.lookup(mapping.shop, mapping.shopify_order_id)
        if existing is None:
            # integrity error that was not the unique key (e.g. a NULL column)
            raise DatabaseException(
                f"Ledger write rejected for order {mapping.shopify_order_id}", operation="ledger_record"
            )

        logger.info(
            f"Ledger conflict for {mapping.shop}/{mapping.shopify_order_id}: "
            f"already mapped to quote {existing.printavo_quote_id}"
        )
        return LedgerWriteResult(status=LedgerWriteStatus.ALREADY_EXISTS, mapping=existing)
