"""Audit store: append-only activity log shown to merchants."""

import logging
from datetime import UTC, datetime
from typing import Any, Dict, List

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from printavo_sync.db.repositories.base import BaseRepository, log_operation, with_retry
from printavo_sync.domain.models import ActivityRecord, SyncStatus
from printavo_sync.utils.error_handler import DatabaseException

logger = logging.getLogger(__name__)

INSERT_ACTIVITY = """
INSERT INTO activity_logs (shop, order_id, order_name, status, message, created_at)
VALUES (:shop, :order_id, :order_name, :status, :message, :created_at)
"""

SELECT_RECENT = """
SELECT shop, order_id, order_name, status, message, created_at
FROM activity_logs
WHERE shop = :shop
ORDER BY created_at DESC, id DESC
LIMIT :limit
"""

SELECT_STATS = """
SELECT
    COUNT(CASE WHEN status = 'synced' THEN 1 END) AS synced_count,
    COUNT(CASE WHEN status = 'failed' THEN 1 END) AS failed_count,
    MAX(CASE WHEN status = 'synced' THEN created_at END) AS last_success
FROM activity_logs
WHERE shop = :shop AND created_at >= :since
"""


class ActivityRepository(BaseRepository):
    """Repository for activity_logs."""

    async def append(self, record: ActivityRecord) -> None:
        """
        Append one entry.

        Best-effort: failures are logged and swallowed so auditing can never
        change a reconciliation outcome.
        """
        try:
            async with self.get_session() as session:
                await session.execute(
                    text(INSERT_ACTIVITY),
                    {
                        "shop": record.shop,
                        "order_id": record.order_id,
                        "order_name": record.order_name,
                        "status": record.status.value,
                        "message": record.message,
                        "created_at": record.created_at.isoformat(),
                    },
                )
                await session.commit()
        except Exception as e:
            logger.error(f"Failed to write activity log for {record.shop} order {record.order_id}: {e}")

    @log_operation()
    @with_retry()
    async def list_recent(self, shop: str, limit: int = 50) -> List[ActivityRecord]:
        """Most recent entries first."""
        try:
            async with self.get_session() as session:
                result = await session.execute(text(SELECT_RECENT), {"shop": shop, "limit": limit})
                rows = result.mappings().all()
        except SQLAlchemyError as e:
            raise DatabaseException(f"Activity lookup failed: {e}", operation="activity_list") from e

        return [
            ActivityRecord(
                shop=row["shop"],
                status=SyncStatus(row["status"]),
                message=row["message"] or "",
                order_id=row["order_id"],
                order_name=row["order_name"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    @log_operation()
    @with_retry()
    async def stats_today(self, shop: str) -> Dict[str, Any]:
        """
        Synced and failed counts since midnight UTC, plus the last success.

        Returns:
            Dict: {"synced_today": int, "failed_today": int, "last_success": str | None}
        """
        since = datetime.now(UTC).replace(hour=0, minute=0, second=0, microsecond=0)
        try:
            async with self.get_session() as session:
                result = await session.execute(text(SELECT_STATS), {"shop": shop, "since": since.isoformat()})
                row = result.mappings().first()
        except SQLAlchemyError as e:
            raise DatabaseException(f"Activity stats failed: {e}", operation="activity_stats") from e

        return {
            "synced_today": int(row["synced_count"] or 0) if row else 0,
            "failed_today": int(row["failed_count"] or 0) if row else 0,
            "last_success": row["last_success"] if row else None,
        }
