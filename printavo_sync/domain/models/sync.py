"""
Reconciliation records.

Decision, outcome, ledger and audit types produced while reconciling a
Shopify order into a Printavo quote.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Optional


class DecisionKind(str, Enum):
    """Result category of the policy evaluator."""

    PROCEED = "proceed"
    REJECTED = "rejected"  # deliberate skip, not an error
    MISCONFIGURED = "misconfigured"


@dataclass(frozen=True)
class Decision:
    """Include/exclude decision with a merchant-readable reason."""

    kind: DecisionKind
    reason: str = ""

    @property
    def proceed(self) -> bool:
        return self.kind == DecisionKind.PROCEED

    @classmethod
    def allow(cls) -> "Decision":
        return cls(kind=DecisionKind.PROCEED, reason="Order matches sync rules")

    @classmethod
    def reject(cls, reason: str) -> "Decision":
        return cls(kind=DecisionKind.REJECTED, reason=reason)

    @classmethod
    def misconfigured(cls, reason: str) -> "Decision":
        return cls(kind=DecisionKind.MISCONFIGURED, reason=reason)


class SyncStatus(str, Enum):
    """Status shown in the merchant activity log."""

    SYNCED = "synced"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncOutcome:
    """
    Result of one reconciliation attempt. Never raised, always returned.

    Attributes:
        success: True when the order is (or already was) mapped to a quote
        status: Activity log status
        message: Merchant-facing message, stored verbatim
        quote_id: Printavo quote ID when success is True
        low_confidence_sizes: Line item descriptions whose size defaulted to medium
    """

    success: bool
    status: SyncStatus
    message: str
    quote_id: Optional[str] = None
    low_confidence_sizes: tuple[str, ...] = ()

    @classmethod
    def synced(cls, message: str, quote_id: str, low_confidence_sizes: tuple[str, ...] = ()) -> "SyncOutcome":
        return cls(
            success=True,
            status=SyncStatus.SYNCED,
            message=message,
            quote_id=quote_id,
            low_confidence_sizes=low_confidence_sizes,
        )

    @classmethod
    def skipped(cls, message: str) -> "SyncOutcome":
        return cls(success=False, status=SyncStatus.SKIPPED, message=message)

    @classmethod
    def failed(cls, message: str) -> "SyncOutcome":
        return cls(success=False, status=SyncStatus.FAILED, message=message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "status": self.status.value,
            "message": self.message,
            "quote_id": self.quote_id,
            "low_confidence_sizes": list(self.low_confidence_sizes),
        }


@dataclass(frozen=True)
class ContactResolution:
    """Printavo contact chosen (or created) for an order."""

    contact_id: str
    customer_id: Optional[str] = None
    is_new: bool = False


@dataclass(frozen=True)
class OrderMapping:
    """
    Idempotency ledger row: one per (shop, shopify_order_id), append-only.
    """

    shop: str
    shopify_order_id: str
    printavo_quote_id: str
    printavo_contact_id: str
    printavo_customer_id: Optional[str] = None
    shopify_order_name: Optional[str] = None
    recorded_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class LedgerWriteStatus(str, Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


@dataclass(frozen=True)
class LedgerWriteResult:
    """
    Result of a ledger write.

    For ALREADY_EXISTS, mapping is the row recorded by the winning writer,
    which is the authoritative outcome for the order.
    """

    status: LedgerWriteStatus
    mapping: OrderMapping

    @property
    def created(self) -> bool:
        return self.status == LedgerWriteStatus.CREATED


@dataclass(frozen=True)
class ActivityRecord:
    """Append-only audit entry, one per reconciliation attempt."""

    shop: str
    status: SyncStatus
    message: str
    order_id: Optional[str] = None
    order_name: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {
            "shop": self.shop,
            "order_id": self.order_id,
            "order_name": self.order_name,
            "status": self.status.value,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
        }
