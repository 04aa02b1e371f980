"""
Domain models for business entities.

These models represent core business concepts and contain
business logic and invariants.
"""

from .order import LineItemProperty, SourceAddress, SourceCustomer, SourceLineItem, SourceOrder
from .policy import MerchantPolicy, SyncMode
from .sync import (
    ActivityRecord,
    ContactResolution,
    Decision,
    DecisionKind,
    LedgerWriteResult,
    LedgerWriteStatus,
    OrderMapping,
    SyncOutcome,
    SyncStatus,
)

__all__ = [
    "ActivityRecord",
    "ContactResolution",
    "Decision",
    "DecisionKind",
    "LedgerWriteResult",
    "LedgerWriteStatus",
    "LineItemProperty",
    "MerchantPolicy",
    "OrderMapping",
    "SourceAddress",
    "SourceCustomer",
    "SourceLineItem",
    "SourceOrder",
    "SyncMode",
    "SyncOutcome",
    "SyncStatus",
]
