from .activity_repository import ActivityRepository
from .base import BaseRepository, log_operation, with_retry
from .ledger_repository import LedgerRepository
from .merchant_repository import MerchantRepository

__all__ = [
    "ActivityRepository",
    "BaseRepository",
    "LedgerRepository",
    "MerchantRepository",
    "log_operation",
    "with_retry",
]
