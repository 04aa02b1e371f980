"""
Interfaces/Protocols for order sync services (Dependency Inversion Principle).

The orchestrator depends on these contracts only, so the SQLite repositories
and the aiohttp Printavo client can be swapped for in-memory fakes in tests.
"""

from typing import Any, Protocol

from printavo_sync.api.v1.schemas.printavo_schemas import (
    CustomerCreateInput,
    PrintavoContact,
    PrintavoCustomer,
    PrintavoQuote,
    QuoteCreateInput,
)
from printavo_sync.db.printavo_client import PrintavoResult
from printavo_sync.domain.models import (
    ActivityRecord,
    ContactResolution,
    LedgerWriteResult,
    MerchantPolicy,
    OrderMapping,
    SourceOrder,
)


class IPolicyStore(Protocol):
    """Protocol for the merchant configuration store."""

    async def get_policy(self, shop: str) -> MerchantPolicy:
        """Return the merchant's policy; raise MerchantNotFoundException if unknown."""
        ...


class IOrderLedger(Protocol):
    """Protocol for the idempotency ledger."""

    async def lookup(self, shop: str, shopify_order_id: str) -> OrderMapping | None:
        """Return the recorded mapping, if any."""
        ...

    async def record(self, mapping: OrderMapping) -> LedgerWriteResult:
        """Insert a mapping; ALREADY_EXISTS carries the winning row."""
        ...


class IActivityLog(Protocol):
    """Protocol for the audit store."""

    async def append(self, record: ActivityRecord) -> None:
        """Append one entry. Best-effort: implementations must not raise."""
        ...


class IPrintavoGateway(Protocol):
    """Protocol for the Printavo GraphQL API."""

    async def find_contacts_by_email(self, api_key: str, email: str) -> PrintavoResult[list[PrintavoContact]]: ...

    async def create_customer(self, api_key: str, data: CustomerCreateInput) -> PrintavoResult[PrintavoCustomer]: ...

    async def create_quote(self, api_key: str, data: QuoteCreateInput) -> PrintavoResult[PrintavoQuote]: ...


class IContactResolver(Protocol):
    async def resolve(self, api_key: str, order: SourceOrder, email: str) -> ContactResolution: ...


class IQuoteBuilder(Protocol):
    async def build(self, api_key: str, draft: Any, contact_id: str) -> PrintavoQuote: ...
