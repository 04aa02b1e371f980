"""
OrderSyncOrchestrator - reconciles one Shopify order into one Printavo quote.

Flow per attempt:
1. Load merchant policy
2. Idempotency check against the ledger
3. Policy evaluation (skip or proceed)
4. Resolve API key, map fields, resolve contact, create quote
5. Record the mapping (a lost race adopts the winner's quote)
6. Append one activity record

Every collaborator is injected (DIP); create_orchestrator wires the
production implementations.
"""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Callable, Optional

from printavo_sync.core.config import Settings, SyncConfig
from printavo_sync.domain.models import (
    ActivityRecord,
    DecisionKind,
    MerchantPolicy,
    OrderMapping,
    SourceOrder,
    SyncOutcome,
)
from printavo_sync.services.sync.builders import QuoteBuilder
from printavo_sync.services.sync.interfaces import (
    IActivityLog,
    IContactResolver,
    IOrderLedger,
    IPolicyStore,
    IPrintavoGateway,
    IQuoteBuilder,
)
from printavo_sync.services.sync.mappers import FieldMapper
from printavo_sync.services.sync.policy import PolicyEvaluator
from printavo_sync.services.sync.resolvers import ContactResolver, resolve_order_email
from printavo_sync.utils.error_handler import (
    AppException,
    ConfigurationException,
    MerchantNotFoundException,
    log_error,
)

logger = logging.getLogger(__name__)


class OrderSyncOrchestrator:
    """
    Coordinates order reconciliation.

    reconcile() never raises for business or upstream failures: every
    attempt ends in a SyncOutcome and exactly one activity record. Only
    external cancellation propagates.
    """

    def __init__(
        self,
        policy_store: IPolicyStore,
        ledger: IOrderLedger,
        activity_log: IActivityLog,
        contact_resolver: IContactResolver,
        quote_builder: IQuoteBuilder,
        config: SyncConfig,
        evaluator: Optional[PolicyEvaluator] = None,
        field_mapper: Optional[FieldMapper] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        """
        Initialize orchestrator with service dependencies (DIP).

        Args:
            policy_store: Merchant configuration store
            ledger: Idempotency ledger
            activity_log: Audit store (best-effort)
            contact_resolver: Finds or creates the Printavo contact
            quote_builder: Creates the Printavo quote
            config: Process-wide sync settings
            evaluator: Policy evaluator (defaults to PolicyEvaluator())
            field_mapper: Order to quote mapper (defaults to FieldMapper(config))
            clock: Source of the submission time used for due dates
        """
        self.policy_store = policy_store
        self.ledger = ledger
        self.activity_log = activity_log
        self.contact_resolver = contact_resolver
        self.quote_builder = quote_builder
        self.config = config
        self.evaluator = evaluator or PolicyEvaluator()
        self.field_mapper = field_mapper or FieldMapper(config)
        self.clock = clock

    async def reconcile(
        self, shop: str, order: SourceOrder, deadline_seconds: Optional[float] = None
    ) -> SyncOutcome:
        """
        Reconcile one order.

        Args:
            shop: Merchant shop domain
            order: Order snapshot
            deadline_seconds: Optional overall time limit for steps 1-5

        Returns:
            SyncOutcome: success for new and already-synced orders, skipped
                for policy rejections, failed for everything else
        """
        logger.info(f"Reconciling order {order.display_name or order.id} for {shop}")

        try:
            if deadline_seconds is not None:
                outcome = await asyncio.wait_for(self._reconcile(shop, order), timeout=deadline_seconds)
            else:
                outcome = await self._reconcile(shop, order)
        except TimeoutError:
            logger.error(f"Reconciliation of order {order.id} for {shop} exceeded {deadline_seconds}s")
            outcome = SyncOutcome.failed(f"Failed to sync: timed out after {deadline_seconds}s")
        except Exception as e:
            log_error(e, {"shop": shop, "order_id": order.id})
            outcome = SyncOutcome.failed(f"Failed to sync: {e}")

        await self._record_activity(shop, order, outcome)
        return outcome

    async def _reconcile(self, shop: str, order: SourceOrder) -> SyncOutcome:
        # Step 1: Merchant policy
        try:
            policy = await self.policy_store.get_policy(shop)
        except MerchantNotFoundException as e:
            log_error(e, {"shop": shop, "order_id": order.id}, level=logging.WARNING)
            return SyncOutcome.failed(e.message)
        except AppException as e:
            log_error(e, {"shop": shop, "order_id": order.id})
            return SyncOutcome.failed(f"Failed to sync: {e.message}")

        # Step 2: Idempotency check
        try:
            existing = await self.ledger.lookup(shop, order.id)
        except AppException as e:
            log_error(e, {"shop": shop, "order_id": order.id})
            return SyncOutcome.failed(f"Failed to sync: {e.message}")

        if existing is not None:
            logger.info(f"Order {order.id} already synced to quote {existing.printavo_quote_id}")
            return SyncOutcome.synced(
                f"Order already synced to Printavo quote {existing.printavo_quote_id}",
                quote_id=existing.printavo_quote_id,
            )

        # Step 3: Policy
        decision = self.evaluator.evaluate(policy, order)
        if decision.kind == DecisionKind.REJECTED:
            logger.info(f"Order {order.id} skipped for {shop}: {decision.reason}")
            return SyncOutcome.skipped(decision.reason)
        if decision.kind == DecisionKind.MISCONFIGURED:
            logger.warning(f"Order {order.id} not synced for {shop}: {decision.reason}")
            return SyncOutcome.failed(decision.reason)

        # Step 4: Create downstream records
        try:
            return await self._create_quote(shop, order, policy)
        except AppException as e:
            log_error(e, {"shop": shop, "order_id": order.id})
            return SyncOutcome.failed(f"Failed to sync: {e.message}")
        except Exception as e:
            log_error(e, {"shop": shop, "order_id": order.id})
            return SyncOutcome.failed(f"Failed to sync: {e}")

    def _resolve_api_key(self, policy: MerchantPolicy) -> str:
        api_key = (policy.api_credential or "").strip() or (self.config.default_api_key or "").strip()
        if not api_key:
            raise ConfigurationException("Printavo API key not configured", setting="printavo_api_key")
        return api_key

    async def _create_quote(self, shop: str, order: SourceOrder, policy: MerchantPolicy) -> SyncOutcome:
        api_key = self._resolve_api_key(policy)

        # Pure preparation first so invalid orders never reach Printavo
        email = resolve_order_email(order)
        draft = self.field_mapper.map_order(order, policy, self.clock())

        contact = await self.contact_resolver.resolve(api_key, order, email)
        quote = await self.quote_builder.build(api_key, draft, contact.contact_id)

        # Step 5: Ledger
        write = await self.ledger.record(
            OrderMapping(
                shop=shop,
                shopify_order_id=order.id,
                shopify_order_name=order.name,
                printavo_quote_id=quote.id,
                printavo_contact_id=contact.contact_id,
                printavo_customer_id=contact.customer_id,
            )
        )

        if not write.created:
            winner = write.mapping.printavo_quote_id
            logger.warning(
                f"Concurrent sync of order {order.id} for {shop}: keeping quote {winner}, "
                f"quote {quote.id} is orphaned in Printavo"
            )
            return SyncOutcome.synced(
                f"Order synced successfully (concurrent webhook detected). Quote ID: {winner}",
                quote_id=winner,
                low_confidence_sizes=draft.low_confidence_sizes,
            )

        customer_note = "New customer created." if contact.is_new else "Existing customer found."
        logger.info(f"Order {order.id} for {shop} synced to quote {quote.id}")
        return SyncOutcome.synced(
            f"Order synced successfully. {customer_note} Quote ID: {quote.id}",
            quote_id=quote.id,
            low_confidence_sizes=draft.low_confidence_sizes,
        )

    async def _record_activity(self, shop: str, order: SourceOrder, outcome: SyncOutcome) -> None:
        message = outcome.message
        if outcome.low_confidence_sizes:
            message += f" Size defaulted to M for: {', '.join(outcome.low_confidence_sizes)}"

        record = ActivityRecord(
            shop=shop,
            status=outcome.status,
            message=message,
            order_id=order.id,
            order_name=order.name,
        )
        try:
            await self.activity_log.append(record)
        except Exception as e:
            logger.error(f"Activity log append failed for {shop} order {order.id}: {e}")


# Factory function to create orchestrator with all dependencies
def create_orchestrator(settings: Settings, conn_db, printavo_client: IPrintavoGateway) -> OrderSyncOrchestrator:
    """
    Build an orchestrator backed by the SQLite repositories and Printavo client.

    Args:
        settings: Application settings
        conn_db: Initialized ConnDB
        printavo_client: Printavo GraphQL client

    Returns:
        OrderSyncOrchestrator: Fully configured orchestrator
    """
    from printavo_sync.db.repositories import ActivityRepository, LedgerRepository, MerchantRepository

    return OrderSyncOrchestrator(
        policy_store=MerchantRepository(conn_db),
        ledger=LedgerRepository(conn_db),
        activity_log=ActivityRepository(conn_db),
        contact_resolver=ContactResolver(printavo_client),
        quote_builder=QuoteBuilder(printavo_client),
        config=settings.to_sync_config(),
    )
