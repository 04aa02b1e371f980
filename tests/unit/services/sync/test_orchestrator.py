"""Tests unitarios para OrderSyncOrchestrator."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from printavo_sync.api.v1.schemas.printavo_schemas import PrintavoContact, PrintavoQuote
from printavo_sync.core.config import SyncConfig
from printavo_sync.domain.models import (
    ContactResolution,
    LedgerWriteResult,
    LedgerWriteStatus,
    MerchantPolicy,
    OrderMapping,
    SyncMode,
    SyncStatus,
)
from printavo_sync.services.sync.builders import QuoteBuilder
from printavo_sync.services.sync.orchestrator import OrderSyncOrchestrator
from printavo_sync.services.sync.resolvers import ContactResolver


def existing_contact() -> PrintavoContact:
    return PrintavoContact.model_validate(
        {"id": "contact-existing", "emails": [{"email": "jane.doe@example.com"}], "customer": {"id": "cust-existing"}}
    )


class RacingLedger:
    """Ledger que pierde la carrera: lookup no ve nada pero el registro ya existe."""

    def __init__(self, winner: OrderMapping):
        self.winner = winner
        self.record_calls = 0

    async def lookup(self, shop, shopify_order_id):
        return None

    async def record(self, mapping):
        self.record_calls += 1
        return LedgerWriteResult(status=LedgerWriteStatus.ALREADY_EXISTS, mapping=self.winner)


class SlowPolicyStore:
    async def get_policy(self, shop):
        await asyncio.sleep(5)
        return MerchantPolicy()


@pytest.fixture
def build_orchestrator(policy_store, ledger, activity_log, printavo, sync_config, fixed_now):
    def _build(**overrides):
        deps = {
            "policy_store": policy_store,
            "ledger": ledger,
            "activity_log": activity_log,
            "contact_resolver": ContactResolver(printavo),
            "quote_builder": QuoteBuilder(printavo),
            "config": sync_config,
            "clock": lambda: fixed_now,
        }
        deps.update(overrides)
        return OrderSyncOrchestrator(**deps)

    return _build


class TestSuccessfulSync:
    @pytest.mark.asyncio
    async def test_new_customer(self, orchestrator, printavo, ledger, activity_log, shop, make_order):
        """Debe crear cliente y cotización, registrar el mapeo y una actividad."""
        outcome = await orchestrator.reconcile(shop, make_order())

        assert outcome.success is True
        assert outcome.status == SyncStatus.SYNCED
        assert outcome.quote_id == "quote-2"
        assert outcome.message == "Order synced successfully. New customer created. Quote ID: quote-2"
        assert printavo.calls == ["contacts", "customerCreate", "quoteCreate"]

        mapping = ledger.rows[(shop, "5001")]
        assert mapping.printavo_quote_id == "quote-2"
        assert mapping.printavo_contact_id == "contact-1"
        assert mapping.printavo_customer_id == "cust-1"
        assert mapping.shopify_order_name == "#1001"

        assert len(activity_log.records) == 1
        record = activity_log.records[0]
        assert record.status == SyncStatus.SYNCED
        assert record.order_id == "5001"
        assert record.order_name == "#1001"
        assert record.message == outcome.message

    @pytest.mark.asyncio
    async def test_existing_customer(self, orchestrator, printavo, ledger, shop, make_order):
        """Debe reutilizar el contacto existente sin llamar a customerCreate."""
        printavo.contacts.append(existing_contact())

        outcome = await orchestrator.reconcile(shop, make_order())

        assert outcome.message == "Order synced successfully. Existing customer found. Quote ID: quote-1"
        assert printavo.calls == ["contacts", "quoteCreate"]
        assert printavo.quote_inputs[0].contact.id == "contact-existing"
        assert ledger.rows[(shop, "5001")].printavo_customer_id == "cust-existing"

    @pytest.mark.asyncio
    async def test_quote_input_content(self, orchestrator, printavo, shop, make_order):
        """Debe enviar el email normalizado y la cotización mapeada."""
        await orchestrator.reconcile(shop, make_order(tags="Rush"))

        assert printavo.customer_inputs[0].primaryContact.email == "jane.doe@example.com"
        quote_input = printavo.quote_inputs[0]
        assert quote_input.contact.id == "contact-1"
        assert quote_input.visualPoNumber == "Shopify-1001"
        assert quote_input.tags == ["shopify", "paid", "Rush"]

    @pytest.mark.asyncio
    async def test_low_confidence_sizes_reported(self, orchestrator, activity_log, shop, make_order, make_line_item):
        """Debe informar en la actividad las tallas que cayeron en M por defecto."""
        order = make_order(line_items=(make_line_item(name="Poster", variant_title="Glossy"),))

        outcome = await orchestrator.reconcile(shop, order)

        assert outcome.success
        assert outcome.low_confidence_sizes == ("Poster - Glossy",)
        assert activity_log.records[0].message == f"{outcome.message} Size defaulted to M for: Poster - Glossy"


class TestIdempotency:
    @pytest.mark.asyncio
    async def test_replay_makes_no_printavo_calls(self, orchestrator, printavo, ledger, activity_log, shop, make_order):
        """Debe devolver la cotización registrada sin contactar a Printavo."""
        ledger.rows[(shop, "5001")] = OrderMapping(
            shop=shop, shopify_order_id="5001", printavo_quote_id="q-9", printavo_contact_id="c-9"
        )

        outcome = await orchestrator.reconcile(shop, make_order())

        assert outcome.success
        assert outcome.quote_id == "q-9"
        assert outcome.message == "Order already synced to Printavo quote q-9"
        assert printavo.calls == []
        assert ledger.record_calls == 0
        assert [r.status for r in activity_log.records] == [SyncStatus.SYNCED]

    @pytest.mark.asyncio
    async def test_second_delivery_is_a_no_op(self, orchestrator, printavo, ledger, activity_log, shop, make_order):
        """Debe crear una sola cotización aunque el webhook llegue dos veces."""
        first = await orchestrator.reconcile(shop, make_order())
        calls_after_first = list(printavo.calls)

        second = await orchestrator.reconcile(shop, make_order())

        assert second.quote_id == first.quote_id
        assert printavo.calls == calls_after_first
        assert len(ledger.rows) == 1
        assert len(activity_log.records) == 2

    @pytest.mark.asyncio
    async def test_lost_race_adopts_winner(self, build_orchestrator, printavo, activity_log, shop, make_order):
        """Debe adoptar la cotización ganadora cuando otro intento registró primero."""
        winner = OrderMapping(
            shop=shop, shopify_order_id="5001", printavo_quote_id="quote-winner", printavo_contact_id="c-1"
        )
        racing = RacingLedger(winner)

        outcome = await build_orchestrator(ledger=racing).reconcile(shop, make_order())

        assert outcome.success
        assert outcome.quote_id == "quote-winner"
        assert outcome.message == "Order synced successfully (concurrent webhook detected). Quote ID: quote-winner"
        assert "quoteCreate" in printavo.calls
        assert racing.record_calls == 1
        assert activity_log.records[0].status == SyncStatus.SYNCED


class TestPolicyOutcomes:
    @pytest.mark.asyncio
    async def test_excluded_tag_is_skipped(self, orchestrator, printavo, ledger, activity_log, shop, make_order):
        """Debe omitir el pedido con la etiqueta de exclusión sin tocar Printavo."""
        outcome = await orchestrator.reconcile(shop, make_order(tags="vip, no-printavo"))

        assert outcome.success is False
        assert outcome.status == SyncStatus.SKIPPED
        assert outcome.message == 'Order skipped: excluded by tag "no-printavo"'
        assert outcome.quote_id is None
        assert printavo.calls == []
        assert ledger.rows == {}
        assert activity_log.records[0].status == SyncStatus.SKIPPED

    @pytest.mark.asyncio
    async def test_custom_exclude_tag(self, orchestrator, policy_store, printavo, shop, make_order):
        """Debe omitir un pedido con la etiqueta no-sync configurada por el comerciante."""
        policy_store.policies[shop] = MerchantPolicy(exclude_tag="no-sync", api_credential="merchant-key")

        outcome = await orchestrator.reconcile(shop, make_order(tags="no-sync"))

        assert outcome.status == SyncStatus.SKIPPED
        assert outcome.message == 'Order skipped: excluded by tag "no-sync"'
        assert printavo.calls == []

    @pytest.mark.asyncio
    async def test_sync_disabled_is_skipped(self, orchestrator, policy_store, shop, make_order):
        """Debe omitir cuando el comerciante deshabilitó la sincronización."""
        policy_store.policies[shop] = MerchantPolicy(sync_enabled=False, api_credential="merchant-key")

        outcome = await orchestrator.reconcile(shop, make_order())

        assert outcome.status == SyncStatus.SKIPPED
        assert outcome.message == "Sync is disabled"

    @pytest.mark.asyncio
    async def test_misconfigured_policy_fails(self, orchestrator, policy_store, printavo, shop, make_order):
        """Debe fallar si el modo tagged no tiene etiquetas configuradas."""
        policy_store.policies[shop] = MerchantPolicy(sync_mode=SyncMode.TAGGED, api_credential="merchant-key")

        outcome = await orchestrator.reconcile(shop, make_order())

        assert outcome.status == SyncStatus.FAILED
        assert outcome.message == "No included tags configured for tagged sync mode"
        assert printavo.calls == []

    @pytest.mark.asyncio
    async def test_unknown_merchant(self, orchestrator, printavo, activity_log, make_order):
        """Debe fallar con 'Merchant not found' y aun así auditar el intento."""
        outcome = await orchestrator.reconcile("unknown.myshopify.com", make_order())

        assert outcome.status == SyncStatus.FAILED
        assert outcome.message == "Merchant not found"
        assert printavo.calls == []
        assert activity_log.records[0].shop == "unknown.myshopify.com"


class TestFailures:
    @pytest.mark.asyncio
    async def test_missing_email(self, orchestrator, printavo, ledger, shop, make_order):
        """Debe fallar antes de llamar a Printavo si el pedido no tiene email."""
        order = make_order(email=None, customer=None, billing_address=None)

        outcome = await orchestrator.reconcile(shop, order)

        assert outcome.status == SyncStatus.FAILED
        assert outcome.message == "Failed to sync: Order must have a customer email"
        assert printavo.calls == []
        assert ledger.rows == {}

    @pytest.mark.asyncio
    async def test_no_eligible_items(self, orchestrator, printavo, shop, make_order, make_line_item):
        """Debe fallar si todos los artículos fueron filtrados."""
        order = make_order(line_items=(make_line_item(product_type="Gift Card"),))

        outcome = await orchestrator.reconcile(shop, order)

        assert outcome.message == "Failed to sync: No valid line items to sync after filtering"
        assert printavo.calls == []

    @pytest.mark.asyncio
    async def test_quote_failure_no_mapping(self, orchestrator, printavo, ledger, activity_log, shop, make_order):
        """Debe fallar sin registrar el mapeo si quoteCreate devuelve errores."""
        printavo.quote_errors = [{"message": "dueAt is invalid"}]

        outcome = await orchestrator.reconcile(shop, make_order())

        assert outcome.status == SyncStatus.FAILED
        assert outcome.message.startswith("Failed to sync: Quote creation failed:")
        assert "dueAt is invalid" in outcome.message
        assert printavo.calls == ["contacts", "customerCreate", "quoteCreate"]
        assert ledger.rows == {}
        assert ledger.record_calls == 0
        assert activity_log.records[0].status == SyncStatus.FAILED

    @pytest.mark.asyncio
    async def test_customer_failure_stops_before_quote(self, orchestrator, printavo, shop, make_order):
        """Debe fallar sin crear la cotización si customerCreate falla."""
        printavo.customer_errors = [{"message": "email is invalid"}]

        outcome = await orchestrator.reconcile(shop, make_order())

        assert outcome.message.startswith("Failed to sync: Customer creation failed:")
        assert "quoteCreate" not in printavo.calls

    @pytest.mark.asyncio
    async def test_unexpected_store_error(self, build_orchestrator, activity_log, shop, make_order):
        """Debe convertir un error inesperado en un resultado fallido."""
        store = MagicMock()
        store.get_policy = AsyncMock(side_effect=RuntimeError("disk full"))

        outcome = await build_orchestrator(policy_store=store).reconcile(shop, make_order())

        assert outcome.status == SyncStatus.FAILED
        assert outcome.message == "Failed to sync: disk full"
        assert len(activity_log.records) == 1

    @pytest.mark.asyncio
    async def test_deadline_exceeded(self, build_orchestrator, activity_log, shop, make_order):
        """Debe fallar por timeout y registrar la actividad."""
        orchestrator = build_orchestrator(policy_store=SlowPolicyStore())

        outcome = await orchestrator.reconcile(shop, make_order(), deadline_seconds=0.05)

        assert outcome.status == SyncStatus.FAILED
        assert outcome.message == "Failed to sync: timed out after 0.05s"
        assert len(activity_log.records) == 1

    @pytest.mark.asyncio
    async def test_activity_failure_does_not_change_outcome(self, orchestrator, activity_log, shop, make_order):
        """Debe tolerar un fallo del registro de actividad."""
        activity_log.append = AsyncMock(side_effect=RuntimeError("audit store down"))

        outcome = await orchestrator.reconcile(shop, make_order())

        assert outcome.success
        assert outcome.quote_id == "quote-2"
        activity_log.append.assert_awaited_once()


class TestApiKeyResolution:
    @pytest.fixture
    def collaborators(self):
        resolver = MagicMock()
        resolver.resolve = AsyncMock(return_value=ContactResolution(contact_id="c-1", customer_id="cu-1"))
        builder = MagicMock()
        builder.build = AsyncMock(return_value=PrintavoQuote(id="q-1"))
        return resolver, builder

    @pytest.mark.asyncio
    async def test_merchant_key_preferred(self, build_orchestrator, collaborators, shop, make_order):
        """Debe usar la clave del comerciante cuando existe."""
        resolver, builder = collaborators
        orchestrator = build_orchestrator(contact_resolver=resolver, quote_builder=builder)

        await orchestrator.reconcile(shop, make_order())

        assert resolver.resolve.await_args.args[0] == "merchant-key"
        assert builder.build.await_args.args[0] == "merchant-key"

    @pytest.mark.asyncio
    async def test_falls_back_to_process_key(self, build_orchestrator, collaborators, policy_store, shop, make_order):
        """Debe usar la clave global si el comerciante no tiene una."""
        policy_store.policies[shop] = MerchantPolicy(api_credential="  ")
        resolver, builder = collaborators
        orchestrator = build_orchestrator(contact_resolver=resolver, quote_builder=builder)

        outcome = await orchestrator.reconcile(shop, make_order())

        assert outcome.success
        assert resolver.resolve.await_args.args == ("env-key", make_order(), "jane.doe@example.com")

    @pytest.mark.asyncio
    async def test_no_key_configured(self, build_orchestrator, collaborators, policy_store, shop, make_order):
        """Debe fallar sin llamar a Printavo si no hay ninguna clave."""
        policy_store.policies[shop] = MerchantPolicy()
        resolver, builder = collaborators
        orchestrator = build_orchestrator(contact_resolver=resolver, quote_builder=builder, config=SyncConfig())

        outcome = await orchestrator.reconcile(shop, make_order())

        assert outcome.status == SyncStatus.FAILED
        assert outcome.message == "Failed to sync: Printavo API key not configured"
        resolver.resolve.assert_not_awaited()
        builder.build.assert_not_awaited()
