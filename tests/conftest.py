"""Fixtures compartidos: pedidos de ejemplo, dobles en memoria y base SQLite temporal."""

import asyncio
from datetime import UTC, datetime
from itertools import count

import pytest
import pytest_asyncio

from printavo_sync.api.v1.schemas.printavo_schemas import (
    PrintavoContact,
    PrintavoCustomer,
    PrintavoPrimaryContact,
    PrintavoQuote,
)
from printavo_sync.core.config import SyncConfig
from printavo_sync.db.connection import ConnDB
from printavo_sync.db.printavo_client import PrintavoResult
from printavo_sync.domain.models import (
    LedgerWriteResult,
    LedgerWriteStatus,
    LineItemProperty,
    MerchantPolicy,
    SourceAddress,
    SourceCustomer,
    SourceLineItem,
    SourceOrder,
)
from printavo_sync.services.sync.builders import QuoteBuilder
from printavo_sync.services.sync.orchestrator import OrderSyncOrchestrator
from printavo_sync.services.sync.resolvers import ContactResolver
from printavo_sync.utils.error_handler import MerchantNotFoundException

SHOP = "test-shop.myshopify.com"
FIXED_NOW = datetime(2025, 3, 10, 15, 30, tzinfo=UTC)


def build_line_item(**overrides) -> SourceLineItem:
    data = {
        "name": "Classic Tee",
        "price": "25.00",
        "quantity": 2,
        "sku": "TEE-001",
        "product_type": "T-Shirt",
        "requires_shipping": True,
        "variant_title": "L / Black",
        "taxable": True,
    }
    data.update(overrides)
    if "properties" in data:
        data["properties"] = tuple(LineItemProperty(name=n, value=v) for n, v in data["properties"])
    return SourceLineItem(**data)


def build_order(**overrides) -> SourceOrder:
    data = {
        "id": "5001",
        "name": "#1001",
        "order_number": "1001",
        "email": "Jane.Doe@Example.com",
        "tags": "",
        "financial_status": "paid",
        "created_at": "2025-03-10T09:30:00-05:00",
        "billing_address": SourceAddress(
            first_name="Jane",
            last_name="Doe",
            address1="1 Main St",
            city="Austin",
            province="Texas",
            province_code="TX",
            zip="73301",
            country_code="US",
            phone="555-0100",
        ),
        "shipping_address": SourceAddress(
            first_name="Jane",
            last_name="Doe",
            address1="1 Main St",
            city="Austin",
            province_code="TX",
            zip="73301",
            country_code="US",
        ),
        "customer": SourceCustomer(id="77", email="jane.doe@example.com", first_name="Jane", last_name="Doe"),
        "line_items": (build_line_item(),),
    }
    data.update(overrides)
    return SourceOrder(**data)


class InMemoryPolicyStore:
    def __init__(self, policies: dict | None = None):
        self.policies = dict(policies or {})

    async def get_policy(self, shop: str) -> MerchantPolicy:
        if shop not in self.policies:
            raise MerchantNotFoundException(shop)
        return self.policies[shop]


class InMemoryLedger:
    def __init__(self):
        self.rows = {}
        self.record_calls = 0

    async def lookup(self, shop, shopify_order_id):
        return self.rows.get((shop, str(shopify_order_id)))

    async def record(self, mapping):
        self.record_calls += 1
        key = (mapping.shop, str(mapping.shopify_order_id))
        if key in self.rows:
            return LedgerWriteResult(status=LedgerWriteStatus.ALREADY_EXISTS, mapping=self.rows[key])
        self.rows[key] = mapping
        return LedgerWriteResult(status=LedgerWriteStatus.CREATED, mapping=mapping)


class InMemoryActivityLog:
    def __init__(self):
        self.records = []

    async def append(self, record):
        self.records.append(record)


class FakePrintavo:
    """Printavo en memoria: registra cada llamada y numera los IDs creados."""

    def __init__(self, contacts: list[PrintavoContact] | None = None):
        self.contacts = list(contacts or [])
        self.calls: list[str] = []
        self.customer_inputs = []
        self.quote_inputs = []
        self.lookup_errors: list = []
        self.customer_errors: list = []
        self.quote_errors: list = []
        self._ids = count(1)

    async def find_contacts_by_email(self, api_key, email):
        self.calls.append("contacts")
        await asyncio.sleep(0)
        if self.lookup_errors:
            return PrintavoResult(data=None, errors=self.lookup_errors)
        return PrintavoResult(data=list(self.contacts))

    async def create_customer(self, api_key, data):
        self.calls.append("customerCreate")
        self.customer_inputs.append(data)
        await asyncio.sleep(0)
        if self.customer_errors:
            return PrintavoResult(data=None, errors=self.customer_errors)
        n = next(self._ids)
        return PrintavoResult(
            data=PrintavoCustomer(id=f"cust-{n}", primaryContact=PrintavoPrimaryContact(id=f"contact-{n}"))
        )

    async def create_quote(self, api_key, data):
        self.calls.append("quoteCreate")
        self.quote_inputs.append(data)
        await asyncio.sleep(0)
        if self.quote_errors:
            return PrintavoResult(data=None, errors=self.quote_errors)
        return PrintavoResult(data=PrintavoQuote(id=f"quote-{next(self._ids)}"))


@pytest.fixture
def shop():
    return SHOP


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def make_order():
    return build_order


@pytest.fixture
def make_line_item():
    return build_line_item


@pytest.fixture
def sync_config():
    return SyncConfig(default_api_key="env-key")


@pytest.fixture
def policy_store():
    return InMemoryPolicyStore({SHOP: MerchantPolicy(api_credential="merchant-key")})


@pytest.fixture
def ledger():
    return InMemoryLedger()


@pytest.fixture
def activity_log():
    return InMemoryActivityLog()


@pytest.fixture
def printavo():
    return FakePrintavo()


@pytest.fixture
def orchestrator(policy_store, ledger, activity_log, printavo, sync_config):
    return OrderSyncOrchestrator(
        policy_store=policy_store,
        ledger=ledger,
        activity_log=activity_log,
        contact_resolver=ContactResolver(printavo),
        quote_builder=QuoteBuilder(printavo),
        config=sync_config,
        clock=lambda: FIXED_NOW,
    )


@pytest_asyncio.fixture
async def conn_db(tmp_path):
    db = ConnDB(f"sqlite+aiosqlite:///{tmp_path / 'sync.db'}")
    await db.initialize()
    yield db
    await db.close()
