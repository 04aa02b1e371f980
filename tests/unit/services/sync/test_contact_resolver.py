"""Tests unitarios para ContactResolver."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from printavo_sync.api.v1.schemas.printavo_schemas import (
    PrintavoContact,
    PrintavoCustomer,
    PrintavoPrimaryContact,
)
from printavo_sync.db.printavo_client import PrintavoResult
from printavo_sync.domain.models import SourceAddress, SourceCustomer
from printavo_sync.services.sync.resolvers import ContactResolver, build_customer_input, resolve_order_email
from printavo_sync.utils.error_handler import (
    ContactCreationFailedException,
    MissingEmailException,
    PrintavoAPIException,
)


def contact(contact_id: str, *emails: str, customer_id: str | None = None) -> PrintavoContact:
    return PrintavoContact.model_validate(
        {
            "id": contact_id,
            "emails": [{"email": e} for e in emails],
            "customer": {"id": customer_id} if customer_id else None,
        }
    )


@pytest.fixture
def gateway():
    client = MagicMock()
    client.find_contacts_by_email = AsyncMock(return_value=PrintavoResult(data=[]))
    client.create_customer = AsyncMock(
        return_value=PrintavoResult(
            data=PrintavoCustomer(id="cust-1", primaryContact=PrintavoPrimaryContact(id="contact-1"))
        )
    )
    return client


class TestResolveOrderEmail:
    def test_order_email_normalized(self, make_order):
        """Debe usar el email del pedido en minúsculas y sin espacios."""
        assert resolve_order_email(make_order(email="  Jane.Doe@Example.COM ")) == "jane.doe@example.com"

    def test_falls_back_to_customer_email(self, make_order):
        """Debe usar el email del cliente si el pedido no tiene."""
        order = make_order(email=None, customer=SourceCustomer(email="Buyer@Shop.com"))

        assert resolve_order_email(order) == "buyer@shop.com"

    def test_falls_back_to_billing_email(self, make_order):
        """Debe usar el email de facturación como último recurso."""
        order = make_order(email="", customer=None, billing_address=SourceAddress(email="billing@shop.com"))

        assert resolve_order_email(order) == "billing@shop.com"

    def test_missing_email(self, make_order):
        """Debe lanzar MissingEmailException si no hay ningún email."""
        order = make_order(email=None, customer=SourceCustomer(email="  "), billing_address=None)

        with pytest.raises(MissingEmailException) as exc_info:
            resolve_order_email(order)

        assert exc_info.value.message == "Order must have a customer email"


class TestBuildCustomerInput:
    def test_billing_data_preferred(self, make_order):
        """Debe tomar nombre y teléfono de la dirección de facturación."""
        data = build_customer_input(make_order(), "jane.doe@example.com")

        assert data.primaryContact.firstName == "Jane"
        assert data.primaryContact.lastName == "Doe"
        assert data.primaryContact.email == "jane.doe@example.com"
        assert data.primaryContact.phone == "555-0100"
        assert data.companyName == "Jane Doe"
        assert data.internalNote == "Created from Shopify order #1001"
        assert data.billingAddress.state == "Texas"
        assert data.shippingAddress.state == "TX"

    def test_guest_defaults(self, make_order):
        """Debe usar 'Guest' y el email como empresa si no hay datos personales."""
        order = make_order(billing_address=None, shipping_address=None, customer=None, phone=None)

        data = build_customer_input(order, "anon@example.com")

        assert data.primaryContact.firstName == "Guest"
        assert data.primaryContact.lastName == ""
        assert data.companyName == "Guest"
        assert data.billingAddress is None

    def test_company_from_billing(self, make_order):
        """Debe preferir la empresa de facturación."""
        order = make_order(billing_address=SourceAddress(first_name="Al", company="Acme Printing"))

        assert build_customer_input(order, "al@acme.com").companyName == "Acme Printing"

    def test_phone_falls_back_to_order_then_customer(self, make_order):
        """Debe buscar el teléfono en facturación, luego pedido, luego cliente."""
        order = make_order(billing_address=SourceAddress(), phone=None, customer=SourceCustomer(phone="555-0199"))

        assert build_customer_input(order, "x@example.com").primaryContact.phone == "555-0199"


class TestContactResolver:
    @pytest.mark.asyncio
    async def test_existing_contact_reused(self, gateway, make_order):
        """Debe reutilizar el contacto existente sin crear cliente."""
        gateway.find_contacts_by_email.return_value = PrintavoResult(
            data=[contact("c-1", "other@example.com"), contact("c-2", "JANE.DOE@example.com", customer_id="cu-2")]
        )
        resolver = ContactResolver(gateway)

        result = await resolver.resolve("key", make_order(), "jane.doe@example.com")

        assert result.contact_id == "c-2"
        assert result.customer_id == "cu-2"
        assert result.is_new is False
        gateway.create_customer.assert_not_awaited()
        gateway.find_contacts_by_email.assert_awaited_once_with("key", "jane.doe@example.com")

    @pytest.mark.asyncio
    async def test_first_match_wins(self, gateway, make_order):
        """Debe elegir el primer contacto coincidente en el orden de la API."""
        gateway.find_contacts_by_email.return_value = PrintavoResult(
            data=[contact("c-1", "jane.doe@example.com"), contact("c-2", "jane.doe@example.com")]
        )

        result = await ContactResolver(gateway).resolve("key", make_order(), "jane.doe@example.com")

        assert result.contact_id == "c-1"

    @pytest.mark.asyncio
    async def test_creates_customer_when_no_match(self, gateway, make_order):
        """Debe crear cliente con contacto principal si ninguno coincide exactamente."""
        gateway.find_contacts_by_email.return_value = PrintavoResult(data=[contact("c-1", "jane@example.org")])

        result = await ContactResolver(gateway).resolve("key", make_order(), "jane.doe@example.com")

        assert result.contact_id == "contact-1"
        assert result.customer_id == "cust-1"
        assert result.is_new is True
        gateway.create_customer.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lookup_errors_raise(self, gateway, make_order):
        """Debe lanzar PrintavoAPIException si la búsqueda devuelve errores."""
        gateway.find_contacts_by_email.return_value = PrintavoResult(errors=[{"message": "Unauthorized"}])

        with pytest.raises(PrintavoAPIException) as exc_info:
            await ContactResolver(gateway).resolve("key", make_order(), "jane.doe@example.com")

        assert "Contact lookup failed" in exc_info.value.message
        gateway.create_customer.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_errors_raise(self, gateway, make_order):
        """Debe lanzar ContactCreationFailedException sin reintentar."""
        gateway.create_customer.return_value = PrintavoResult(errors=[{"message": "companyName invalid"}])

        with pytest.raises(ContactCreationFailedException) as exc_info:
            await ContactResolver(gateway).resolve("key", make_order(), "jane.doe@example.com")

        assert exc_info.value.errors == [{"message": "companyName invalid"}]
        assert gateway.create_customer.await_count == 1

    @pytest.mark.asyncio
    async def test_create_without_contact_id_raises(self, gateway, make_order):
        """Debe fallar si el cliente se crea sin contacto principal."""
        gateway.create_customer.return_value = PrintavoResult(data=PrintavoCustomer(id="cust-1"))

        with pytest.raises(ContactCreationFailedException) as exc_info:
            await ContactResolver(gateway).resolve("key", make_order(), "jane.doe@example.com")

        assert exc_info.value.message == "Customer created but no contact ID returned"
