"""ContactResolver service - finds or creates the Printavo contact for an order."""

import logging

from printavo_sync.api.v1.schemas.printavo_schemas import ContactInput, CustomerCreateInput
from printavo_sync.domain.models import ContactResolution, SourceOrder
from printavo_sync.services.sync.interfaces import IPrintavoGateway
from printavo_sync.services.sync.mappers.field_mapper import map_address
from printavo_sync.utils.error_handler import (
    ContactCreationFailedException,
    MissingEmailException,
    PrintavoAPIException,
)

logger = logging.getLogger(__name__)

GUEST_FIRST_NAME = "Guest"


def resolve_order_email(order: SourceOrder) -> str:
    """
    Pick the order's email: order, then customer, then billing address.

    Raises:
        MissingEmailException: If none of them carries an email
    """
    candidates = [
        order.email,
        order.customer.email if order.customer else None,
        order.billing_address.email if order.billing_address else None,
    ]
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip().lower()
    raise MissingEmailException(order_id=order.id)


def build_customer_input(order: SourceOrder, email: str) -> CustomerCreateInput:
    """Build customerCreate input from the order's billing and customer data."""
    billing = order.billing_address
    customer = order.customer

    first_name = (billing and billing.first_name) or (customer and customer.first_name) or GUEST_FIRST_NAME
    last_name = (billing and billing.last_name) or (customer and customer.last_name) or ""
    phone = (billing and billing.phone) or order.phone or (customer and customer.phone) or None
    company = (billing and billing.company) or (customer and customer.company) or None

    return CustomerCreateInput(
        primaryContact=ContactInput(firstName=first_name, lastName=last_name, email=email, phone=phone),
        companyName=company or f"{first_name} {last_name}".strip() or email,
        billingAddress=map_address(billing),
        shippingAddress=map_address(order.shipping_address),
        internalNote=f"Created from Shopify order {order.display_name}",
    )


class ContactResolver:
    """Resolves or creates contacts in Printavo (SRP: contact management only)."""

    def __init__(self, printavo: IPrintavoGateway):
        """
        Initialize with the Printavo gateway (DIP).

        Args:
            printavo: Client for Printavo GraphQL operations
        """
        self.printavo = printavo

    async def resolve(self, api_key: str, order: SourceOrder, email: str) -> ContactResolution:
        """
        Find an existing primary contact by email, or create a customer.

        At most one create call is made and it is never retried.

        Raises:
            PrintavoAPIException: If the contact lookup fails
            ContactCreationFailedException: If customerCreate fails or returns no contact
        """
        lookup = await self.printavo.find_contacts_by_email(api_key, email)
        if lookup.has_errors:
            raise PrintavoAPIException(
                f"Contact lookup failed: {lookup.errors}",
                operation="contacts",
                errors=lookup.errors,
            )

        for contact in lookup.data or []:
            if contact.has_email(email):
                customer_id = contact.customer.id if contact.customer else None
                logger.debug(f"Found existing Printavo contact {contact.id} for {email}")
                return ContactResolution(contact_id=contact.id, customer_id=customer_id, is_new=False)

        return await self._create_customer(api_key, order, email)

    async def _create_customer(self, api_key: str, order: SourceOrder, email: str) -> ContactResolution:
        logger.info(f"No Printavo contact for {email}, creating customer for order {order.display_name}")
        result = await self.printavo.create_customer(api_key, build_customer_input(order, email))

        if result.has_errors or result.data is None:
            raise ContactCreationFailedException(f"Customer creation failed: {result.errors}", errors=result.errors)

        customer = result.data
        contact_id = customer.primaryContact.id if customer.primaryContact else None
        if not contact_id:
            raise ContactCreationFailedException("Customer created but no contact ID returned")

        logger.info(f"Created Printavo customer {customer.id} with contact {contact_id}")
        return ContactResolution(contact_id=contact_id, customer_id=customer.id, is_new=True)
