"""QuoteBuilder service - submits a quote draft to Printavo."""

import logging

from printavo_sync.api.v1.schemas.printavo_schemas import PrintavoQuote
from printavo_sync.services.sync.interfaces import IPrintavoGateway
from printavo_sync.services.sync.mappers.field_mapper import QuoteDraft
from printavo_sync.utils.error_handler import QuoteCreationFailedException

logger = logging.getLogger(__name__)


class QuoteBuilder:
    """Creates quotes in Printavo (SRP: quote creation only)."""

    def __init__(self, printavo: IPrintavoGateway):
        self.printavo = printavo

    async def build(self, api_key: str, draft: QuoteDraft, contact_id: str) -> PrintavoQuote:
        """
        Create one quote with a single line item group.

        No cleanup is attempted on failure.

        Raises:
            QuoteCreationFailedException: If quoteCreate returns errors or no quote
        """
        quote_input = draft.to_input(contact_id)
        logger.debug(f"Creating Printavo quote {draft.nickname} with {len(draft.line_items)} line items")

        result = await self.printavo.create_quote(api_key, quote_input)
        if result.has_errors or result.data is None:
            raise QuoteCreationFailedException(f"Quote creation failed: {result.errors}", errors=result.errors)

        logger.info(f"Created Printavo quote {result.data.id} ({draft.nickname})")
        return result.data
