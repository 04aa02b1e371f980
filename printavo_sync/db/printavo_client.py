"""
Printavo v2 GraphQL client.

One aiohttp session is shared by every merchant; the API key travels with
each call as a Bearer token. GraphQL-level errors are returned to the caller
in a PrintavoResult, while transport failures, non-2xx responses and
malformed bodies raise PrintavoAPIException.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

import aiohttp
from aiohttp import ClientTimeout
from pydantic import BaseModel, ValidationError

from printavo_sync.api.v1.schemas.printavo_schemas import (
    CustomerCreateInput,
    PrintavoContact,
    PrintavoCustomer,
    PrintavoQuote,
    QuoteCreateInput,
)
from printavo_sync.db.printavo_queries import (
    CONNECTION_TEST_QUERY,
    CREATE_CUSTOMER_MUTATION,
    CREATE_QUOTE_MUTATION,
    FIND_CONTACT_BY_EMAIL_QUERY,
)
from printavo_sync.utils.error_handler import PrintavoAPIException

logger = logging.getLogger(__name__)

T = TypeVar("T")
ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_RETRY_AFTER_SECONDS = 2.0


@dataclass
class PrintavoResult(Generic[T]):
    """Parsed GraphQL response: data and/or the raw `errors` array."""

    data: Optional[T] = None
    errors: List[Any] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class PrintavoClient:
    """
    Async client for the Printavo GraphQL API.

    Only HTTP 429 is retried (honoring Retry-After). Mutations are never
    retried on any other failure because Printavo creates are not idempotent.
    """

    def __init__(self, api_url: str, timeout: int = 30, max_retries: int = 3):
        self.api_url = api_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.session: Optional[aiohttp.ClientSession] = None

    async def initialize(self):
        """Create the HTTP session."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=ClientTimeout(total=self.timeout, connect=10),
                connector=aiohttp.TCPConnector(limit=100, limit_per_host=30),
                headers={"Content-Type": "application/json"},
            )
            logger.info(f"Initialized Printavo client for {self.api_url}")

    async def close(self):
        """Close the HTTP session and clean up resources."""
        if self.session:
            await self.session.close()
            self.session = None
            logger.info("Printavo client closed")

    async def _execute(
        self, api_key: str, query: str, variables: Optional[Dict[str, Any]] = None, operation: str = "query"
    ) -> Dict[str, Any]:
        """
        POST a GraphQL document and return the decoded body.

        Raises:
            PrintavoAPIException: On transport errors, non-2xx status,
                exhausted 429 retries or a body that is not a JSON object
        """
        if self.session is None:
            await self.initialize()

        payload = {"query": query, "variables": variables or {}}
        headers = {"Authorization": f"Bearer {api_key}"}

        for attempt in range(self.max_retries + 1):
            try:
                async with self.session.post(self.api_url, json=payload, headers=headers) as response:
                    if response.status == 429:
                        if attempt >= self.max_retries:
                            raise PrintavoAPIException(
                                "Printavo rate limit exceeded",
                                operation=operation,
                                api_response_code=429,
                                rate_limited=True,
                            )
                        retry_after = _parse_retry_after(response.headers.get("Retry-After"))
                        logger.warning(
                            f"Printavo rate limit on {operation}, waiting {retry_after}s (attempt {attempt + 1})"
                        )
                        await asyncio.sleep(retry_after)
                        continue

                    if not 200 <= response.status < 300:
                        raise PrintavoAPIException(
                            f"Printavo API error: {response.status} {response.reason or ''}".strip(),
                            operation=operation,
                            api_response_code=response.status,
                        )

                    try:
                        body = await response.json(content_type=None)
                    except (json.JSONDecodeError, ValueError) as e:
                        raise PrintavoAPIException(
                            f"Malformed response from Printavo: {e}",
                            operation=operation,
                            api_response_code=response.status,
                        ) from e

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise PrintavoAPIException(
                    f"Network error calling Printavo: {type(e).__name__}: {e}", operation=operation
                ) from e

            if not isinstance(body, dict):
                raise PrintavoAPIException("Malformed response from Printavo: expected an object", operation=operation)

            if body.get("errors"):
                logger.debug(f"Printavo {operation} returned errors: {body['errors']}")
            return body

        # range() always runs at least once; the last 429 raises above
        raise PrintavoAPIException("Printavo request failed", operation=operation)

    async def find_contacts_by_email(self, api_key: str, email: str) -> PrintavoResult[List[PrintavoContact]]:
        """Search primary contacts matching an email (at most 5, in API order)."""
        body = await self._execute(api_key, FIND_CONTACT_BY_EMAIL_QUERY, {"q": email}, operation="contacts")
        nodes = _dig(body, "data", "contacts", "nodes") or []
        contacts = [_parse_model(PrintavoContact, node, "contacts") for node in nodes]
        return PrintavoResult(data=contacts, errors=body.get("errors") or [])

    async def create_customer(self, api_key: str, data: CustomerCreateInput) -> PrintavoResult[PrintavoCustomer]:
        """Create a customer together with its primary contact."""
        body = await self._execute(
            api_key, CREATE_CUSTOMER_MUTATION, {"input": data.to_variables()}, operation="customerCreate"
        )
        customer = _dig(body, "data", "customerCreate", "customer")
        return PrintavoResult(
            data=_parse_model(PrintavoCustomer, customer, "customerCreate") if customer else None,
            errors=body.get("errors") or [],
        )

    async def create_quote(self, api_key: str, data: QuoteCreateInput) -> PrintavoResult[PrintavoQuote]:
        """Create a quote with its line item groups."""
        body = await self._execute(
            api_key, CREATE_QUOTE_MUTATION, {"input": data.to_variables()}, operation="quoteCreate"
        )
        quote = _dig(body, "data", "quoteCreate", "quote")
        return PrintavoResult(
            data=_parse_model(PrintavoQuote, quote, "quoteCreate") if quote else None,
            errors=body.get("errors") or [],
        )

    async def test_connection(self, api_key: str) -> Dict[str, Any]:
        """
        Validate an API key.

        Returns:
            Dict: {"success": bool, "message": str}
        """
        try:
            body = await self._execute(api_key, CONNECTION_TEST_QUERY, operation="connectionTest")
        except PrintavoAPIException as e:
            if e.api_response_code in (401, 403):
                return {"success": False, "message": "Invalid API key"}
            return {"success": False, "message": f"Connection error: {e.message}"}

        if body.get("errors"):
            return {"success": False, "message": f"API Error: {json.dumps(body['errors'])}"}
        return {"success": True, "message": "Connection successful"}

    def __repr__(self):
        return f"PrintavoClient(api_url='{self.api_url}', initialized={self.session is not None})"


def _parse_retry_after(value: Optional[str]) -> float:
    try:
        return max(float(value), 0.0) if value else DEFAULT_RETRY_AFTER_SECONDS
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS


def _dig(body: Dict[str, Any], *keys: str) -> Any:
    current: Any = body
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _parse_model(model: Type[ModelT], payload: Any, operation: str) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise PrintavoAPIException(
            f"Malformed {operation} response from Printavo: {e.error_count()} invalid field(s)",
            operation=operation,
        ) from e
