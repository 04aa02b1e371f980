"""PolicyEvaluator service - decides whether an order syncs at all."""

import logging

from printavo_sync.domain.models import Decision, MerchantPolicy, SourceOrder, SyncMode

logger = logging.getLogger(__name__)


def parse_order_tags(raw: str | None) -> set[str]:
    """Split Shopify's comma-joined tag string into a set of lowercased tags."""
    if not raw:
        return set()
    return {tag.strip().lower() for tag in raw.split(",") if tag.strip()}


class PolicyEvaluator:
    """
    Applies a merchant's include/exclude rules to an order.

    Pure and total: every input yields a Decision. Rules are checked in
    order and the first one that matches decides.
    """

    def evaluate(self, policy: MerchantPolicy, order: SourceOrder) -> Decision:
        try:
            return self._evaluate(policy, order)
        except Exception as e:
            logger.error(f"Policy evaluation failed for order {getattr(order, 'id', 'unknown')}: {e}")
            return Decision.misconfigured(f"Could not evaluate sync rules: {e}")

    def _evaluate(self, policy: MerchantPolicy, order: SourceOrder) -> Decision:
        if not policy.sync_enabled:
            return Decision.reject("Sync is disabled")

        tags = parse_order_tags(order.tags)

        exclude_tag = (policy.exclude_tag or "").strip().lower()
        if exclude_tag and exclude_tag in tags:
            return Decision.reject(f'Order skipped: excluded by tag "{exclude_tag}"')

        include_tag = (policy.include_tag or "").strip().lower()
        if policy.require_include_tag and include_tag and include_tag not in tags:
            return Decision.reject(f'Order skipped: missing required tag "{include_tag}"')

        if policy.sync_mode == SyncMode.TAGGED:
            included = {tag.strip().lower() for tag in policy.included_tags if tag.strip()}
            if not included:
                return Decision.misconfigured("No included tags configured for tagged sync mode")
            if not tags & included:
                return Decision.reject("Order does not have required tags")

        return Decision.allow()
