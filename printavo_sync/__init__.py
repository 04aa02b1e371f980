"""Shopify → Printavo order reconciliation service."""
