"""
Order sync services package for Shopify to Printavo reconciliation.

This package contains the policy evaluator, field mappers, contact
resolver, quote builder and the orchestrator that coordinates them.
"""
