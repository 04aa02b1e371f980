from .shopify_schemas import ShopifyOrderPayload

__all__ = ["ShopifyOrderPayload"]
