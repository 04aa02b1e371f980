from .contact_resolver import ContactResolver, build_customer_input, resolve_order_email

__all__ = ["ContactResolver", "build_customer_input", "resolve_order_email"]
