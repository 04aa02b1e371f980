from .quote_builder import QuoteBuilder

__all__ = ["QuoteBuilder"]
