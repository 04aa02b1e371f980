"""
Value objects for the domain layer.

Value objects are immutable objects that represent concepts
with no conceptual identity, only defined by their attributes.
"""

from .line_item_size import DEFAULT_SIZE, LineItemSize, SizeResolution

__all__ = ["DEFAULT_SIZE", "LineItemSize", "SizeResolution"]
