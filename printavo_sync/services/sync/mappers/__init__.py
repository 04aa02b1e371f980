from .field_mapper import FieldMapper, QuoteDraft, filter_line_items, is_line_item_eligible, map_address
from .size_mapper import extract_size_token, is_size_token, normalize_size, resolve_size

__all__ = [
    "FieldMapper",
    "QuoteDraft",
    "extract_size_token",
    "filter_line_items",
    "is_line_item_eligible",
    "is_size_token",
    "map_address",
    "normalize_size",
    "resolve_size",
]
