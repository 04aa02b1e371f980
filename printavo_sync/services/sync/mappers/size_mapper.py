"""
Size mapping from Shopify variant data to Printavo's LineItemSize enum.

Handles standard adult sizes (S, M, XL, 2XL...), youth sizes (Youth L, YM),
toddler sizes (2T-5T), numeric children's sizes (6-18) and one-size tokens
(OSFA, One Size, OS). Anything unrecognized maps to medium and is flagged
as a fallback.
"""

import logging
import re

from printavo_sync.domain.models import SourceLineItem
from printavo_sync.domain.value_objects import DEFAULT_SIZE, LineItemSize, SizeResolution

logger = logging.getLogger(__name__)

# Keys are normalized tokens: uppercase, alphanumerics only
DIRECT_SIZES: dict[str, LineItemSize] = {
    "OSFA": LineItemSize.OSFA,
    "ONESIZE": LineItemSize.OSFA,
    "OS": LineItemSize.OSFA,
    "XXXXS": LineItemSize.XXXXS,
    "XXXS": LineItemSize.XXXS,
    "XXS": LineItemSize.XXS,
    "XS": LineItemSize.XS,
    "S": LineItemSize.S,
    "SMALL": LineItemSize.S,
    "M": LineItemSize.M,
    "MEDIUM": LineItemSize.M,
    "L": LineItemSize.L,
    "LARGE": LineItemSize.L,
    "XL": LineItemSize.XL,
    "XXL": LineItemSize.XXL,
    "2XL": LineItemSize.XXL,
    "XXXL": LineItemSize.XXXL,
    "3XL": LineItemSize.XXXL,
    "XXXXL": LineItemSize.XXXXL,
    "4XL": LineItemSize.XXXXL,
    "XXXXXL": LineItemSize.XXXXXL,
    "5XL": LineItemSize.XXXXXL,
}

YOUTH_SIZES: dict[LineItemSize, LineItemSize] = {
    LineItemSize.S: LineItemSize.YOUTH_S,
    LineItemSize.M: LineItemSize.YOUTH_M,
    LineItemSize.L: LineItemSize.YOUTH_L,
    LineItemSize.XL: LineItemSize.YOUTH_XL,
}

TODDLER_SIZES: dict[str, LineItemSize] = {
    "2T": LineItemSize.TODDLER_2T,
    "3T": LineItemSize.TODDLER_3T,
    "4T": LineItemSize.TODDLER_4T,
    "5T": LineItemSize.TODDLER_5T,
}

NUMERIC_SIZES: dict[str, LineItemSize] = {
    "6": LineItemSize.CHILD_6,
    "8": LineItemSize.CHILD_8,
    "10": LineItemSize.CHILD_10,
    "12": LineItemSize.CHILD_12,
    "14": LineItemSize.CHILD_14,
    "16": LineItemSize.CHILD_16,
    "18": LineItemSize.CHILD_18,
}

YOUTH_KEYWORD = "YOUTH"
SIZE_LETTERS = frozenset("SMLX")
DEFAULT_SIZE_TOKEN = "M"

_NON_ALPHANUMERIC = re.compile(r"[^A-Z0-9]")


def _normalize_token(token: str) -> str:
    return _NON_ALPHANUMERIC.sub("", (token or "").strip().upper())


def is_size_token(part: str) -> bool:
    """
    Heuristic used to pick the size segment out of a variant title.

    "Red / XL" -> the "XL" segment; "Heather Grey" is not a size.
    """
    normalized = _normalize_token(part)
    if not normalized:
        return False
    if normalized in DIRECT_SIZES or normalized in TODDLER_SIZES or normalized in NUMERIC_SIZES:
        return True
    if YOUTH_KEYWORD in normalized:
        return True
    if set(normalized) <= SIZE_LETTERS:
        return True
    digits = normalized[:-1] if normalized.endswith("T") else normalized
    return digits.isdigit()


def extract_size_token(item: SourceLineItem) -> tuple[str, str]:
    """
    Extract the raw size string from a line item.

    Returns:
        tuple: (token, source) where source is "variant_title", "property" or "default"
    """
    if item.variant_title:
        parts = [part.strip() for part in item.variant_title.split("/")]
        for part in parts:
            if is_size_token(part):
                return part, "variant_title"
        if parts and parts[0]:
            return parts[0], "variant_title"

    for prop in item.properties:
        if "size" in prop.name.lower() and prop.value.strip():
            return prop.value, "property"

    return DEFAULT_SIZE_TOKEN, "default"


def _youth_size(normalized: str) -> LineItemSize | None:
    if YOUTH_KEYWORD in normalized:
        remainder = normalized.replace(YOUTH_KEYWORD, "")
    elif normalized.startswith("Y"):
        remainder = normalized[1:]
    else:
        return None
    adult = DIRECT_SIZES.get(remainder)
    if adult in YOUTH_SIZES:
        return YOUTH_SIZES[adult]
    if YOUTH_KEYWORD not in normalized:
        return None
    # "Youth XS" -> YOUTH_S, "Youth 2XL" -> YOUTH_XL
    if "S" in remainder:
        return LineItemSize.YOUTH_S
    if "M" in remainder:
        return LineItemSize.YOUTH_M
    if "L" in remainder and "XL" not in remainder:
        return LineItemSize.YOUTH_L
    if "XL" in remainder:
        return LineItemSize.YOUTH_XL
    return None


def normalize_size(token: str) -> SizeResolution:
    """
    Map a raw size token to a Printavo size code.

    Deterministic: the same token always yields the same resolution.
    """
    normalized = _normalize_token(token)

    size = DIRECT_SIZES.get(normalized)
    if size is None:
        size = _youth_size(normalized)
    if size is None:
        size = TODDLER_SIZES.get(normalized) or NUMERIC_SIZES.get(normalized)

    if size is None:
        return SizeResolution(raw_token=token, size=DEFAULT_SIZE, is_fallback=True)
    return SizeResolution(raw_token=token, size=size)


def resolve_size(item: SourceLineItem) -> SizeResolution:
    """Extract and normalize the size of a line item."""
    token, source = extract_size_token(item)
    if source == "default":
        # no size information at all: medium is a guess, not a match
        return SizeResolution(raw_token="", size=DEFAULT_SIZE, is_fallback=True)

    resolution = normalize_size(token)
    if resolution.is_fallback:
        logger.warning(f"Unrecognized size {token!r} ({source}) on line item {item.name!r}, defaulting to M")
    return resolution
