"""
LineItemSize value object.

Printavo accepts a fixed enumeration of size codes on each line item.
SizeResolution records which code a raw size token mapped to, and whether
the mapping fell back to the medium default.
"""

from dataclasses import dataclass
from enum import Enum


class LineItemSize(str, Enum):
    """Printavo LineItemSize enum values."""

    OSFA = "OSFA"  # One Size Fits All
    XXXXS = "XXXXS"
    XXXS = "XXXS"
    XXS = "XXS"
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"
    XXXL = "XXXL"
    XXXXL = "XXXXL"
    XXXXXL = "XXXXXL"
    TODDLER_2T = "_2T"
    TODDLER_3T = "_3T"
    TODDLER_4T = "_4T"
    TODDLER_5T = "_5T"
    CHILD_6 = "_6"
    CHILD_8 = "_8"
    CHILD_10 = "_10"
    CHILD_12 = "_12"
    CHILD_14 = "_14"
    CHILD_16 = "_16"
    CHILD_18 = "_18"
    YOUTH_S = "YOUTH_S"
    YOUTH_M = "YOUTH_M"
    YOUTH_L = "YOUTH_L"
    YOUTH_XL = "YOUTH_XL"


DEFAULT_SIZE = LineItemSize.M


@dataclass(frozen=True)
class SizeResolution:
    """
    Result of normalizing a raw size token.

    Attributes:
        raw_token: Token as extracted from the line item
        size: Canonical Printavo size code
        is_fallback: True when nothing matched and the medium default was used
    """

    raw_token: str
    size: LineItemSize
    is_fallback: bool = False
