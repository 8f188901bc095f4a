"""Vendor code classification and identity extraction.

A vendor code such as ``box_4821_50`` encodes the product family, the
product key and the pack size as underscore-delimited segments. Cards are
classified by testing the code against ordered, anchored regex families;
the first family that matches decides how price and stock are acquired.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Pattern, Sequence, Tuple

from stocksync.config import SyncConfig

__all__ = [
    "SourceKind",
    "VendorIdentity",
    "VendorCodeError",
    "VendorCodeClassifier",
    "bag_lookup_key",
    "split_vendor_code",
    "parse_pack_size",
]

DELIMITER = "_"


class VendorCodeError(ValueError):
    """Raised when a vendor code has too few segments."""
    pass


class SourceKind(Enum):
    FIXED_PRICE = "fixed_price"
    SCRAPED_A = "scraped_a"
    SCRAPED_B = "scraped_b"
    LEGACY = "legacy"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class VendorIdentity:
    """Fields derived from a vendor code for one source family."""

    kind: SourceKind
    vendor_code: str
    product_key: str
    pack_size: int = 1
    # Reference table key, only set for the bag family
    lookup_key: Optional[str] = None


def split_vendor_code(vendor_code: str) -> List[str]:
    parts = vendor_code.split(DELIMITER)
    if len(parts) < 2:
        raise VendorCodeError(f"Invalid vendor code: {vendor_code!r}")
    return parts


def parse_pack_size(parts: Sequence[str]) -> int:
    """Pack size from the third segment, 1 when absent or not an integer."""
    if len(parts) > 2:
        try:
            return int(parts[2])
        except ValueError:
            return 1
    return 1


def bag_lookup_key(vendor_code: str) -> str:
    """Drop the trailing pack size segment: 'bag_19336_100' -> 'bag_19336'."""
    idx = vendor_code.rfind(DELIMITER)
    if idx == -1:
        return vendor_code
    return vendor_code[:idx]


def _compile(patterns: Sequence[str]) -> List[Pattern[str]]:
    return [re.compile(p) for p in patterns]


class VendorCodeClassifier:
    """Classify vendor codes and extract their identity fields."""

    def __init__(self, config: Optional[SyncConfig] = None):
        config = config or SyncConfig()
        self.use_pcs = config.use_pcs
        self._families: List[Tuple[SourceKind, List[Pattern[str]]]] = [
            (SourceKind.FIXED_PRICE, _compile(config.fixed_price_patterns)),
            (SourceKind.SCRAPED_B, _compile(config.scraped_b_patterns)),
            (SourceKind.SCRAPED_A, _compile(config.scraped_a_patterns)),
            (SourceKind.LEGACY, _compile(config.legacy_patterns)),
        ]

    def classify(self, vendor_code: str) -> SourceKind:
        for kind, patterns in self._families:
            if any(p.fullmatch(vendor_code) for p in patterns):
                return kind
        return SourceKind.UNCLASSIFIED

    def identify(self, vendor_code: str, nm_id: int) -> VendorIdentity:
        """Classify a vendor code and derive its identity.

        Raises:
            VendorCodeError: If the code has fewer than two segments
        """
        kind = self.classify(vendor_code)
        return self.extract(kind, vendor_code, nm_id)

    def extract(self, kind: SourceKind, vendor_code: str, nm_id: int) -> VendorIdentity:
        parts = split_vendor_code(vendor_code)

        if kind is SourceKind.FIXED_PRICE:
            # Fixed-price rows are keyed by card id; the pack size is always read
            return VendorIdentity(
                kind=kind,
                vendor_code=vendor_code,
                product_key=str(nm_id),
                pack_size=parse_pack_size(parts),
            )

        pack_size = parse_pack_size(parts) if self.use_pcs else 1
        lookup_key = bag_lookup_key(vendor_code) if kind is SourceKind.SCRAPED_B else None
        return VendorIdentity(
            kind=kind,
            vendor_code=vendor_code,
            product_key=parts[1],
            pack_size=pack_size,
            lookup_key=lookup_key,
        )
