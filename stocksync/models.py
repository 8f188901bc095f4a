"""Data models for catalog cards, scraped quotes and persisted records."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

__all__ = [
    "ProductCard",
    "CatalogCursor",
    "CardsPage",
    "ProductRecord",
    "RawScrape",
    "ScrapeResult",
    "PriceQuantity",
    "StockItem",
]


def _require_object(value: Any, what: str) -> None:
    if not isinstance(value, dict):
        raise ValueError(f"{what} is not a JSON object: {type(value).__name__}")


@dataclass
class ProductCard:
    """One product card as returned by the content API."""

    nm_id: int
    vendor_code: str
    updated_at: str = ""
    # One list of SKU codes per size variant
    sizes: List[List[str]] = field(default_factory=list)

    @property
    def skus(self) -> List[str]:
        """All SKU codes across size variants, in API order."""
        return [sku for size in self.sizes for sku in size]

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ProductCard":
        """Raises ValueError if the card or one of its sizes is not an object."""
        _require_object(data, "card")
        sizes = []
        for size in data.get("sizes") or []:
            _require_object(size, "card size")
            sizes.append(list(size.get("skus") or []))
        return cls(
            nm_id=int(data.get("nmID") or 0),
            vendor_code=str(data.get("vendorCode") or ""),
            updated_at=str(data.get("updatedAt") or ""),
            sizes=sizes,
        )


@dataclass(frozen=True)
class CatalogCursor:
    """Pagination cursor of the content API."""

    updated_at: str = ""
    nm_id: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.updated_at == "" or self.nm_id == 0


@dataclass
class CardsPage:
    cards: List[ProductCard]
    cursor: CatalogCursor

    @classmethod
    def from_api(cls, data: Any) -> "CardsPage":
        """Build a page from a decoded cards/list response.

        Raises:
            ValueError: If the body, the cursor or a card is not a JSON object
        """
        _require_object(data, "cards/list response")
        cursor = data.get("cursor") or {}
        _require_object(cursor, "cursor")
        cards = data.get("cards") or []
        if not isinstance(cards, list):
            raise ValueError(f"cards is not a JSON array: {type(cards).__name__}")
        return cls(
            cards=[ProductCard.from_api(card) for card in cards],
            cursor=CatalogCursor(
                updated_at=str(cursor.get("updatedAt") or ""),
                nm_id=int(cursor.get("nmID") or 0),
            ),
        )


@dataclass
class ProductRecord:
    """A persisted row, unique on (product_key, pack_size)."""

    nm_id: int
    vendor_code: str
    pack_size: int
    product_key: str
    sku: str
    available_count: int
    cost: int

    # Database ID (set after reading back)
    id: Optional[int] = None


@dataclass(frozen=True)
class RawScrape:
    """Untyped text pulled off a scraped page."""

    price: str
    available_count: str


@dataclass(frozen=True)
class ScrapeResult:
    """Price and availability level validated at the acquisition boundary."""

    price: float
    available_count: int


@dataclass(frozen=True)
class PriceQuantity:
    """Fixed unit price and quantity for one card id."""

    price: int
    quantity: int


@dataclass
class StockItem:
    sku: Optional[str]
    vendor: str
    amount: int
