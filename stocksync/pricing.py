"""Cost calculation and stock amount rules."""

import math
from typing import Dict, Tuple, Union

from stocksync.logging_config import get_logger
from stocksync.models import RawScrape, ScrapeResult

__all__ = [
    "ParseError",
    "STOCK_AMOUNT_TABLE",
    "parse_price",
    "parse_int",
    "parse_scrape",
    "compute_cost",
    "fixed_cost",
    "calc_amount",
]

logger = get_logger("pricing")


class ParseError(ValueError):
    """Raised when a price or count is not numeric."""
    pass


# (pack_size, availability_level) -> units we can ship
STOCK_AMOUNT_TABLE: Dict[Tuple[int, int], int] = {
    (100, 5): 1,
    (50, 5): 1,
    (30, 5): 2,
    (10, 5): 5,
    (30, 4): 1,
    (10, 4): 3,
    (1, 5): 5,
    (3, 5): 3,
    (5, 5): 2,
}


def parse_price(text: str) -> float:
    """Parse a decimal price string such as '15.50'."""
    if text is None:
        raise ParseError("price is missing")
    cleaned = str(text).strip()
    try:
        value = float(cleaned)
    except ValueError as e:
        raise ParseError(f"price is not numeric: {text!r}") from e
    if math.isnan(value) or math.isinf(value):
        raise ParseError(f"price is not a finite number: {text!r}")
    return value


def parse_int(text: str) -> int:
    try:
        return int(str(text).strip())
    except (TypeError, ValueError) as e:
        raise ParseError(f"not an integer: {text!r}") from e


def parse_scrape(raw: RawScrape) -> ScrapeResult:
    """Convert raw page text into a typed ScrapeResult.

    An unparseable price raises ParseError. An unparseable availability
    is logged and counted as 0.
    """
    price = parse_price(raw.price)
    try:
        available_count = parse_int(raw.available_count)
    except ParseError as e:
        logger.warning(f"Bad availability {raw.available_count!r}, using 0: {e}")
        available_count = 0
    return ScrapeResult(price=price, available_count=available_count)


def compute_cost(price: Union[str, float], multiplier: int) -> int:
    """Round the unit price UP to a whole number, then multiply.

    compute_cost("10.01", 3) == 33 and compute_cost("10.00", 3) == 30.

    Raises:
        ParseError: If price is not numeric
    """
    value = parse_price(price) if isinstance(price, str) else float(price)
    return int(math.ceil(value)) * int(multiplier)


def fixed_cost(price: int, pack_size: int) -> int:
    """Cost for the fixed-price family: plain multiply, no rounding."""
    return price * pack_size


def calc_amount(pack_size: int, available_count: int) -> int:
    """Map (pack size, availability level) to a shippable unit count.

    Pairs missing from STOCK_AMOUNT_TABLE ship nothing.
    """
    return STOCK_AMOUNT_TABLE.get((pack_size, available_count), 0)
