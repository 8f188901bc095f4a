"""Configuration and constants for the stock sync."""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

__all__ = [
    "CONTENT_API_URL",
    "STOCKS_API_URL",
    "OZON_STOCKS_API_URL",
    "CATALOG_BASE_URL",
    "WAREHOUSE_ID",
    "BATCH_SIZE",
    "REQUEST_LIMIT",
    "OZON_BATCH_SIZE",
    "CARDS_PAGE_LIMIT",
    "CONTENT_API_TIMEOUT",
    "OZON_API_TIMEOUT",
    "PAGE_SETTLE_SECONDS",
    "OBJECT_IDS",
    "FIXED_PRICE_PATTERNS",
    "SCRAPED_A_PATTERNS",
    "SCRAPED_B_PATTERNS",
    "LEGACY_PATTERNS",
    "SCRAPE_SELECTORS",
    "IN_STOCK_LABEL",
    "DB_PATH",
    "URLS_CSV_PATH",
    "DOWNLOAD_CSV_PATH",
    "XLSX_PATH",
    "XLSX_SHEET_NAME",
    "ConfigError",
    "Credentials",
    "OzonCredentials",
    "SyncConfig",
    "load_credentials",
    "load_ozon_credentials",
]


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


# External endpoints
CONTENT_API_URL = "https://content-api.wildberries.ru/content/v2/get/cards/list"
STOCKS_API_URL = "https://marketplace-api.wildberries.ru/api/v3/stocks/{warehouse_id}"
OZON_STOCKS_API_URL = "https://api-seller.ozon.ru/v2/products/stocks"
CATALOG_BASE_URL = "https://sp.cargo-avto.ru/catalog/"

WAREHOUSE_ID = 1283008

# Stock push batching
BATCH_SIZE = 1000
REQUEST_LIMIT = 300  # requests per minute
OZON_BATCH_SIZE = 100

# Content API
CARDS_PAGE_LIMIT = 100
CONTENT_API_TIMEOUT = 10
OZON_API_TIMEOUT = 15

# Browser waits (in seconds)
PAGE_SETTLE_SECONDS = 2.0

# Marketplace subject (category) ids to sync
OBJECT_IDS: List[int] = [
    802, 1349, 1385, 1673, 1736, 1763, 1881, 1884, 2191, 2192, 2348, 2447,
    2798, 3148, 3900, 3979, 3756, 4063, 4097, 5485, 7205, 7206, 7246, 7045,
    7048, 7053,
]

# =============================================================================
# Vendor code families
# =============================================================================
# Checked in order: fixed price, scraped B, scraped A, legacy. First match wins.

FIXED_PRICE_PATTERNS: List[str] = [
    r"^growme[cp]?t?_\d+$",
    r"^soil_\d+_\d+$",
    r"^yant_\d+_\d+$",
    r"^sunterra_\d+_\d+$",
    r"^kormilitsa_\d+_\d+$",
    r"^fertilizer_\d+_\d+$",
    r"^f_\d+_\d+$",
    r"^korennik_\d+_\d+$",
]

SCRAPED_B_PATTERNS: List[str] = [
    r"^bubblebags_1\d+_\d+$",
]

SCRAPED_A_PATTERNS: List[str] = [
    r"^box_\d+_\d+$",
]

LEGACY_PATTERNS: List[str] = [
    r"^box_\d+_\d+$",
    r"^bubblebags_9\d+_\d+$",
    r"^bubblebags_1\d+_\d+$",
]

# Page selectors per scrape strategy
SCRAPE_SELECTORS: Dict[str, Dict[str, str]] = {
    "catalog": {
        "pickup_tab": 'li.tabs-item a[href="#samovivoz-tabs"]',
        "price": 'li[data-min="1"] .price-val',
        "available_store": ".avail-item-status.avail",
    },
    "bag": {
        "stock": "div.quantity span.stock",
        "price": 'button[data-count="1"] .col_right',
    },
}

IN_STOCK_LABEL = "В наличии"

# File paths (env overridable)
DB_PATH = os.getenv("STOCKSYNC_DB_PATH", "unit_ec.db")
URLS_CSV_PATH = os.getenv("STOCKSYNC_URLS_CSV", "urls.csv")
DOWNLOAD_CSV_PATH = os.getenv("STOCKSYNC_DOWNLOAD_CSV", "download.csv")
XLSX_PATH = os.getenv("STOCKSYNC_XLSX_PATH", "export_product_cost_data.xlsx")
XLSX_SHEET_NAME = "Sheet 1"


@dataclass
class SyncConfig:
    """Per-run settings for the reconciliation pipeline."""

    object_ids: List[int] = field(default_factory=lambda: list(OBJECT_IDS))
    fixed_price_patterns: List[str] = field(default_factory=lambda: list(FIXED_PRICE_PATTERNS))
    scraped_b_patterns: List[str] = field(default_factory=lambda: list(SCRAPED_B_PATTERNS))
    scraped_a_patterns: List[str] = field(default_factory=lambda: list(SCRAPED_A_PATTERNS))
    legacy_patterns: List[str] = field(default_factory=lambda: list(LEGACY_PATTERNS))
    db_path: str = DB_PATH
    # Read the pack size from the third vendor code segment
    use_pcs: bool = True
    # Abort the run when a scraped card does not resolve to exactly one SKU
    strict_sku_check: bool = True


@dataclass(frozen=True)
class Credentials:
    api_key: str


@dataclass(frozen=True)
class OzonCredentials:
    api_key: str
    client_id: str
    warehouse_id: int


def _require_env(names: List[str], environ: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    env = os.environ if environ is None else environ
    values = {name: env.get(name, "") for name in names}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigError(
            f"Missing required environment variables: {', '.join(missing)}"
        )
    return values


def load_credentials(environ: Optional[Dict[str, str]] = None) -> Credentials:
    """Read the marketplace API key from the environment.

    Raises:
        ConfigError: If WB_API_KEY is not set
    """
    values = _require_env(["WB_API_KEY"], environ)
    return Credentials(api_key=values["WB_API_KEY"])


def load_ozon_credentials(environ: Optional[Dict[str, str]] = None) -> OzonCredentials:
    """Read the alternate marketplace credentials from the environment.

    Raises:
        ConfigError: If a variable is missing or WAREHOUSE_ID is not an integer
    """
    values = _require_env(["OZON_API_KEY", "OZON_CLIENT_ID", "WAREHOUSE_ID"], environ)
    try:
        warehouse_id = int(values["WAREHOUSE_ID"])
    except ValueError as e:
        raise ConfigError(f"WAREHOUSE_ID must be an integer, got {values['WAREHOUSE_ID']!r}") from e
    return OzonCredentials(
        api_key=values["OZON_API_KEY"],
        client_id=values["OZON_CLIENT_ID"],
        warehouse_id=warehouse_id,
    )
