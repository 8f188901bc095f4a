"""Marketplace stock and price synchronization package."""

__version__ = "0.1.0"

# Re-export main components for convenient imports
from stocksync.config import DB_PATH, ConfigError, SyncConfig, load_credentials
from stocksync.db import get_connection, init_db, reset_db, upsert_product
from stocksync.models import ProductCard, ProductRecord, ScrapeResult
from stocksync.pipeline import ReconciliationPipeline, SKUCardinalityError, process
from stocksync.pricing import ParseError, calc_amount, compute_cost
from stocksync.vendor_codes import SourceKind, VendorCodeClassifier, VendorIdentity

__all__ = [
    # Version
    "__version__",
    # Config
    "DB_PATH",
    "ConfigError",
    "SyncConfig",
    "load_credentials",
    # Models
    "ProductCard",
    "ProductRecord",
    "ScrapeResult",
    "SourceKind",
    "VendorIdentity",
    # Core functions
    "VendorCodeClassifier",
    "compute_cost",
    "calc_amount",
    "ParseError",
    "ReconciliationPipeline",
    "SKUCardinalityError",
    "process",
    "get_connection",
    "init_db",
    "reset_db",
    "upsert_product",
]
