"""SQLite schema and helpers for the reconciled product store."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

from stocksync.config import DB_PATH
from stocksync.logging_config import get_logger
from stocksync.models import ProductRecord

__all__ = [
    "get_connection",
    "init_db",
    "reset_db",
    "upsert_product",
    "get_record_count",
    "get_stock_rows",
    "get_cost_by_nm_id",
    "get_all_records",
]

logger = get_logger("db")


@contextmanager
def get_connection(db_path: str = DB_PATH) -> Generator[sqlite3.Connection, None, None]:
    """Context manager for database connections."""
    parent = Path(db_path).parent
    if str(parent) not in ("", "."):
        parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    conn.execute("""
        CREATE TABLE IF NOT EXISTS products (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            nm_id INTEGER,
            vendor_code TEXT,
            pack_size INTEGER,
            product_key TEXT,
            sku TEXT,
            available_count INTEGER,
            cost INTEGER,
            UNIQUE (product_key, pack_size)
        )
    """)
    conn.execute("CREATE INDEX IF NOT EXISTS idx_products_nm_id ON products(nm_id)")
    conn.commit()


def init_db(db_path: str = DB_PATH) -> None:
    """Initialize the database schema."""
    with get_connection(db_path) as conn:
        _create_schema(conn)
    logger.info("Table products checked/created.")


def reset_db(db_path: str = DB_PATH) -> None:
    """Drop the previous run's store and create an empty one."""
    path = Path(db_path)
    if path.exists():
        path.unlink()
        logger.info(f"Old database removed: {db_path}")
    init_db(db_path)


def upsert_product(conn: sqlite3.Connection, record: ProductRecord) -> None:
    """Insert a record, or overwrite the row with the same (product_key, pack_size)."""
    conn.execute("""
        INSERT INTO products (
            nm_id, vendor_code, pack_size, product_key, sku, available_count, cost)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(product_key, pack_size) DO UPDATE SET
            nm_id = excluded.nm_id,
            vendor_code = excluded.vendor_code,
            sku = excluded.sku,
            available_count = excluded.available_count,
            cost = excluded.cost
    """, (record.nm_id, record.vendor_code, record.pack_size, record.product_key,
          record.sku, record.available_count, record.cost))
    conn.commit()


def get_record_count(db_path: str = DB_PATH) -> int:
    with get_connection(db_path) as conn:
        return conn.execute("SELECT COUNT(*) AS count FROM products").fetchone()["count"]


def get_stock_rows(db_path: str = DB_PATH) -> List[Dict[str, Any]]:
    """Rows eligible for a stock push (those with a SKU)."""
    with get_connection(db_path) as conn:
        cursor = conn.execute("""
            SELECT vendor_code, sku, pack_size, available_count
            FROM products
            WHERE sku IS NOT NULL
            ORDER BY id
        """)
        return [dict(row) for row in cursor.fetchall()]


def get_cost_by_nm_id(conn: sqlite3.Connection, nm_id: int) -> Optional[int]:
    """Cost of the first row stored for a card id, or None."""
    row = conn.execute(
        "SELECT cost FROM products WHERE nm_id = ? ORDER BY id LIMIT 1", (nm_id,)
    ).fetchone()
    return row["cost"] if row else None


def get_all_records(db_path: str = DB_PATH) -> List[ProductRecord]:
    with get_connection(db_path) as conn:
        cursor = conn.execute("SELECT * FROM products ORDER BY id")
        return [
            ProductRecord(
                id=row["id"],
                nm_id=row["nm_id"],
                vendor_code=row["vendor_code"],
                pack_size=row["pack_size"],
                product_key=row["product_key"],
                sku=row["sku"],
                available_count=row["available_count"],
                cost=row["cost"],
            )
            for row in cursor.fetchall()
        ]
