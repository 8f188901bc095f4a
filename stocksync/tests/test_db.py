"""Tests for the product store."""

from pathlib import Path

from stocksync.db import (
    get_all_records,
    get_connection,
    get_cost_by_nm_id,
    get_record_count,
    get_stock_rows,
    init_db,
    reset_db,
    upsert_product,
)
from stocksync.models import ProductRecord


def _record(**overrides) -> ProductRecord:
    values = dict(
        nm_id=1,
        vendor_code="box_77_20",
        pack_size=20,
        product_key="77",
        sku="sku-1",
        available_count=3,
        cost=320,
    )
    values.update(overrides)
    return ProductRecord(**values)


class TestSchema:

    def test_init_db_creates_products_table(self, temp_db):
        with get_connection(temp_db) as conn:
            row = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name='products'"
            ).fetchone()
        assert row is not None

    def test_init_db_is_idempotent(self, temp_db):
        init_db(temp_db)
        assert get_record_count(temp_db) == 0

    def test_reset_db_drops_previous_rows(self, temp_db):
        with get_connection(temp_db) as conn:
            upsert_product(conn, _record())
        assert get_record_count(temp_db) == 1

        reset_db(temp_db)

        assert Path(temp_db).exists()
        assert get_record_count(temp_db) == 0

    def test_reset_db_creates_missing_file(self, tmp_path):
        db_path = str(tmp_path / "fresh.db")
        reset_db(db_path)
        assert get_record_count(db_path) == 0


class TestUpsert:
    """One row per (product_key, pack_size); the latest write wins."""

    def test_insert(self, temp_db, db_conn):
        upsert_product(db_conn, _record())

        records = get_all_records(temp_db)
        assert len(records) == 1
        assert records[0].pack_size == 20
        assert records[0].cost == 320
        assert records[0].id is not None

    def test_same_record_twice_leaves_one_row(self, temp_db, db_conn):
        upsert_product(db_conn, _record())
        upsert_product(db_conn, _record())
        assert get_record_count(temp_db) == 1

    def test_second_write_wins(self, temp_db, db_conn):
        upsert_product(db_conn, _record())
        upsert_product(db_conn, _record(nm_id=2, vendor_code="bubblebags_977_20",
                                        sku="sku-2", available_count=5, cost=400))

        records = get_all_records(temp_db)
        assert len(records) == 1
        assert records[0].nm_id == 2
        assert records[0].vendor_code == "bubblebags_977_20"
        assert records[0].sku == "sku-2"
        assert records[0].available_count == 5
        assert records[0].cost == 400

    def test_different_pack_sizes_are_separate_rows(self, temp_db, db_conn):
        upsert_product(db_conn, _record(pack_size=10, cost=160))
        upsert_product(db_conn, _record(pack_size=20, cost=320))
        assert get_record_count(temp_db) == 2


class TestQueries:

    def test_get_stock_rows(self, temp_db, db_conn):
        upsert_product(db_conn, _record())
        upsert_product(db_conn, _record(product_key="88", sku=None))

        rows = get_stock_rows(temp_db)
        assert rows == [{
            "vendor_code": "box_77_20",
            "sku": "sku-1",
            "pack_size": 20,
            "available_count": 3,
        }]

    def test_get_cost_by_nm_id(self, db_conn):
        upsert_product(db_conn, _record(nm_id=500, product_key="500", pack_size=3, cost=120))
        assert get_cost_by_nm_id(db_conn, 500) == 120
        assert get_cost_by_nm_id(db_conn, 501) is None
