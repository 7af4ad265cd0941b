"""Tests for the sale ledger."""

from __future__ import annotations

from datetime import datetime

import pytest

from dealership.db.models import BikeStatus
from dealership.errors import NotFound, ValidationError
from dealership.services import analytics, inventory, ledger


class TestReadLedger:
    def test_list_newest_first(self, db, make_bike, sell_bike) -> None:
        older = sell_bike(make_bike(), sold_at=datetime(2024, 1, 10))
        newer = sell_bike(make_bike(), sold_at=datetime(2024, 3, 5))
        assert [s.id for s in ledger.list_sales(db)] == [newer.id, older.id]

    def test_list_filtered_by_year_and_month(self, db, make_bike, sell_bike) -> None:
        june = sell_bike(make_bike(), sold_at=datetime(2024, 6, 30, 23, 59))
        sell_bike(make_bike(), sold_at=datetime(2024, 7, 1))
        sell_bike(make_bike(), sold_at=datetime(2023, 6, 15))
        assert [s.id for s in ledger.list_sales(db, year=2024, month=5)] == [june.id]
        assert len(ledger.list_sales(db, year=2024)) == 2

    def test_december_window(self, db, make_bike, sell_bike) -> None:
        dec = sell_bike(make_bike(), sold_at=datetime(2023, 12, 31, 12, 0))
        sell_bike(make_bike(), sold_at=datetime(2024, 1, 1))
        assert [s.id for s in ledger.list_sales(db, year=2023, month=11)] == [dec.id]

    def test_bad_month(self, db) -> None:
        with pytest.raises(ValidationError):
            ledger.list_sales(db, year=2024, month=12)

    def test_get_by_id_and_bike(self, db, make_bike, sell_bike) -> None:
        bike = make_bike()
        sale = sell_bike(bike)
        assert ledger.get_sale(db, sale.id).bike_id == bike.id
        assert ledger.get_sale_by_bike_id(db, bike.id).id == sale.id

    def test_missing(self, db, make_bike) -> None:
        with pytest.raises(NotFound):
            ledger.get_sale(db, 99999)
        with pytest.raises(NotFound):
            ledger.get_sale_by_bike_id(db, make_bike().id)


class TestClearAll:
    def test_reset_scenario(self, db, make_bike, sell_bike) -> None:
        sold = [make_bike() for _ in range(3)]
        for bike in sold:
            sell_bike(bike, sold_at=datetime(2024, 2, 1))
        # two more sales whose bikes were later removed from inventory
        for _ in range(2):
            gone = make_bike()
            sell_bike(gone, sold_at=datetime(2024, 3, 1))
            inventory.delete_bike(db, gone.id)
        assert len(ledger.list_sales(db)) == 5

        result = ledger.clear_all(db)

        assert result == {"sales_deleted": 5, "bikes_reset": 3}
        assert ledger.list_sales(db) == []
        for bike in sold:
            assert inventory.get_bike(db, bike.id).status == BikeStatus.AVAILABLE
        kpi = analytics.compute_kpi(db, year=2024)
        assert kpi.total_revenue == 0
        assert kpi.total_expenses == 0
        assert kpi.total_profit == 0
        assert kpi.total_bikes_sold == 0
        assert kpi.total_bikes_available == 3

    def test_reset_bikes_can_be_sold_again(self, db, make_bike, sell_bike) -> None:
        bike = make_bike()
        sell_bike(bike)
        ledger.clear_all(db)
        sale = sell_bike(bike, sale_price=130000)
        assert sale.profit == 10000

    def test_empty_ledger(self, db) -> None:
        assert ledger.clear_all(db) == {"sales_deleted": 0, "bikes_reset": 0}
