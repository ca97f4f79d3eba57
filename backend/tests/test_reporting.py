"""
Analytics tests: sales stats identities, grouping and ordering.
"""

from datetime import datetime
from decimal import Decimal

import pytest
from vendor_pos.models import Sale
from vendor_pos.services import payment_service, reporting_service, sales_service


def _sale(vendor_id, items, **draft):
    return sales_service.create_sale(vendor_id, draft, items)


def _backdate(db_session, sale_id, when):
    sale = db_session.get(Sale, sale_id)
    sale.created_at = when
    db_session.commit()


class TestSalesStats:
    def test_empty_vendor_has_zero_figures(self, db_session, vendor_a):
        stats = reporting_service.get_sales_stats(vendor_a.id)
        assert stats.to_dict() == {
            "total_sales": "0.00",
            "paid_sales": "0.00",
            "pending_sales": "0.00",
            "sales_count": 0,
            "payment_methods": [],
            "daily_sales": [],
            "product_sales": [],
        }

    def test_scenario_counts_each_sale_once(self, db_session, vendor_a, product_a, product_a2):
        first = _sale(vendor_a.id, [
            {"product_id": product_a.id, "quantity": 2},
            {"product_id": product_a2.id, "quantity": 1},
        ])
        payment_service.add_payment(vendor_a.id, first["id"], "25.00", "pix")

        second = _sale(vendor_a.id, [
            {"product_id": product_a.id, "quantity": 2},
            {"product_id": product_a2.id, "quantity": 1},
        ])
        payment_service.add_payment(vendor_a.id, second["id"], "10.00", "cash")

        stats = reporting_service.get_sales_stats(vendor_a.id)

        assert stats.sales_count == 2
        assert stats.total_sales == Decimal("50.00")
        assert stats.paid_sales == Decimal("25.00")
        assert stats.pending_sales == Decimal("25.00")
        assert stats.payment_methods == [("pix", Decimal("25.00"))]

    def test_total_is_paid_plus_pending(self, db_session, vendor_a, product_a, product_a2):
        _sale(vendor_a.id, [{"product_id": product_a.id, "quantity": 3}], is_paid=True, payment_method="cash")
        _sale(vendor_a.id, [{"product_id": product_a2.id, "quantity": 1}])
        partial = _sale(vendor_a.id, [{"product_id": product_a.id, "quantity": 1}])
        payment_service.add_payment(vendor_a.id, partial["id"], "4.00", "debit")

        stats = reporting_service.get_sales_stats(vendor_a.id)
        assert stats.total_sales == stats.paid_sales + stats.pending_sales
        assert sum(total for _, total in stats.payment_methods) <= stats.paid_sales

    def test_paid_without_method_reported_as_unknown(self, db_session, vendor_a, product_a, product_a2):
        _sale(vendor_a.id, [{"product_id": product_a.id, "quantity": 1}], is_paid=True)
        _sale(vendor_a.id, [{"product_id": product_a2.id, "quantity": 1}], is_paid=True, payment_method="cash")
        _sale(vendor_a.id, [{"product_id": product_a.id, "quantity": 3}], is_paid=True, payment_method="credit")

        stats = reporting_service.get_sales_stats(vendor_a.id)
        assert stats.payment_methods == [
            ("credit", Decimal("30.00")),
            ("unknown", Decimal("10.00")),
            ("cash", Decimal("5.00")),
        ]

    def test_product_sales_ordered_by_quantity(self, db_session, vendor_a, product_a, product_a2):
        _sale(vendor_a.id, [
            {"product_id": product_a.id, "quantity": 1},
            {"product_id": product_a2.id, "quantity": 4},
        ])
        _sale(vendor_a.id, [{"product_id": product_a2.id, "quantity": 2}])

        stats = reporting_service.get_sales_stats(vendor_a.id).to_dict()
        assert stats["product_sales"] == [
            {"product_name": "Croissant", "quantity": 6, "total": "30.00"},
            {"product_name": "Coffee Beans", "quantity": 1, "total": "10.00"},
        ]

    def test_daily_buckets_ascending(self, db_session, vendor_a, product_a):
        for when in (datetime(2026, 3, 2, 9, 0), datetime(2026, 3, 1, 9, 0), datetime(2026, 3, 2, 18, 0)):
            sale = _sale(vendor_a.id, [{"product_id": product_a.id, "quantity": 1}])
            _backdate(db_session, sale["id"], when)

        stats = reporting_service.get_sales_stats(vendor_a.id).to_dict()
        assert stats["daily_sales"] == [
            {"date": "2026-03-01", "total": "10.00"},
            {"date": "2026-03-02", "total": "20.00"},
        ]

    def test_daily_buckets_follow_reporting_timezone(self, db_session, vendor_a, product_a):
        # 02:00 UTC on the 2nd is still the 1st in Sao Paulo (UTC-3)
        sale = _sale(vendor_a.id, [{"product_id": product_a.id, "quantity": 1}])
        _backdate(db_session, sale["id"], datetime(2026, 3, 2, 2, 0))

        utc_days = reporting_service.get_sales_stats(vendor_a.id).daily_sales
        local_days = reporting_service.get_sales_stats(vendor_a.id, tz_name="America/Sao_Paulo").daily_sales

        assert utc_days == [("2026-03-02", Decimal("10.00"))]
        assert local_days == [("2026-03-01", Decimal("10.00"))]

    def test_window_limits_every_figure(self, db_session, vendor_a, product_a, product_a2):
        old = _sale(vendor_a.id, [{"product_id": product_a.id, "quantity": 5}], is_paid=True, payment_method="cash")
        _backdate(db_session, old["id"], datetime(2026, 1, 10, 12, 0))
        new = _sale(vendor_a.id, [{"product_id": product_a2.id, "quantity": 1}])
        _backdate(db_session, new["id"], datetime(2026, 2, 10, 12, 0))

        stats = reporting_service.get_sales_stats(
            vendor_a.id, start=datetime(2026, 2, 1), end=datetime(2026, 2, 28, 23, 59, 59)
        )
        assert stats.sales_count == 1
        assert stats.total_sales == Decimal("5.00")
        assert stats.paid_sales == Decimal("0.00")
        assert stats.payment_methods == []
        assert [name for name, _, _ in stats.product_sales] == ["Croissant"]

    def test_other_vendor_sales_excluded(self, db_session, vendor_a, vendor_b, product_a, product_b):
        _sale(vendor_a.id, [{"product_id": product_a.id, "quantity": 1}])
        _sale(vendor_b.id, [{"product_id": product_b.id, "quantity": 2}], is_paid=True)

        stats_a = reporting_service.get_sales_stats(vendor_a.id)
        stats_b = reporting_service.get_sales_stats(vendor_b.id)
        assert stats_a.total_sales == Decimal("10.00")
        assert stats_b.total_sales == Decimal("15.00")
        assert stats_a.product_sales == [("Coffee Beans", 1, Decimal("10.00"))]

    @pytest.mark.parametrize("field", ["total_sales", "paid_sales", "pending_sales"])
    def test_money_serialized_as_two_decimal_strings(self, db_session, vendor_a, sale_a, field):
        assert reporting_service.get_sales_stats(vendor_a.id).to_dict()[field] in ("25.00", "0.00")

    def test_serialized_total_is_exactly_paid_plus_pending(self, db_session, vendor_a, product_a):
        _sale(vendor_a.id, [{"product_id": product_a.id, "quantity": 1, "product_price": "0.10"}],
              is_paid=True, payment_method="cash")
        _sale(vendor_a.id, [{"product_id": product_a.id, "quantity": 1, "product_price": "0.20"}])

        stats = reporting_service.get_sales_stats(vendor_a.id).to_dict()
        assert stats["total_sales"] == "0.30"
        assert Decimal(stats["paid_sales"]) + Decimal(stats["pending_sales"]) == Decimal(stats["total_sales"])
        assert stats["payment_methods"] == [{"method": "cash", "total": "0.10"}]
