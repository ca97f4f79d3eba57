from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func

from ..extensions import db
from ..models import Sale, SaleItem
from ..money import ZERO, money_str, to_money
from ..time_utils import local_date

UNKNOWN_METHOD = "unknown"


@dataclass
class SalesStats:
    """
    Summary figures over one vendor's sales in a date window.

    Amounts are Decimals here and become "12.34" strings in to_dict().
    total_sales == paid_sales + pending_sales always holds.
    """
    total_sales: Decimal = ZERO
    paid_sales: Decimal = ZERO
    pending_sales: Decimal = ZERO
    sales_count: int = 0
    payment_methods: list[tuple[str, Decimal]] = field(default_factory=list)
    daily_sales: list[tuple[str, Decimal]] = field(default_factory=list)
    product_sales: list[tuple[str, int, Decimal]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_sales": money_str(self.total_sales),
            "paid_sales": money_str(self.paid_sales),
            "pending_sales": money_str(self.pending_sales),
            "sales_count": self.sales_count,
            "payment_methods": [
                {"method": method, "total": money_str(total)} for method, total in self.payment_methods
            ],
            "daily_sales": [
                {"date": day, "total": money_str(total)} for day, total in self.daily_sales
            ],
            "product_sales": [
                {"product_name": name, "quantity": quantity, "total": money_str(total)}
                for name, quantity, total in self.product_sales
            ],
        }


def _apply_window(query, start: datetime | None, end: datetime | None):
    if start is not None:
        query = query.filter(Sale.created_at >= start)
    if end is not None:
        query = query.filter(Sale.created_at <= end)
    return query


def get_sales_stats(
    vendor_id: str,
    start: datetime | None = None,
    end: datetime | None = None,
    *,
    tz_name: str = "UTC",
) -> SalesStats:
    """
    Read-only aggregation over the vendor's sales created in [start, end].

    Daily buckets use the calendar date of created_at in tz_name.
    Payment method totals only count paid sales; a missing method is
    reported as "unknown".
    """
    scope = (Sale.vendor_id == vendor_id,)

    totals = _apply_window(
        db.session.query(
            func.count(Sale.id),
            func.coalesce(func.sum(Sale.total), 0),
        ).filter(*scope),
        start, end,
    ).one()

    paid_total = _apply_window(
        db.session.query(func.coalesce(func.sum(Sale.total), 0)).filter(*scope, Sale.is_paid.is_(True)),
        start, end,
    ).scalar()

    pending_total = _apply_window(
        db.session.query(func.coalesce(func.sum(Sale.total), 0)).filter(*scope, Sale.is_paid.is_(False)),
        start, end,
    ).scalar()

    method_expr = func.coalesce(Sale.payment_method, UNKNOWN_METHOD)
    method_rows = _apply_window(
        db.session.query(method_expr, func.sum(Sale.total))
        .filter(*scope, Sale.is_paid.is_(True))
        .group_by(method_expr),
        start, end,
    ).all()
    payment_methods = sorted(
        ((method, to_money(total)) for method, total in method_rows),
        key=lambda row: (-row[1], row[0]),
    )

    # Bucketed in Python so the reporting timezone applies on every backend
    daily: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for created_at, total in _apply_window(
        db.session.query(Sale.created_at, Sale.total).filter(*scope),
        start, end,
    ):
        daily[local_date(created_at, tz_name).isoformat()] += to_money(total)

    product_rows = _apply_window(
        db.session.query(
            SaleItem.product_name,
            func.coalesce(func.sum(SaleItem.quantity), 0),
            func.coalesce(func.sum(SaleItem.subtotal), 0),
        )
        .join(Sale, SaleItem.sale_id == Sale.id)
        .filter(*scope)
        .group_by(SaleItem.product_name),
        start, end,
    ).all()
    product_sales = sorted(
        ((name, int(quantity), to_money(total)) for name, quantity, total in product_rows),
        key=lambda row: (-row[1], row[0]),
    )

    return SalesStats(
        total_sales=to_money(totals[1]),
        paid_sales=to_money(paid_total),
        pending_sales=to_money(pending_total),
        sales_count=int(totals[0] or 0),
        payment_methods=payment_methods,
        daily_sales=sorted(daily.items()),
        product_sales=product_sales,
    )
