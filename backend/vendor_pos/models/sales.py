from __future__ import annotations

from ..extensions import db
from ..ids import new_id
from ..money import money_str
from ..time_utils import to_utc_z, utcnow


class Sale(db.Model):
    """
    One checkout event: a fixed set of line items plus zero or more payments.

    PAYMENT STATUS:
    - pending: no payment recorded
    - partial: 0 < paid < total
    - paid: paid >= total (or marked paid by the vendor)

    INVARIANT: is_paid is True exactly when payment_status == "paid".
    total is fixed at creation to the sum of the item subtotals.
    """
    __tablename__ = "sales"
    __table_args__ = (
        # Vendor-scoped listing, newest first, with pending filter
        db.Index("ix_sales_vendor_created", "vendor_id", "created_at"),
        db.Index("ix_sales_vendor_paid", "vendor_id", "is_paid"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    vendor_id = db.Column(
        db.String(36), db.ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False, index=True
    )

    customer_id = db.Column(db.String(36), db.ForeignKey("customers.id"), nullable=True, index=True)
    # Walk-in buyers that are not registered customers
    customer_name = db.Column(db.String(255), nullable=True)

    total = db.Column(db.Numeric(10, 2), nullable=False)
    payment_status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    payment_method = db.Column(db.String(16), nullable=True)
    is_paid = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    vendor = db.relationship("Vendor", backref=db.backref("sales", lazy=True, passive_deletes=True))
    customer = db.relationship("Customer", backref=db.backref("sales", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Sale id={self.id} status={self.payment_status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "total": money_str(self.total),
            "payment_status": self.payment_status,
            "payment_method": self.payment_method,
            "is_paid": self.is_paid,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }


class SaleItem(db.Model):
    """
    Immutable line item. Name and unit price are copied from the product at
    sale time so later product edits or deletion never change history.
    """
    __tablename__ = "sale_items"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    sale_id = db.Column(
        db.String(36), db.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Nulled when the product is deleted
    product_id = db.Column(
        db.String(36), db.ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Position within the cart
    line_number = db.Column(db.Integer, nullable=False, default=1)

    product_name = db.Column(db.String(255), nullable=False)
    product_price = db.Column(db.Numeric(10, 2), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    subtotal = db.Column(db.Numeric(10, 2), nullable=False)

    sale = db.relationship(
        "Sale",
        backref=db.backref("items", lazy=True, order_by="SaleItem.line_number"),
    )
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "line_number": self.line_number,
            "product_name": self.product_name,
            "product_price": money_str(self.product_price),
            "quantity": self.quantity,
            "subtotal": money_str(self.subtotal),
        }


class Payment(db.Model):
    """
    Payment recorded against a sale.

    Append-only: rows are never updated and only disappear when their sale
    is deleted. Several payments per sale model partial settlement.
    """
    __tablename__ = "payments"
    __table_args__ = (
        db.Index("ix_payments_sale_created", "sale_id", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    sale_id = db.Column(
        db.String(36), db.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True
    )

    amount = db.Column(db.Numeric(10, 2), nullable=False)
    payment_method = db.Column(db.String(16), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    sale = db.relationship(
        "Sale",
        backref=db.backref("payments", lazy=True, order_by="Payment.created_at"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "amount": money_str(self.amount),
            "payment_method": self.payment_method,
            "created_at": to_utc_z(self.created_at),
        }
