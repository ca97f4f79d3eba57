from __future__ import annotations

from ..extensions import db
from ..ids import new_id
from ..money import money_str
from ..time_utils import to_utc_z, utcnow


class Product(db.Model):
    """
    Sellable product owned by one vendor.

    Deletion is hard. Sale items keep their own name/price snapshot, so a
    deleted product only leaves a null product_id behind on old sales.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_vendor_name", "vendor_id", "name"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    vendor_id = db.Column(
        db.String(36), db.ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name = db.Column(db.String(255), nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    vendor = db.relationship("Vendor", backref=db.backref("products", lazy=True, passive_deletes=True))

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "name": self.name,
            "price": money_str(self.price),
            "stock": self.stock,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
