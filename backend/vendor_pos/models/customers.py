from __future__ import annotations

from ..extensions import db
from ..ids import new_id
from ..time_utils import to_utc_z, utcnow


class Customer(db.Model):
    """
    Customer master data, scoped to a vendor.

    Sales may reference a customer or carry a free-text customer_name for
    walk-in buyers that were never registered.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.Index("ix_customers_vendor_name", "vendor_id", "name"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    vendor_id = db.Column(
        db.String(36), db.ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    vendor = db.relationship("Vendor", backref=db.backref("customers", lazy=True, passive_deletes=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "created_at": to_utc_z(self.created_at),
        }
