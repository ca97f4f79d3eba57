"""
Tenant scoping helpers.

Every product, customer and sale belongs to exactly one vendor. Lookups by
id always go through these helpers so a row owned by another vendor is
indistinguishable from a row that does not exist.

USAGE:
    from vendor_pos.services.tenant_service import require_owned

    sale = require_owned(Sale, sale_id, g.vendor_id)
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db


class TenantAccessError(Exception):
    """Raised when a row is missing or owned by another vendor."""
    pass


def scoped_query(model, vendor_id: str):
    """Base query over model restricted to one vendor."""
    return db.session.query(model).filter(model.vendor_id == vendor_id)


def get_owned(model, row_id: str, vendor_id: str):
    """Fetch a vendor-owned row or None."""
    if not row_id or not isinstance(row_id, str):
        return None
    return scoped_query(model, vendor_id).filter(model.id == row_id).first()


def require_owned(model, row_id: str, vendor_id: str):
    """
    Like get_owned, but raises TenantAccessError instead of returning None.

    Foreign rows are logged at DEBUG only: the caller answers 404 either way.
    """
    row = get_owned(model, row_id, vendor_id)
    if row is None:
        if row_id and db.session.get(model, row_id) is not None:
            current_app.logger.debug(
                "Cross-tenant lookup denied: %s %s for vendor %s", model.__name__, row_id, vendor_id
            )
        raise TenantAccessError(f"{model.__name__} not found")
    return row
