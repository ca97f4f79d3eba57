from .auth import Vendor, SessionToken
from .inventory import Product
from .customers import Customer
from .sales import Sale, SaleItem, Payment

__all__ = [
    'Vendor', 'SessionToken',
    'Product',
    'Customer',
    'Sale', 'SaleItem', 'Payment',
]
