"""
Pytest fixtures for vendor_pos backend tests.

Provides test database setup, two-vendor tenant fixtures, products and
authenticated request headers.
"""

from decimal import Decimal

import pytest
from vendor_pos import create_app
from vendor_pos.extensions import db
from vendor_pos.models import Vendor, Product, Customer
from vendor_pos.services import sales_service
from vendor_pos.services.auth_service import hash_password
from vendor_pos.services.session_service import create_session


TEST_PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'REPORTING_TIMEZONE': 'UTC',
        'LOG_LEVEL': 'WARNING',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='session')
def password_hash():
    """bcrypt is slow on purpose; hash the shared test password once."""
    return hash_password(TEST_PASSWORD)


def _make_vendor(db_session, password_hash, username, display_name, is_admin=False):
    vendor = Vendor(
        username=username,
        display_name=display_name,
        password_hash=password_hash,
        is_admin=is_admin,
    )
    db_session.add(vendor)
    db_session.commit()
    return vendor


@pytest.fixture(scope='function')
def vendor_a(db_session, password_hash):
    """Vendor A (first tenant)."""
    return _make_vendor(db_session, password_hash, "vendor_a", "Acme Stall")


@pytest.fixture(scope='function')
def vendor_b(db_session, password_hash):
    """Vendor B (second tenant)."""
    return _make_vendor(db_session, password_hash, "vendor_b", "Beta Market")


@pytest.fixture(scope='function')
def admin_vendor(db_session, password_hash):
    return _make_vendor(db_session, password_hash, "admin", "Administrator", is_admin=True)


@pytest.fixture(scope='function')
def token_a(vendor_a):
    _, token = create_session(vendor_a.id)
    return token


@pytest.fixture(scope='function')
def token_b(vendor_b):
    _, token = create_session(vendor_b.id)
    return token


@pytest.fixture(scope='function')
def headers_a(token_a):
    return auth_headers(token_a)


@pytest.fixture(scope='function')
def headers_b(token_b):
    return auth_headers(token_b)


@pytest.fixture(scope='function')
def product_a(db_session, vendor_a):
    """10.00 product owned by vendor A."""
    product = Product(vendor_id=vendor_a.id, name="Coffee Beans", price=Decimal("10.00"), stock=20)
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def product_a2(db_session, vendor_a):
    """5.00 product owned by vendor A."""
    product = Product(vendor_id=vendor_a.id, name="Croissant", price=Decimal("5.00"), stock=50)
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def product_b(db_session, vendor_b):
    """Product owned by vendor B."""
    product = Product(vendor_id=vendor_b.id, name="Tea Leaves", price=Decimal("7.50"), stock=10)
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def customer_a(db_session, vendor_a):
    customer = Customer(vendor_id=vendor_a.id, name="Ana Souza", email="ana@example.com")
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture(scope='function')
def sale_a(vendor_a, product_a, product_a2):
    """Pending 25.00 sale: 2 x 10.00 + 1 x 5.00."""
    return sales_service.create_sale(
        vendor_a.id,
        {"is_paid": False},
        [
            {"product_id": product_a.id, "quantity": 2},
            {"product_id": product_a2.id, "quantity": 1},
        ],
    )


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def get_auth_token(client, username: str, password: str = TEST_PASSWORD) -> str:
    """Helper to get auth token for a vendor."""
    response = client.post('/api/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None
