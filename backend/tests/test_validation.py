"""Input validation, money and time helper tests."""

from datetime import datetime
from decimal import Decimal

import pytest
from vendor_pos.models import Product, Customer
from vendor_pos.money import money_str, to_money
from vendor_pos.routes.customers import CUSTOMER_POLICY
from vendor_pos.routes.products import PRODUCT_POLICY
from vendor_pos.time_utils import local_date, parse_date_window, parse_range_bound, to_utc_z
from vendor_pos.validation import (
    ValidationError,
    enforce_rules_product,
    require_amount,
    validate_payload,
)


class TestValidatePayload:
    def test_product_create_coerces_types(self):
        patch = validate_payload(
            model=Product,
            payload={"name": "  Tea  ", "price": "7.5", "stock": "3"},
            policy=PRODUCT_POLICY,
            partial=False,
        )
        assert patch == {"name": "Tea", "price": Decimal("7.50"), "stock": 3}

    def test_decimal_comma_accepted(self):
        patch = validate_payload(model=Product, payload={"price": "12,90"}, policy=PRODUCT_POLICY, partial=True)
        assert patch["price"] == Decimal("12.90")

    def test_float_price_rounds_to_cents(self):
        patch = validate_payload(model=Product, payload={"price": 0.1}, policy=PRODUCT_POLICY, partial=True)
        assert patch["price"] == Decimal("0.10")

    @pytest.mark.parametrize("payload", [
        {"name": "", "price": "1.00"},
        {"name": None, "price": "1.00"},
        {"name": "Tea", "price": "free"},
        {"name": "Tea", "price": "1.00", "stock": 1.5},
        {"name": "Tea", "price": "1.00", "stock": "1e3"},
        {"name": "x" * 256, "price": "1.00"},
        {"name": "Tea", "price": "1.00", "id": "forged"},
    ])
    def test_product_create_rejects(self, payload):
        with pytest.raises(ValidationError):
            validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)

    def test_partial_skips_required(self):
        assert validate_payload(model=Product, payload={"stock": 4}, policy=PRODUCT_POLICY, partial=True) == {"stock": 4}

    def test_non_dict_payload(self):
        with pytest.raises(ValidationError):
            validate_payload(model=Product, payload=["name"], policy=PRODUCT_POLICY, partial=False)

    def test_optional_customer_fields_blank_to_none(self):
        patch = validate_payload(
            model=Customer, payload={"name": "Ana", "email": "  "}, policy=CUSTOMER_POLICY, partial=False
        )
        assert patch == {"name": "Ana", "email": None}

    @pytest.mark.parametrize("patch", [{"price": Decimal("-0.01")}, {"stock": -1}, {"price": Decimal("100000000.00")}])
    def test_product_rules(self, patch):
        with pytest.raises(ValidationError):
            enforce_rules_product(patch)


class TestMoney:
    def test_to_money_quantizes_half_up(self):
        assert to_money("2.675") == Decimal("2.68")
        assert to_money(None) == Decimal("0.00")

    def test_money_str(self):
        assert money_str(Decimal("25")) == "25.00"
        assert money_str(None) is None

    def test_require_amount_allows_zero_when_not_positive(self):
        assert require_amount("0", "price", positive=False) == Decimal("0.00")
        with pytest.raises(ValidationError):
            require_amount("-1", "price", positive=False)


class TestTimeHelpers:
    def test_date_only_bounds_cover_whole_day(self):
        assert parse_range_bound("2026-03-02", end=False) == datetime(2026, 3, 2, 0, 0)
        assert parse_range_bound("2026-03-02", end=True) == datetime(2026, 3, 2, 23, 59, 59, 999999)

    def test_date_only_bounds_in_reporting_timezone(self):
        start = parse_range_bound("2026-03-02", end=False, tz_name="America/Sao_Paulo")
        assert start == datetime(2026, 3, 2, 3, 0)

    def test_iso_datetime_with_offset_normalized(self):
        assert parse_range_bound("2026-03-02T10:00:00+02:00", end=False) == datetime(2026, 3, 2, 8, 0)
        assert parse_range_bound("2026-03-02T10:00:00Z", end=True) == datetime(2026, 3, 2, 10, 0)

    def test_blank_bound_is_open(self):
        assert parse_range_bound("", end=True) is None
        assert parse_range_bound(None, end=False) is None

    def test_invalid_bound_raises(self):
        with pytest.raises(ValueError):
            parse_range_bound("03/02/2026", end=False)

    def test_window_reads_both_spellings(self):
        start, end = parse_date_window({"startDate": "2026-03-01", "end_date": "2026-03-02"})
        assert start == datetime(2026, 3, 1)
        assert end.date().isoformat() == "2026-03-02"

    def test_local_date(self):
        assert local_date(datetime(2026, 3, 2, 2, 0), "America/Sao_Paulo").isoformat() == "2026-03-01"

    def test_to_utc_z(self):
        assert to_utc_z(datetime(2026, 3, 2, 10, 0, 5, 123)) == "2026-03-02T10:00:05Z"
