"""Unit tests for payload parsing and column-driven validation."""

import pytest

from wapmarket.models import Product
from wapmarket.validation import (
    CartLine,
    ModelValidationPolicy,
    ValidationError,
    MAX_PRICE,
    enforce_rules_product,
    parse_checkout_payload,
    parse_seller_payload,
    parse_signup_payload,
    validate_payload,
)


POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "price", "stock", "is_active"},
    required_on_create={"name", "price"},
)


class TestValidatePayload:

    def test_coerces_types(self):
        patch = validate_payload(
            model=Product,
            payload={"name": "  Rice 5kg ", "price": "4500", "stock": 3.0, "is_active": "yes"},
            policy=POLICY,
            partial=False,
        )
        assert patch == {"name": "Rice 5kg", "price": 4500, "stock": 3, "is_active": True}

    @pytest.mark.parametrize("price", ["12.5", "1e3", 12.5, "abc", True, [1]])
    def test_rejects_non_integer_price(self, price):
        with pytest.raises(ValidationError):
            validate_payload(model=Product, payload={"name": "x", "price": price}, policy=POLICY, partial=False)

    def test_required_fields_on_create(self):
        with pytest.raises(ValidationError, match="price"):
            validate_payload(model=Product, payload={"name": "x"}, policy=POLICY, partial=False)
        with pytest.raises(ValidationError, match="name"):
            validate_payload(model=Product, payload={"name": "", "price": 1}, policy=POLICY, partial=False)

    def test_partial_skips_required(self):
        assert validate_payload(model=Product, payload={"stock": 2}, policy=POLICY, partial=True) == {"stock": 2}

    def test_rejects_fields_outside_policy(self):
        with pytest.raises(ValidationError, match="Field not allowed: store_id"):
            validate_payload(model=Product, payload={"store_id": 1}, policy=POLICY, partial=True)

    def test_blank_optional_text_becomes_null(self):
        patch = validate_payload(model=Product, payload={"description": "   "}, policy=POLICY, partial=True)
        assert patch == {"description": None}

    def test_null_for_required_column(self):
        with pytest.raises(ValidationError, match="cannot be null"):
            validate_payload(model=Product, payload={"price": None}, policy=POLICY, partial=True)

    def test_string_length(self):
        with pytest.raises(ValidationError, match="max length"):
            validate_payload(model=Product, payload={"name": "x" * 500}, policy=POLICY, partial=True)

    def test_unknown_field_reported_before_missing_required(self):
        with pytest.raises(ValidationError, match="Field not allowed: price_xaf"):
            validate_payload(model=Product, payload={"name": "x", "price_xaf": 1}, policy=POLICY, partial=False)

    def test_stock_bounds(self):
        enforce_rules_product({"stock": 0})
        with pytest.raises(ValidationError, match="stock"):
            enforce_rules_product({"stock": -1})

    def test_price_bounds(self):
        enforce_rules_product({"price": 0})
        enforce_rules_product({"price": MAX_PRICE})
        with pytest.raises(ValidationError):
            enforce_rules_product({"price": -1})
        with pytest.raises(ValidationError):
            enforce_rules_product({"price": MAX_PRICE + 1})


class TestSignupPayload:

    def test_normalizes(self):
        req = parse_signup_payload({
            "email": " Ana@Example.COM ",
            "password": "Password123",
            "name": " Ana ",
            "role": "Seller",
        })
        assert req.email == "ana@example.com"
        assert req.name == "Ana"
        assert req.role == "seller"
        assert req.phone is None

    @pytest.mark.parametrize("payload", [
        None,
        [],
        {},
        {"email": "ana@example.com"},
        {"password": "Password123"},
        {"email": "not-an-email", "password": "Password123"},
        {"email": "ana@example.com", "password": 12345678},
    ])
    def test_rejects(self, payload):
        with pytest.raises(ValidationError):
            parse_signup_payload(payload)

    def test_seller_payload_keeps_store_name(self):
        req = parse_seller_payload({
            "email": "s@example.com",
            "password": "Password123",
            "store_name": "Malabo Market",
            "role": "admin",
        })
        assert req.store_name == "Malabo Market"
        assert req.role is None


class TestCheckoutPayload:

    def test_defaults_to_pickup(self):
        req = parse_checkout_payload({"items": [{"product_id": 1, "quantity": 2}]})
        assert req.fulfillment_type == "pickup"
        assert req.items == [CartLine(product_id=1, quantity=2)]

    def test_fulfillment_type_case_insensitive(self):
        req = parse_checkout_payload({"items": [], "fulfillment_type": "DELIVERY"})
        assert req.fulfillment_type == "delivery"

    def test_drops_unusable_lines(self):
        req = parse_checkout_payload({"items": [
            {"product_id": 1, "quantity": 0},
            {"product_id": "2", "quantity": "3"},
            {"product_id": None, "quantity": 1},
            {"product_id": 4, "quantity": 1.5},
            {"product_id": 5},
            7,
        ]})
        assert req.items == [CartLine(product_id=2, quantity=3)]

    def test_blank_contact_fields_are_none(self):
        req = parse_checkout_payload({"items": [], "guest_name": "  ", "address": ""})
        assert req.guest_name is None
        assert req.address is None

    @pytest.mark.parametrize("payload", [
        None,
        "items",
        {"items": "1,2"},
        {"items": [], "fulfillment_type": "teleport"},
    ])
    def test_rejects(self, payload):
        with pytest.raises(ValidationError):
            parse_checkout_payload(payload)
