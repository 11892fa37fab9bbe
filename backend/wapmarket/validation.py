from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta


# Maximum price: 999,999,999 XAF
MAX_PRICE = 999_999_999

FULFILLMENT_PICKUP = "pickup"
FULFILLMENT_DELIVERY = "delivery"
FULFILLMENT_TYPES = (FULFILLMENT_PICKUP, FULFILLMENT_DELIVERY)


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., deleting a sold product)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_int(key: str, value: Any) -> int:
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValidationError(f"{key} must be an integer, not a decimal")
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        if '.' in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    raise ValidationError(f"{key} must be an integer")


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return _coerce_int(col.key, value)

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in {"true", "1", "yes"}:
                return True
            if lowered in {"false", "0", "no"}:
                return False
            raise ValidationError(f"{col.key} must be a boolean")
        return bool(value)

    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields before anything else
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank optional text is stored as NULL
        if isinstance(col.type, (String, Text)) and isinstance(val, str) and val == "":
            if not col.nullable:
                raise ValidationError(f"{k} cannot be blank")
            val = None

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    """
    if "price" in patch and patch["price"] is not None:
        price = patch["price"]
        if price < 0:
            raise ValidationError("price must be >= 0")
        if price > MAX_PRICE:
            raise ValidationError(f"price cannot exceed {MAX_PRICE}")

    if "stock" in patch and patch["stock"] is not None and patch["stock"] < 0:
        raise ValidationError("stock must be >= 0")


def _to_text(value: Any, key: str, max_length: int) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if len(text) > max_length:
        raise ValidationError(f"{key} exceeds max length {max_length}")
    return text


def _to_positive_int(value: Any) -> int | None:
    """Lenient int parse for cart lines: anything unusable yields None."""
    try:
        parsed = _coerce_int("value", value)
    except ValidationError:
        return None
    return parsed if parsed > 0 else None


@dataclass
class SignupRequest:
    email: str
    password: str
    name: str | None = None
    phone: str | None = None
    role: str | None = None


def parse_signup_payload(payload: Any) -> SignupRequest:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    email = _to_text(payload.get("email"), "email", 255)
    password = payload.get("password")
    if not email or not password:
        raise ValidationError("email and password required")
    if "@" not in email:
        raise ValidationError("email is not valid")
    if not isinstance(password, str):
        raise ValidationError("password must be a string")

    role = _to_text(payload.get("role"), "role", 16)
    return SignupRequest(
        email=email.lower(),
        password=password,
        name=_to_text(payload.get("name"), "name", 120),
        phone=_to_text(payload.get("phone"), "phone", 32),
        role=role.lower() if role else None,
    )


@dataclass
class SellerRequest(SignupRequest):
    store_name: str | None = None


def parse_seller_payload(payload: Any) -> SellerRequest:
    base = parse_signup_payload(payload)
    return SellerRequest(
        email=base.email,
        password=base.password,
        name=base.name,
        phone=base.phone,
        store_name=_to_text(payload.get("store_name"), "store_name", 120),
    )


@dataclass
class CartLine:
    product_id: int
    quantity: int


@dataclass
class CheckoutRequest:
    items: list[CartLine] = field(default_factory=list)
    fulfillment_type: str = FULFILLMENT_PICKUP
    guest_name: str | None = None
    guest_phone: str | None = None
    address: str | None = None


def parse_checkout_payload(payload: Any) -> CheckoutRequest:
    """
    Normalize a checkout body.

    Cart lines without a usable product_id or with a non-positive quantity
    are dropped here; the caller decides whether anything is left to order.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    raw_items = payload.get("items") or []
    if not isinstance(raw_items, list):
        raise ValidationError("items must be a list")

    lines: list[CartLine] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        product_id = _to_positive_int(raw.get("product_id"))
        quantity = _to_positive_int(raw.get("quantity"))
        if product_id is None or quantity is None:
            continue
        lines.append(CartLine(product_id=product_id, quantity=quantity))

    fulfillment_type = _to_text(payload.get("fulfillment_type"), "fulfillment_type", 16)
    fulfillment_type = (fulfillment_type or FULFILLMENT_PICKUP).lower()
    if fulfillment_type not in FULFILLMENT_TYPES:
        raise ValidationError(f"fulfillment_type must be one of: {', '.join(FULFILLMENT_TYPES)}")

    return CheckoutRequest(
        items=lines,
        fulfillment_type=fulfillment_type,
        guest_name=_to_text(payload.get("guest_name"), "guest_name", 120),
        guest_phone=_to_text(payload.get("guest_phone"), "guest_phone", 32),
        address=_to_text(payload.get("address"), "address", 255),
    )
