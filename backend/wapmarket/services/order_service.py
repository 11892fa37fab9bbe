"""
Order Service - checkout and fulfillment status

Checkout turns a cart into an order header, its line items and the matching
stock decrements. All three are written in one transaction: either the
whole order exists with its items and stock movements, or nothing does.
Product rows are locked (SELECT ... FOR UPDATE) while prices are read and
stock is decremented, and the unit of work is retried on lock or optimistic
version conflicts.

Status changes are an unconditional overwrite within the known vocabulary;
the intended progression (CREATED -> CONFIRMED / READY_TO_PICKUP /
OUT_FOR_DELIVERY -> DELIVERED, or CANCELLED before delivery) is not
enforced.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Order, OrderItem, Product, Store, User
from ..validation import CheckoutRequest, ValidationError, FULFILLMENT_DELIVERY
from .concurrency import lock_for_update, run_with_retry


STATUS_CREATED = "CREATED"
ORDER_STATUSES = (
    STATUS_CREATED,
    "CONFIRMED",
    "READY_TO_PICKUP",
    "OUT_FOR_DELIVERY",
    "DELIVERED",
    "CANCELLED",
)


class OrderError(Exception):
    """Raised for order operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class EmptyCartError(OrderError):
    pass


class InsufficientStockError(OrderError):
    pass


class OrderNotFoundError(OrderError):
    pass


class OrderAccessError(OrderError):
    pass


def compute_totals(lines: list[tuple[int, int]], fulfillment_type: str, delivery_fee: int) -> dict:
    """
    lines: (unit_price, quantity) pairs.

    total = sum(unit_price * quantity) + fee, where the fee only applies
    to delivery orders.
    """
    subtotal = sum(unit_price * quantity for unit_price, quantity in lines)
    fee = delivery_fee if fulfillment_type == FULFILLMENT_DELIVERY else 0
    return {
        "subtotal": subtotal,
        "delivery_fee": fee,
        "total": subtotal + fee,
    }


def serialize_order(order: Order, items: list[OrderItem] | None = None) -> dict:
    data = order.to_dict()
    if order.buyer is not None:
        data["customer_name"] = order.buyer.name or order.buyer.email
    else:
        data["customer_name"] = order.guest_name
    data["items"] = [item.to_dict() for item in (order.items if items is None else items)]
    return data


def _check_stock(resolved: list[tuple[int, Product]]) -> None:
    requested: dict[int, int] = {}
    for quantity, product in resolved:
        requested[product.id] = requested.get(product.id, 0) + quantity

    insufficient = []
    for quantity, product in resolved:
        wanted = requested.pop(product.id, None)
        if wanted is not None and product.stock < wanted:
            insufficient.append({
                "product_id": product.id,
                "requested_quantity": wanted,
                "stock": product.stock,
            })

    if insufficient:
        raise InsufficientStockError("Insufficient stock", details={"items": insufficient})


def _decrement_stock(product: Product, quantity: int) -> None:
    product.stock = product.stock - quantity


def create_order(req: CheckoutRequest, buyer: User | None = None) -> dict:
    """
    Persist a checkout as one unit of work.

    Lines that reference unknown or inactive products are skipped; if
    nothing remains the cart is rejected with EmptyCartError and no row is
    written. Identical payloads submitted twice create two orders.
    """
    if not req.items:
        raise EmptyCartError("Cart is empty")

    delivery_fee = current_app.config["DELIVERY_FEE"]
    enforce_stock = current_app.config.get("ENFORCE_STOCK", False)

    def _op():
        product_ids = sorted({line.product_id for line in req.items})
        products = lock_for_update(
            db.session.query(Product)
            .filter(Product.id.in_(product_ids), Product.is_active.is_(True))
            .order_by(Product.id.asc())
        ).all()
        by_id = {p.id: p for p in products}

        resolved = [
            (line.quantity, by_id[line.product_id])
            for line in req.items
            if line.product_id in by_id
        ]
        if not resolved:
            raise EmptyCartError("No valid items in cart")

        if enforce_stock:
            _check_stock(resolved)

        totals = compute_totals(
            [(product.price, quantity) for quantity, product in resolved],
            req.fulfillment_type,
            delivery_fee,
        )

        order = Order(
            buyer_id=buyer.id if buyer else None,
            guest_name=req.guest_name,
            guest_phone=req.guest_phone,
            address=req.address,
            fulfillment_type=req.fulfillment_type,
            status=STATUS_CREATED,
            **totals,
        )
        db.session.add(order)
        db.session.flush()

        for quantity, product in resolved:
            db.session.add(OrderItem(
                order_id=order.id,
                product_id=product.id,
                quantity=quantity,
                unit_price=product.price,
                line_total=product.price * quantity,
            ))
            _decrement_stock(product, quantity)

        db.session.commit()
        return order

    try:
        order = run_with_retry(_op)
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Order %s created (buyer=%s, type=%s, total=%s)",
        order.id, order.buyer_id, order.fulfillment_type, order.total,
    )
    return serialize_order(order)


def _seller_has_items(order_id: int, seller_id: int) -> bool:
    row = (
        db.session.query(OrderItem.id)
        .join(Product, Product.id == OrderItem.product_id)
        .join(Store, Store.id == Product.store_id)
        .filter(OrderItem.order_id == order_id, Store.owner_id == seller_id)
        .first()
    )
    return row is not None


def normalize_status(status) -> str:
    if not isinstance(status, str) or not status.strip():
        raise ValidationError("status required")
    normalized = status.strip().upper()
    if normalized not in ORDER_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(ORDER_STATUSES)}")
    return normalized


def set_order_status(order_id: int, status: str, actor: User) -> dict:
    """
    Overwrite an order's status.

    Admins may update any order. A seller needs at least one line item of
    a product from their store in the order, otherwise OrderAccessError is
    raised and nothing changes.
    """
    new_status = normalize_status(status)

    def _op():
        order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
        if not order:
            raise OrderNotFoundError("Order not found")

        if not actor.is_admin and not _seller_has_items(order.id, actor.id):
            raise OrderAccessError("Order does not contain your products")

        previous = order.status
        order.status = new_status
        db.session.commit()
        return order, previous

    try:
        order, previous = run_with_retry(_op)
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Order %s status %s -> %s by user %s", order.id, previous, new_status, actor.id,
    )
    return serialize_order(order)


def get_order(order_id: int, actor: User) -> dict:
    order = db.session.query(Order).filter_by(id=order_id).first()
    if not order:
        raise OrderNotFoundError("Order not found")

    if actor.is_admin or order.buyer_id == actor.id:
        return serialize_order(order)
    if _seller_has_items(order.id, actor.id):
        return serialize_order(order, _items_for_seller(order, actor.id))
    raise OrderAccessError("Not allowed to view this order")


def _items_for_seller(order: Order, seller_id: int) -> list[OrderItem]:
    return [
        item for item in order.items
        if item.product is not None and item.product.store.owner_id == seller_id
    ]


def list_seller_orders(seller: User) -> list[dict]:
    """Orders with at least one item from the seller's store, seller items only."""
    orders = (
        db.session.query(Order)
        .join(OrderItem, OrderItem.order_id == Order.id)
        .join(Product, Product.id == OrderItem.product_id)
        .join(Store, Store.id == Product.store_id)
        .filter(Store.owner_id == seller.id)
        .distinct()
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    return [serialize_order(o, _items_for_seller(o, seller.id)) for o in orders]


def list_buyer_orders(buyer: User) -> list[dict]:
    orders = (
        db.session.query(Order)
        .filter(Order.buyer_id == buyer.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    return [serialize_order(o) for o in orders]


def list_all_orders() -> list[dict]:
    orders = db.session.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).all()
    return [serialize_order(o) for o in orders]
