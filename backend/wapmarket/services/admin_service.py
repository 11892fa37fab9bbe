"""Admin operations: user overview and seller onboarding."""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import User, Store, ROLE_SELLER
from ..validation import SellerRequest
from .auth_service import create_user
from .store_service import create_store


def list_users() -> list[dict]:
    users = db.session.query(User).order_by(User.id.asc()).all()

    stores_by_owner: dict[int, Store] = {}
    for store in db.session.query(Store).order_by(Store.id.desc()).all():
        # oldest store wins, matching get_store_for_owner
        stores_by_owner[store.owner_id] = store

    result = []
    for user in users:
        user_dict = user.to_dict()
        store = stores_by_owner.get(user.id)
        user_dict["store_id"] = store.id if store else None
        user_dict["store_name"] = store.name if store else None
        result.append(user_dict)
    return result


def create_seller(req: SellerRequest) -> tuple[User, Store]:
    """Create a seller account and its store in a single commit."""
    try:
        user = create_user(
            req.email,
            req.password,
            name=req.name,
            phone=req.phone,
            role=ROLE_SELLER,
            commit=False,
        )
        store = create_store(user, req.store_name, commit=False)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Seller %s created with store %s", user.id, store.id)
    return user, store
