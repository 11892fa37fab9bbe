"""
Role gate tests.

Verifies:
- Protected endpoints return 401 without a token
- Buyer tokens are denied seller and admin endpoints (403)
- Seller tokens are denied admin endpoints (403)
- Admin satisfies every role check
- Sellers and admins cannot place orders
"""

import pytest

from .conftest import auth_headers


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/profile"),
            ("GET", "/api/orders"),
            ("GET", "/api/orders/1"),
            ("GET", "/api/seller/products"),
            ("POST", "/api/seller/products"),
            ("GET", "/api/seller/orders"),
            ("PUT", "/api/seller/orders/1/status"),
            ("GET", "/api/admin/users"),
            ("POST", "/api/admin/create-seller"),
            ("PUT", "/api/admin/products/1"),
            ("DELETE", "/api/admin/products/1"),
            ("GET", "/api/admin/orders"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_non_bearer_scheme_rejected(self, client, db_session):
        resp = client.get("/api/seller/products", headers={"Authorization": "Token abc"})
        assert resp.status_code == 401


# =============================================================================
# WRONG ROLE (403)
# =============================================================================


class TestBuyerDenied:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/seller/products"),
            ("POST", "/api/seller/products"),
            ("GET", "/api/seller/orders"),
            ("PUT", "/api/seller/orders/1/status"),
            ("GET", "/api/admin/users"),
            ("POST", "/api/admin/create-seller"),
            ("GET", "/api/admin/orders"),
        ],
    )
    def test_buyer_forbidden(self, client, buyer_headers, method, path):
        resp = getattr(client, method.lower())(path, headers=buyer_headers, json={})
        assert resp.status_code == 403, f"{method} {path} returned {resp.status_code}"


class TestSellerDenied:

    def test_cannot_list_users(self, client, seller_headers):
        assert client.get("/api/admin/users", headers=seller_headers).status_code == 403

    def test_cannot_create_seller(self, client, seller_headers):
        resp = client.post(
            "/api/admin/create-seller",
            json={"email": "x@example.com", "password": "Secret123"},
            headers=seller_headers,
        )
        assert resp.status_code == 403

    def test_cannot_delete_products(self, client, seller_headers, product):
        resp = client.delete(f"/api/admin/products/{product.id}", headers=seller_headers)
        assert resp.status_code == 403

    def test_cannot_place_orders(self, client, seller_headers, product):
        resp = client.post(
            "/api/orders",
            json={"items": [{"product_id": product.id, "quantity": 1}]},
            headers=seller_headers,
        )
        assert resp.status_code == 403


class TestAdminSatisfiesEveryRole:

    def test_admin_reaches_seller_endpoint(self, client, admin_headers):
        resp = client.get("/api/seller/orders", headers=admin_headers)
        assert resp.status_code == 200

    def test_admin_reaches_buyer_endpoint(self, client, admin_headers):
        resp = client.get("/api/orders", headers=admin_headers)
        assert resp.status_code == 200

    def test_admin_cannot_place_orders(self, client, admin_headers, product):
        resp = client.post(
            "/api/orders",
            json={"items": [{"product_id": product.id, "quantity": 1}]},
            headers=admin_headers,
        )
        assert resp.status_code == 403


class TestOptionalAuthOnCheckout:

    def test_invalid_token_on_checkout_is_401(self, client, product):
        resp = client.post(
            "/api/orders",
            json={"items": [{"product_id": product.id, "quantity": 1}]},
            headers=auth_headers("broken"),
        )
        assert resp.status_code == 401
