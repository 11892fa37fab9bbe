"""
Pytest fixtures for WapMarket backend tests.

Provides an in-memory database, users for every role, stores, products and
auth header helpers.
"""

import pytest
from wapmarket import create_app
from wapmarket.extensions import db
from wapmarket.models import User, Store, Product, ROLE_BUYER, ROLE_SELLER, ROLE_ADMIN
from wapmarket.services.auth_service import hash_password


PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'BCRYPT_ROUNDS': 4,
        'DELIVERY_FEE': 2000,
        'ENFORCE_STOCK': False,
        'CORS_ORIGINS': 'http://localhost:5173',
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


def make_user(db_session, email: str, role: str, name: str | None = None) -> User:
    user = User(
        email=email,
        name=name,
        role=role,
        password_hash=hash_password(PASSWORD),
    )
    db_session.add(user)
    db_session.commit()
    return user


def make_product(db_session, store: Store, name: str = "Product", price: int = 1000,
                 stock: int = 10, **fields) -> Product:
    product = Product(store_id=store.id, name=name, price=price, stock=stock, **fields)
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def buyer(db_session):
    return make_user(db_session, "buyer@example.com", ROLE_BUYER, name="Ana Buyer")


@pytest.fixture(scope='function')
def other_buyer(db_session):
    return make_user(db_session, "buyer2@example.com", ROLE_BUYER, name="Ben Buyer")


@pytest.fixture(scope='function')
def seller(db_session):
    return make_user(db_session, "seller@example.com", ROLE_SELLER, name="Sara Seller")


@pytest.fixture(scope='function')
def other_seller(db_session):
    return make_user(db_session, "seller2@example.com", ROLE_SELLER, name="Omar Seller")


@pytest.fixture(scope='function')
def admin(db_session):
    return make_user(db_session, "admin@example.com", ROLE_ADMIN, name="Admin")


@pytest.fixture(scope='function')
def store(db_session, seller):
    store = Store(name="Sara Shop", owner_id=seller.id)
    db_session.add(store)
    db_session.commit()
    return store


@pytest.fixture(scope='function')
def other_store(db_session, other_seller):
    store = Store(name="Omar Shop", owner_id=other_seller.id)
    db_session.add(store)
    db_session.commit()
    return store


@pytest.fixture(scope='function')
def product(db_session, store):
    """Product priced 2500 XAF with 10 units in stock."""
    return make_product(db_session, store, name="Palm Oil 1L", price=2500, stock=10)


@pytest.fixture(scope='function')
def other_product(db_session, other_store):
    return make_product(db_session, other_store, name="Cassava Flour", price=1200, stock=5)


def get_auth_token(client, email: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def buyer_headers(client, buyer):
    return auth_headers(get_auth_token(client, buyer.email))


@pytest.fixture(scope='function')
def other_buyer_headers(client, other_buyer):
    return auth_headers(get_auth_token(client, other_buyer.email))


@pytest.fixture(scope='function')
def seller_headers(client, seller):
    return auth_headers(get_auth_token(client, seller.email))


@pytest.fixture(scope='function')
def other_seller_headers(client, other_seller):
    return auth_headers(get_auth_token(client, other_seller.email))


@pytest.fixture(scope='function')
def admin_headers(client, admin):
    return auth_headers(get_auth_token(client, admin.email))
