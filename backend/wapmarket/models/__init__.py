from .auth import User, ROLE_BUYER, ROLE_SELLER, ROLE_ADMIN, ROLES
from .catalog import Store, Product
from .orders import Order, OrderItem

__all__ = [
    'User', 'ROLE_BUYER', 'ROLE_SELLER', 'ROLE_ADMIN', 'ROLES',
    'Store', 'Product',
    'Order', 'OrderItem',
]
