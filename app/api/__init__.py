"""API module"""
# Import all routers
from . import health, auth, commission, consignor, admin, orders, storefront

__all__ = ["health", "auth", "commission", "consignor", "admin", "orders", "storefront"]
