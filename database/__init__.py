"""Database module"""
from .connection import Base, engine, get_db, session_scope, SessionLocal
from .models import User, Customer, Order, Item, Analysis, Pricing, Shipping, CommissionSettings

__all__ = [
    "Base",
    "engine",
    "get_db",
    "SessionLocal",
    "session_scope",
    "User",
    "Customer",
    "Order",
    "Item",
    "Analysis",
    "Pricing",
    "Shipping",
    "CommissionSettings",
]
