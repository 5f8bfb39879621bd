"""Core module"""
from .config import Settings, get_settings
from .enums import ItemStatus, OrderStatus, PayoutType, UserRole, TimeRange
from .exceptions import (
    DutchThriftError,
    NotFoundError,
    CommissionError,
    IneligibleItemError,
    InvalidStatusTransition,
    DuplicateError,
    InvalidInputError,
)

__all__ = [
    "Settings",
    "get_settings",
    "ItemStatus",
    "OrderStatus",
    "PayoutType",
    "UserRole",
    "TimeRange",
    "DutchThriftError",
    "NotFoundError",
    "CommissionError",
    "IneligibleItemError",
    "InvalidStatusTransition",
    "DuplicateError",
    "InvalidInputError",
]
