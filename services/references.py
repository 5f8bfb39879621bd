"""
Reference generators for items and orders
"""
import random
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from database.models import Item, Order

MAX_ATTEMPTS = 10


def generate_reference_id(now: Optional[datetime] = None) -> str:
    """Item reference: CS-YYMMDD-XXXXX-XXX (random part + milliseconds)"""
    now = now or datetime.now()
    millis = now.microsecond // 1000
    return f"CS-{now:%y%m%d}-{random.randint(0, 99999):05d}-{millis:03d}"


def generate_order_number(now: Optional[datetime] = None) -> str:
    """Order number: ORD-YYYYMMDD-NNNN"""
    now = now or datetime.now()
    return f"ORD-{now:%Y%m%d}-{random.randint(0, 9999):04d}"


def _unique(db: Session, column, generator: Callable[[], str]) -> str:
    for _ in range(MAX_ATTEMPTS):
        candidate = generator()
        if not db.query(column).filter(column == candidate).first():
            return candidate
    raise RuntimeError(f"Could not generate a unique value for {column}")


def unique_reference_id(db: Session) -> str:
    return _unique(db, Item.reference_id, generate_reference_id)


def unique_order_number(db: Session) -> str:
    return _unique(db, Order.order_number, generate_order_number)
