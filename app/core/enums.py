"""
Core Enums - statuses, roles and payout types for the consignment flow
"""
from enum import Enum


class ItemStatus(str, Enum):
    """
    Consignment item lifecycle

    pending -> analyzing -> approved -> listed -> sold -> paid
    Side exits: rejected (before listing), returned (after listing)
    """
    PENDING = "pending"
    ANALYZING = "analyzing"
    APPROVED = "approved"
    LISTED = "listed"
    SOLD = "sold"
    PAID = "paid"
    REJECTED = "rejected"
    RETURNED = "returned"

    @classmethod
    def get_all_values(cls):
        return [s.value for s in cls]

    @classmethod
    def allowed_transitions(cls, current: "ItemStatus"):
        return ITEM_TRANSITIONS.get(cls(current), set())

    @classmethod
    def can_transition(cls, current: str, target: str) -> bool:
        try:
            return cls(target) in cls.allowed_transitions(cls(current))
        except ValueError:
            return False


ITEM_TRANSITIONS = {
    ItemStatus.PENDING: {ItemStatus.ANALYZING, ItemStatus.REJECTED},
    ItemStatus.ANALYZING: {ItemStatus.APPROVED, ItemStatus.REJECTED},
    ItemStatus.APPROVED: {ItemStatus.LISTED, ItemStatus.REJECTED},
    ItemStatus.LISTED: {ItemStatus.SOLD, ItemStatus.RETURNED},
    ItemStatus.SOLD: {ItemStatus.PAID},
    ItemStatus.PAID: set(),
    ItemStatus.REJECTED: set(),
    ItemStatus.RETURNED: set(),
}


class OrderStatus(str, Enum):
    """Shipment/processing state of a consignment order"""
    AWAITING_SHIPMENT = "awaiting_shipment"
    RECEIVED = "received"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def get_all_values(cls):
        return [s.value for s in cls]

    @classmethod
    def can_transition(cls, current: str, target: str) -> bool:
        try:
            return cls(target) in ORDER_TRANSITIONS.get(cls(current), set())
        except ValueError:
            return False


ORDER_TRANSITIONS = {
    OrderStatus.AWAITING_SHIPMENT: {OrderStatus.RECEIVED, OrderStatus.CANCELLED},
    OrderStatus.RECEIVED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}


class PayoutType(str, Enum):
    """How the consignor is paid out"""
    CASH = "cash"
    STORE_CREDIT = "store_credit"

    @classmethod
    def normalize(cls, value) -> "PayoutType":
        """Accepts enum members and legacy spellings like 'storecredit'"""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.CASH

        key = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        mapping = {
            "cash": cls.CASH,
            "store_credit": cls.STORE_CREDIT,
            "storecredit": cls.STORE_CREDIT,
            "credit": cls.STORE_CREDIT,
        }
        if key not in mapping:
            raise ValueError(f'Payout type must be either "cash" or "store_credit", got {value!r}')
        return mapping[key]


class UserRole(str, Enum):
    ADMIN = "admin"
    CONSIGNOR = "consignor"


class TimeRange(str, Enum):
    """Window for consignor insights"""
    LAST_30_DAYS = "last30days"
    LAST_90_DAYS = "last90days"
    LAST_YEAR = "lastYear"
    ALL_TIME = "allTime"
