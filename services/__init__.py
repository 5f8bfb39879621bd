"""Services module"""
from .item_service import ItemService
from .order_service import OrderService
from .intake_service import IntakeService
from .dashboard import DashboardService
from .commission_settings import CommissionSettingsService

__all__ = [
    "ItemService",
    "OrderService",
    "IntakeService",
    "DashboardService",
    "CommissionSettingsService",
]
