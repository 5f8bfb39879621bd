"""
Shared router dependencies
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import get_settings
from connectors.sendcloud_client import SendcloudAPIClient
from database.connection import get_db
from services import ItemService, OrderService, IntakeService, DashboardService, CommissionSettingsService


def get_shipping_client() -> SendcloudAPIClient:
    """SendcloudAPIClient dependency"""
    settings = get_settings()
    return SendcloudAPIClient(
        api_url=settings.sendcloud_api_url,
        api_key=settings.sendcloud_api_key,
        api_secret=settings.sendcloud_api_secret,
    )


def get_item_service(db: Session = Depends(get_db)) -> ItemService:
    return ItemService(db)


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_intake_service(db: Session = Depends(get_db)) -> IntakeService:
    return IntakeService(db)


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    return DashboardService(db)


def get_commission_settings_service(db: Session = Depends(get_db)) -> CommissionSettingsService:
    return CommissionSettingsService(db)
