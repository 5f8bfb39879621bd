"""
Consignor Portal Endpoints
Dashboard, own items and orders, new item submissions
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List
import logging

from app.api.deps import get_dashboard_service, get_intake_service, get_item_service, get_order_service
from app.api.orders import order_detail
from app.core import NotFoundError, TimeRange
from app.models import (
    ConsignorDashboardResponse,
    ConsignorInsightsResponse,
    IntakeRequest,
    ItemResponse,
    OrderDetail,
    OrderSummary,
)
from database.models import User
from services import DashboardService, IntakeService, ItemService, OrderService
from services.auth import require_consignor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/consignor", tags=["Consignor"])


@router.get("/dashboard", response_model=ConsignorDashboardResponse)
async def dashboard(
    user: User = Depends(require_consignor),
    dashboards: DashboardService = Depends(get_dashboard_service),
):
    """
    Items with pricing plus totals

    **stats:**
    - counts per status
    - `total_sales` / `total_payout`: sold and paid items
    - `pending_value` / `approved_value` / `listed_value`: estimated prices per stage
    """
    return dashboards.consignor_dashboard(user.customer_id)


@router.get("/insights", response_model=ConsignorInsightsResponse)
async def insights(
    time_range: TimeRange = Query(TimeRange.LAST_30_DAYS, alias="timeRange"),
    user: User = Depends(require_consignor),
    dashboards: DashboardService = Depends(get_dashboard_service),
):
    """
    Sales insights over last30days, last90days, lastYear or allTime

    Top categories, sales trend, status spread, selling speed,
    sell-through rate, recent sales and suggested next steps.
    """
    return dashboards.consignor_insights(user.customer_id, time_range)


@router.get("/items", response_model=List[ItemResponse])
async def my_items(
    user: User = Depends(require_consignor),
    items: ItemService = Depends(get_item_service),
):
    return [ItemResponse.from_model(i) for i in items.list_items(customer_id=user.customer_id)]


@router.get("/items/{item_id}", response_model=ItemResponse)
async def my_item(
    item_id: int,
    user: User = Depends(require_consignor),
    items: ItemService = Depends(get_item_service),
):
    item = items.get_item(item_id)
    if item.customer_id != user.customer_id:
        # same answer as a missing item
        raise NotFoundError(f"Item not found: {item_id}")
    return ItemResponse.from_model(item, with_analysis=True)


@router.post("/items", response_model=OrderDetail, status_code=status.HTTP_201_CREATED)
async def submit_items(
    request: IntakeRequest,
    user: User = Depends(require_consignor),
    intake: IntakeService = Depends(get_intake_service),
    orders: OrderService = Depends(get_order_service),
):
    """
    Submit items for consignment

    Creates one order (awaiting shipment) with the items as `pending`.
    Items with an estimated value under €50 are refused (422).
    """
    order = intake.submit(user.customer_id, [i.model_dump() for i in request.items])
    return order_detail(orders.get_order(order.id))


@router.get("/orders", response_model=List[OrderSummary])
async def my_orders(
    user: User = Depends(require_consignor),
    orders: OrderService = Depends(get_order_service),
):
    return [OrderService.summarize(o) for o in orders.list_orders(customer_id=user.customer_id)]


@router.get("/orders/{order_id}", response_model=OrderDetail)
async def my_order(
    order_id: int,
    user: User = Depends(require_consignor),
    orders: OrderService = Depends(get_order_service),
):
    order = orders.get_order(order_id)
    if order.customer_id != user.customer_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to view this order",
        )
    return order_detail(order)
