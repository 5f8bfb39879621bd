"""
Admin Order Endpoints
"""
from fastapi import APIRouter, Depends, Query, status
from typing import List
import logging

from app.api.deps import get_order_service, get_shipping_client
from app.models import (
    ItemResponse,
    OrderCreateRequest,
    OrderDetail,
    OrderItemRequest,
    OrderStatusRequest,
    OrderSummary,
    ShippingLabelRequest,
    ShippingResponse,
    TrackingRequest,
)
from connectors.sendcloud_client import SendcloudAPIClient
from services import OrderService
from services.auth import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin/orders",
    tags=["Admin Orders"],
    dependencies=[Depends(require_admin)],
)


def order_detail(order) -> OrderDetail:
    """Order summary plus items and shipping"""
    return OrderDetail(
        **OrderService.summarize(order),
        items=[ItemResponse.from_model(i) for i in order.items],
        shipping=ShippingResponse.model_validate(order.shipping) if order.shipping else None,
    )


@router.get("", response_model=List[OrderSummary])
async def list_orders(orders: OrderService = Depends(get_order_service)):
    return [OrderService.summarize(o) for o in orders.list_orders()]


@router.get("/search", response_model=List[OrderSummary])
async def search_orders(
    q: str = Query("", description="Order number, tracking code, customer name or email"),
    orders: OrderService = Depends(get_order_service),
):
    return [OrderService.summarize(o) for o in orders.search(q)]


@router.get("/number/{order_number}", response_model=OrderDetail)
async def get_order_by_number(order_number: str, orders: OrderService = Depends(get_order_service)):
    return order_detail(orders.get_by_number(order_number))


@router.get("/{order_id}", response_model=OrderDetail)
async def get_order(order_id: int, orders: OrderService = Depends(get_order_service)):
    return order_detail(orders.get_order(order_id))


@router.post("", response_model=OrderDetail, status_code=status.HTTP_201_CREATED)
async def create_order(request: OrderCreateRequest, orders: OrderService = Depends(get_order_service)):
    order = orders.create_order(
        customer_id=request.customer_id,
        item_ids=request.item_ids,
        status=request.status,
        tracking_code=request.tracking_code,
    )
    return order_detail(order)


@router.post("/{order_id}/items", response_model=OrderDetail, status_code=status.HTTP_201_CREATED)
async def add_item(
    order_id: int,
    request: OrderItemRequest,
    orders: OrderService = Depends(get_order_service),
):
    return order_detail(orders.add_item(order_id, request.item_id))


@router.delete("/{order_id}/items/{item_id}", response_model=OrderDetail)
async def remove_item(order_id: int, item_id: int, orders: OrderService = Depends(get_order_service)):
    return order_detail(orders.remove_item(order_id, item_id))


@router.patch("/{order_id}/status", response_model=OrderDetail)
async def update_status(
    order_id: int,
    request: OrderStatusRequest,
    orders: OrderService = Depends(get_order_service),
):
    """
    awaiting_shipment -> received -> processing -> completed
    (cancelled from any open state)
    """
    return order_detail(orders.change_status(order_id, request.status))


@router.patch("/{order_id}/tracking", response_model=OrderDetail)
async def update_tracking(
    order_id: int,
    request: TrackingRequest,
    orders: OrderService = Depends(get_order_service),
):
    return order_detail(orders.set_tracking(order_id, request.tracking_code))


@router.post("/{order_id}/shipping-label", response_model=ShippingResponse, status_code=status.HTTP_201_CREATED)
async def create_shipping_label(
    order_id: int,
    request: ShippingLabelRequest = ShippingLabelRequest(),
    orders: OrderService = Depends(get_order_service),
    client: SendcloudAPIClient = Depends(get_shipping_client),
):
    """Creates a Sendcloud label; its tracking number becomes the order's tracking code"""
    return orders.create_shipping_label(order_id, client, weight_kg=request.weight_kg)
