"""
Admin Endpoints - item review/pricing/sale, intake on behalf of customers,
consignor management and the overview dashboard
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from app.api.deps import (
    get_commission_settings_service,
    get_dashboard_service,
    get_intake_service,
    get_item_service,
    get_order_service,
)
from app.api.orders import order_detail
from app.core import NotFoundError, UserRole
from app.models import (
    AdminIntakeRequest,
    AdminStatsResponse,
    AnalysisIn,
    AnalysisResponse,
    CommissionSettingsIn,
    CommissionSettingsResponse,
    ConsignorCreateRequest,
    CustomerResponse,
    ItemResponse,
    OrderDetail,
    OrderSummary,
    PricingRequest,
    SaleRequest,
    StatusRequest,
)
from database.connection import get_db
from database.models import Customer
from services import (
    CommissionSettingsService,
    DashboardService,
    IntakeService,
    ItemService,
    OrderService,
)
from services.auth import require_admin, create_user

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)


# ============================================================================
# DASHBOARD
# ============================================================================

@router.get("/dashboard", response_model=AdminStatsResponse)
async def dashboard(dashboards: DashboardService = Depends(get_dashboard_service)):
    return dashboards.admin_stats()


# ============================================================================
# CONSIGNMENT SETTINGS
# ============================================================================

@router.get("/consignment-settings", response_model=CommissionSettingsResponse)
async def get_consignment_settings(
    settings: CommissionSettingsService = Depends(get_commission_settings_service),
):
    return settings.get_settings()


@router.post("/consignment-settings", response_model=CommissionSettingsResponse)
async def update_consignment_settings(
    request: CommissionSettingsIn,
    settings: CommissionSettingsService = Depends(get_commission_settings_service),
):
    """
    Commission tiers, store-credit bonus, minimum value and program switches

    Rates are percentages at the €50/€100/€200/€500+ anchors; the scale
    is linear between them. New rates apply to later quotes only, stored
    pricing keeps its figures.
    """
    return settings.update_settings(request.model_dump())


# ============================================================================
# ITEMS
# ============================================================================

@router.get("/items", response_model=List[ItemResponse])
async def list_items(
    status: Optional[str] = Query(None, description="Item status filter"),
    customer_id: Optional[int] = Query(None),
    q: Optional[str] = Query(None, description="Title or reference id"),
    items: ItemService = Depends(get_item_service),
):
    return [
        ItemResponse.from_model(i)
        for i in items.list_items(status=status, customer_id=customer_id, search=q)
    ]


@router.get("/items/{item_id}", response_model=ItemResponse)
async def get_item(item_id: int, items: ItemService = Depends(get_item_service)):
    return ItemResponse.from_model(items.get_item(item_id), with_analysis=True)


@router.patch("/items/{item_id}/status", response_model=ItemResponse)
async def update_item_status(
    item_id: int,
    request: StatusRequest,
    items: ItemService = Depends(get_item_service),
):
    """
    Lifecycle move: pending -> analyzing -> approved -> listed,
    rejected (before listing) or returned (after listing).

    `sold` and `paid` go through /sold and /paid.
    """
    items.change_status(item_id, request.status)
    return ItemResponse.from_model(items.get_item(item_id))


@router.put("/items/{item_id}/analysis", response_model=AnalysisResponse)
async def save_analysis(
    item_id: int,
    request: AnalysisIn,
    items: ItemService = Depends(get_item_service),
):
    return items.save_analysis(item_id, request.model_dump())


@router.put("/items/{item_id}/pricing", response_model=ItemResponse)
async def set_pricing(
    item_id: int,
    request: PricingRequest,
    items: ItemService = Depends(get_item_service),
):
    """Listing price -> commission rate and suggested payout (sliding scale)"""
    items.set_pricing(
        item_id,
        listing_price=request.listing_price,
        payout_type=request.payout_type,
        average_market_price=request.average_market_price,
    )
    return ItemResponse.from_model(items.get_item(item_id))


@router.post("/items/{item_id}/sold", response_model=ItemResponse)
async def record_sale(
    item_id: int,
    request: SaleRequest,
    items: ItemService = Depends(get_item_service),
):
    items.record_sale(item_id, request.sale_price, request.payout_type)
    return ItemResponse.from_model(items.get_item(item_id))


@router.post("/items/{item_id}/paid", response_model=ItemResponse)
async def record_payout(item_id: int, items: ItemService = Depends(get_item_service)):
    items.record_payout(item_id)
    return ItemResponse.from_model(items.get_item(item_id))


# ============================================================================
# INTAKE
# ============================================================================

@router.post("/intake", response_model=OrderDetail, status_code=status.HTTP_201_CREATED)
async def admin_intake(
    request: AdminIntakeRequest,
    intake: IntakeService = Depends(get_intake_service),
    orders: OrderService = Depends(get_order_service),
):
    """Intake on behalf of a customer (created when the email is new)"""
    order = intake.submit_for(
        request.customer.model_dump(),
        [i.model_dump() for i in request.items],
    )
    return order_detail(orders.get_order(order.id))


# ============================================================================
# CONSIGNORS
# ============================================================================

@router.get("/consignors")
async def list_consignors(dashboards: DashboardService = Depends(get_dashboard_service)):
    return dashboards.list_consignors()


@router.post("/consignors", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def create_consignor(
    request: ConsignorCreateRequest,
    db: Session = Depends(get_db),
    intake: IntakeService = Depends(get_intake_service),
):
    """Customer record plus (optionally) a consignor login"""
    data = request.model_dump(exclude={"password"})
    try:
        customer = intake.find_or_create_customer(data)
        if request.password:
            create_user(
                db,
                email=customer.email,
                password=request.password,
                name=customer.name,
                role=UserRole.CONSIGNOR,
                customer_id=customer.id,
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(customer)
    logger.info(f"Consignor created by admin: {customer.email}")
    return customer


@router.get("/consignors/{customer_id}")
async def consignor_details(
    customer_id: int,
    db: Session = Depends(get_db),
    dashboards: DashboardService = Depends(get_dashboard_service),
    items: ItemService = Depends(get_item_service),
    orders: OrderService = Depends(get_order_service),
):
    customer = db.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError(f"Customer not found: {customer_id}")

    return {
        "customer": CustomerResponse.model_validate(customer),
        "stats": dashboards.consignor_summary(customer_id),
        "recent_items": [
            ItemResponse.from_model(i) for i in items.list_items(customer_id=customer_id)[:10]
        ],
        "recent_orders": [
            OrderSummary(**OrderService.summarize(o))
            for o in orders.list_orders(customer_id=customer_id)[:10]
        ],
    }
