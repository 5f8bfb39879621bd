"""
Pydantic Models - Request/Response schemas
Money fields are EUR amounts (the database keeps cents)
"""
from pydantic import BaseModel, Field, EmailStr, field_validator, model_validator
from typing import Optional, Dict, List, Any
from datetime import date, datetime

from app.core import PayoutType, ItemStatus, OrderStatus
from services.commission import from_cents


def _payout_type(value):
    if value is None:
        return None
    return PayoutType.normalize(value).value


# ============================================================================
# AUTH
# ============================================================================

class RegisterRequest(BaseModel):
    """Consignor self-registration"""
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: str
    customer_id: Optional[int] = None
    is_active: bool
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# ============================================================================
# COMMISSION
# ============================================================================

class CommissionResponse(BaseModel):
    """Commission calculator output"""
    eligible: bool
    sale_price: float
    payout_type: str
    commission_rate: Optional[float] = Field(None, description="Fraction, e.g. 0.45")
    commission_rate_percent: Optional[float] = Field(None, description="Percentage, 1 decimal")
    commission_amount: Optional[float] = None
    payout_amount: Optional[float] = None
    store_credit_bonus: float = 0.0
    message: Optional[str] = None


class EligibilityResponse(BaseModel):
    eligible: bool
    message: Optional[str] = None
    reason: Optional[str] = None


class CommissionTier(BaseModel):
    min_price: float
    max_price: Optional[float] = None
    rate_from_percent: float
    rate_to_percent: float


class CommissionTiersIn(BaseModel):
    """Anchor rates at €50/€100/€200/€500+ and the store-credit bonus, in percent"""
    tier1_rate: float = Field(50, ge=0, le=100)
    tier2_rate: float = Field(40, ge=0, le=100)
    tier3_rate: float = Field(30, ge=0, le=100)
    tier4_rate: float = Field(20, ge=0, le=100)
    store_credit_bonus: float = Field(10, ge=0, le=100)
    minimum_value: float = Field(50, gt=0, description="Lowest accepted resale value (EUR)")

    @model_validator(mode="after")
    def _rates_decrease(self):
        rates = [self.tier1_rate, self.tier2_rate, self.tier3_rate, self.tier4_rate]
        if rates != sorted(rates, reverse=True):
            raise ValueError("Commission rates must not increase with the price")
        return self


class CommissionSettingsIn(BaseModel):
    tiers: CommissionTiersIn
    store_credit_enabled: bool = True
    direct_buyout_enabled: bool = False
    recycling_enabled: bool = True


class CommissionSettingsResponse(CommissionSettingsIn):
    updated_at: Optional[datetime] = None


# ============================================================================
# CUSTOMERS
# ============================================================================

class CustomerIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = Field(None, min_length=2, max_length=2)


class CustomerResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    class Config:
        from_attributes = True


class ConsignorCreateRequest(CustomerIn):
    """Admin-created consignor; a login is created when a password is given"""
    password: Optional[str] = Field(None, min_length=8)


# ============================================================================
# INTAKE
# ============================================================================

class IntakeItem(BaseModel):
    title: str = Field(..., min_length=3, max_length=100)
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    condition: Optional[str] = None
    estimated_value: Optional[float] = Field(None, ge=0, description="Expected resale price (EUR)")
    payout_type: Optional[str] = None

    @field_validator("payout_type")
    @classmethod
    def _normalize_payout(cls, v):
        return _payout_type(v)


class IntakeRequest(BaseModel):
    """Consignor submission - one order, one or more items"""
    items: List[IntakeItem] = Field(..., min_length=1)


class AdminIntakeRequest(IntakeRequest):
    customer: CustomerIn


# ============================================================================
# ITEMS
# ============================================================================

class AnalysisIn(BaseModel):
    product_type: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    condition: Optional[str] = None
    accessories: List[str] = Field(default_factory=list)
    additional_notes: Optional[str] = None


class AnalysisResponse(AnalysisIn):
    id: int
    item_id: int
    accessories: Optional[List[str]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PricingRequest(BaseModel):
    listing_price: float = Field(..., gt=0, description="Listing price (EUR)")
    payout_type: Optional[str] = None
    average_market_price: Optional[float] = Field(None, ge=0)

    @field_validator("payout_type")
    @classmethod
    def _normalize_payout(cls, v):
        return _payout_type(v)


class SaleRequest(BaseModel):
    sale_price: float = Field(..., gt=0, description="Final sale price (EUR)")
    payout_type: Optional[str] = None

    @field_validator("payout_type")
    @classmethod
    def _normalize_payout(cls, v):
        return _payout_type(v)


class StatusRequest(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def _known_status(cls, v):
        if v not in ItemStatus.get_all_values():
            raise ValueError(f"Unknown item status: {v}")
        return v


class PricingResponse(BaseModel):
    average_market_price: Optional[float] = None
    suggested_listing_price: Optional[float] = None
    suggested_payout: Optional[float] = None
    commission_rate: Optional[float] = None
    payout_type: str = "cash"
    final_sale_price: Optional[float] = None
    final_commission: Optional[float] = None
    final_payout: Optional[float] = None
    paid_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, pricing) -> Optional["PricingResponse"]:
        if pricing is None:
            return None
        return cls(
            average_market_price=from_cents(pricing.average_market_price),
            suggested_listing_price=from_cents(pricing.suggested_listing_price),
            suggested_payout=from_cents(pricing.suggested_payout),
            commission_rate=pricing.commission_rate,
            payout_type=pricing.payout_type or "cash",
            final_sale_price=from_cents(pricing.final_sale_price),
            final_commission=from_cents(pricing.final_commission),
            final_payout=from_cents(pricing.final_payout),
            paid_at=pricing.paid_at,
        )


class ItemResponse(BaseModel):
    id: int
    reference_id: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    condition: Optional[str] = None
    status: str
    customer_id: int
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    order_id: Optional[int] = None
    order_number: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    pricing: Optional[PricingResponse] = None
    analysis: Optional[AnalysisResponse] = None

    @classmethod
    def from_model(cls, item, with_analysis: bool = False) -> "ItemResponse":
        analysis = None
        if with_analysis and item.analysis is not None:
            analysis = AnalysisResponse.model_validate(item.analysis)
        return cls(
            id=item.id,
            reference_id=item.reference_id,
            title=item.title,
            description=item.description,
            image_url=item.image_url,
            category=item.category,
            brand=item.brand,
            condition=item.condition,
            status=item.status,
            customer_id=item.customer_id,
            customer_name=item.customer.name if item.customer else None,
            customer_email=item.customer.email if item.customer else None,
            order_id=item.order_id,
            order_number=item.order.order_number if item.order else None,
            created_at=item.created_at,
            updated_at=item.updated_at,
            pricing=PricingResponse.from_model(item.pricing),
            analysis=analysis,
        )


class StorefrontItem(BaseModel):
    reference_id: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    condition: Optional[str] = None
    price: Optional[float] = None


# ============================================================================
# ORDERS
# ============================================================================

class OrderCreateRequest(BaseModel):
    customer_id: int
    item_ids: List[int] = Field(default_factory=list)
    status: Optional[str] = None
    tracking_code: Optional[str] = None

    @field_validator("status")
    @classmethod
    def _known_status(cls, v):
        if v is not None and v not in OrderStatus.get_all_values():
            raise ValueError(f"Unknown order status: {v}")
        return v


class OrderItemRequest(BaseModel):
    item_id: int


class OrderStatusRequest(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def _known_status(cls, v):
        if v not in OrderStatus.get_all_values():
            raise ValueError(f"Unknown order status: {v}")
        return v


class TrackingRequest(BaseModel):
    tracking_code: str = Field(..., min_length=1, max_length=100)


class ShippingLabelRequest(BaseModel):
    weight_kg: float = Field(1.0, gt=0, le=70)


class ShippingResponse(BaseModel):
    label_url: Optional[str] = None
    tracking_number: Optional[str] = None
    carrier: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrderSummary(BaseModel):
    id: int
    order_number: str
    status: str
    tracking_code: Optional[str] = None
    submission_date: Optional[datetime] = None
    customer_id: int
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    item_count: int
    total_value: float
    total_payout: float
    total_sold: float
    total_final_payout: float


class OrderDetail(OrderSummary):
    items: List[ItemResponse]
    shipping: Optional[ShippingResponse] = None


# ============================================================================
# DASHBOARDS
# ============================================================================

class ConsignorDashboardResponse(BaseModel):
    items: List[Dict[str, Any]]
    stats: Dict[str, Any]


class CategoryCount(BaseModel):
    name: str
    value: int


class TrendPoint(BaseModel):
    date: str
    value: float


class StatusCount(BaseModel):
    status: str
    count: int


class InsightsPerformance(BaseModel):
    average_days_to_sell: float
    sell_through_rate: float = Field(..., description="Sold items / all items, 0-1")
    total_revenue: float
    average_price_point: float


class RecentSale(BaseModel):
    id: int
    reference_id: str
    name: str
    sold_date: Optional[date] = None
    price: float
    category: str


class RecommendedAction(BaseModel):
    type: str = Field(..., description="success, warning or info")
    message: str


class ConsignorInsightsResponse(BaseModel):
    time_range: str
    top_selling_categories: List[CategoryCount]
    sales_trend: List[TrendPoint]
    item_status_distribution: List[StatusCount]
    performance: InsightsPerformance
    recent_sales: List[RecentSale]
    recommended_actions: List[RecommendedAction]


class AdminStatsResponse(BaseModel):
    total_intakes: int
    pending_analysis: int
    active_listings: int
    sold_items: int
    paid_items: int
    total_orders: int
    total_consignors: int
    total_sales: float
    total_payouts: float
    commission_earned: float
    items_by_status: Dict[str, int]


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    timestamp: datetime
    database_connection: str
    shipping_connection: str
    version: str
