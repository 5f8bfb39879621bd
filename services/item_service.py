"""
Item Service - admin actions that move an item through its lifecycle
(review, pricing, listing, sale, payout)
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from app.core import (
    ItemStatus,
    NotFoundError,
    IneligibleItemError,
    InvalidInputError,
    InvalidStatusTransition,
)
from database.models import Item, Analysis, Pricing
from services.commission import calculate_commission, normalize_payout_type, to_cents, from_cents
from services.commission_settings import CommissionSettingsService
from services.order_service import OrderService

logger = logging.getLogger(__name__)

# statuses that only dedicated operations may set
_GUARDED_STATUSES = {
    ItemStatus.SOLD: "record a sale",
    ItemStatus.PAID: "record the payout",
}


def _item_status(value) -> ItemStatus:
    try:
        return ItemStatus(value)
    except ValueError:
        raise InvalidInputError(f"Unknown item status: {value}") from None


class ItemService:
    """Admin-side item management"""

    def __init__(self, db: Session):
        self.db = db

    def get_item(self, item_id: int) -> Item:
        item = (
            self.db.query(Item)
            .options(
                joinedload(Item.customer),
                joinedload(Item.order),
                joinedload(Item.analysis),
                joinedload(Item.pricing),
            )
            .filter(Item.id == item_id)
            .first()
        )
        if not item:
            raise NotFoundError(f"Item not found: {item_id}")
        return item

    def list_items(
        self,
        status: Optional[str] = None,
        customer_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> List[Item]:
        query = self.db.query(Item).options(
            joinedload(Item.customer),
            joinedload(Item.order),
            joinedload(Item.pricing),
        )

        if status:
            query = query.filter(Item.status == _item_status(status).value)
        if customer_id:
            query = query.filter(Item.customer_id == customer_id)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Item.title.ilike(pattern), Item.reference_id.ilike(pattern)))

        return query.order_by(Item.created_at.desc(), Item.id.desc()).all()

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def _move(self, item: Item, target: ItemStatus):
        if not ItemStatus.can_transition(item.status, target):
            raise InvalidStatusTransition("item", item.status, target.value)
        previous = item.status
        item.status = target.value
        item.updated_at = datetime.now(timezone.utc)
        logger.info(f"Item {item.reference_id}: {previous} -> {target.value}")

    def change_status(self, item_id: int, status: str) -> Item:
        """Plain lifecycle move (review, approval, listing, rejection, return)"""
        target = _item_status(status)
        item = self.get_item(item_id)

        if target in _GUARDED_STATUSES:
            raise InvalidStatusTransition(
                "item", item.status,
                f"{target.value} (use the endpoint to {_GUARDED_STATUSES[target]})",
            )
        if target == ItemStatus.LISTED and (
            item.pricing is None or item.pricing.suggested_listing_price is None
        ):
            raise InvalidStatusTransition("item", item.status, "listed (item has no listing price)")

        self._move(item, target)
        self.db.commit()
        self.db.refresh(item)
        return item

    # ------------------------------------------------------------------
    # Analysis / pricing
    # ------------------------------------------------------------------

    def save_analysis(self, item_id: int, data: Dict) -> Analysis:
        """Create or replace the admin analysis of an item"""
        item = self.get_item(item_id)

        analysis = item.analysis
        if analysis is None:
            analysis = Analysis(item_id=item.id)
            self.db.add(analysis)

        for field in ("product_type", "brand", "model", "condition", "additional_notes"):
            if field in data:
                setattr(analysis, field, data[field])
        if "accessories" in data:
            analysis.accessories = list(data["accessories"] or [])

        # pending items move into review as soon as someone analyses them
        if item.status == ItemStatus.PENDING.value:
            self._move(item, ItemStatus.ANALYZING)

        self.db.commit()
        self.db.refresh(analysis)
        return analysis

    def set_pricing(
        self,
        item_id: int,
        listing_price: float,
        payout_type: Optional[str] = None,
        average_market_price: Optional[float] = None,
    ) -> Pricing:
        """
        Set the listing price; commission rate and suggested payout come
        from the sliding scale.
        """
        item = self.get_item(item_id)
        if item.status in (ItemStatus.SOLD.value, ItemStatus.PAID.value):
            raise InvalidStatusTransition("item", item.status, "repriced")

        pricing = item.pricing
        method = normalize_payout_type(payout_type or (pricing.payout_type if pricing else None))

        rules = CommissionSettingsService(self.db).get_rules()
        quote = calculate_commission(listing_price, method, rules=rules)
        if not quote.eligible:
            raise IneligibleItemError(quote.message, reason=rules.ineligible_reason)

        if pricing is None:
            pricing = Pricing(item_id=item.id)
            self.db.add(pricing)
            item.pricing = pricing

        pricing.suggested_listing_price = to_cents(quote.sale_price)
        pricing.suggested_payout = to_cents(quote.payout_amount)
        pricing.commission_rate = quote.commission_rate_percent
        pricing.payout_type = method.value
        if average_market_price is not None:
            pricing.average_market_price = to_cents(average_market_price)

        if item.order_id is not None:
            OrderService(self.db).refresh_totals(item.order_id)
        self.db.commit()
        self.db.refresh(pricing)
        logger.info(
            f"Item {item.reference_id} priced at €{quote.sale_price:.2f} "
            f"({quote.commission_rate_percent}% commission, {method.value})"
        )
        return pricing

    # ------------------------------------------------------------------
    # Sale / payout
    # ------------------------------------------------------------------

    def record_sale(self, item_id: int, sale_price: float, payout_type: Optional[str] = None) -> Item:
        """Listed -> sold with the final commission and payout"""
        item = self.get_item(item_id)
        if not ItemStatus.can_transition(item.status, ItemStatus.SOLD):
            raise InvalidStatusTransition("item", item.status, ItemStatus.SOLD.value)

        pricing = item.pricing
        method = normalize_payout_type(payout_type or (pricing.payout_type if pricing else None))

        rules = CommissionSettingsService(self.db).get_rules()
        quote = calculate_commission(sale_price, method, rules=rules)
        if not quote.eligible:
            raise IneligibleItemError(quote.message, reason=rules.ineligible_reason)

        if pricing is None:
            pricing = Pricing(item_id=item.id)
            self.db.add(pricing)
            item.pricing = pricing

        pricing.final_sale_price = to_cents(quote.sale_price)
        pricing.final_commission = to_cents(quote.commission_amount)
        pricing.final_payout = to_cents(quote.payout_amount)
        pricing.payout_type = method.value
        pricing.commission_rate = quote.commission_rate_percent
        pricing.sold_at = datetime.now(timezone.utc)

        self._move(item, ItemStatus.SOLD)
        self.db.commit()
        self.db.refresh(item)

        logger.info(
            f"Item {item.reference_id} sold for €{quote.sale_price:.2f}, "
            f"payout €{quote.payout_amount:.2f} ({method.value})"
        )
        return item

    def record_payout(self, item_id: int) -> Item:
        """Sold -> paid"""
        item = self.get_item(item_id)
        if not ItemStatus.can_transition(item.status, ItemStatus.PAID):
            raise InvalidStatusTransition("item", item.status, ItemStatus.PAID.value)

        item.pricing.paid_at = datetime.now(timezone.utc)
        self._move(item, ItemStatus.PAID)
        self.db.commit()
        self.db.refresh(item)

        logger.info(
            f"Payout of €{from_cents(item.pricing.final_payout):.2f} recorded for {item.reference_id}"
        )
        return item
