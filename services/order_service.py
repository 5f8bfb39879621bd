"""
Order Service - consignment orders (groups of items shipped together)
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from app.core import OrderStatus, NotFoundError, InvalidInputError, InvalidStatusTransition
from database.models import Order, Item, Customer, Pricing, Shipping
from services.commission import from_cents
from services.references import unique_order_number

logger = logging.getLogger(__name__)


def _order_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidInputError(f"Unknown order status: {value}") from None


class OrderService:
    """Order lookup, grouping and shipping"""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Order).options(
            joinedload(Order.customer),
            joinedload(Order.items).joinedload(Item.pricing),
            joinedload(Order.shipping),
        )

    def get_order(self, order_id: int) -> Order:
        order = self._query().filter(Order.id == order_id).first()
        if not order:
            raise NotFoundError(f"Order not found: {order_id}")
        return order

    def get_by_number(self, order_number: str) -> Order:
        order = self._query().filter(Order.order_number == order_number).first()
        if not order:
            raise NotFoundError(f"Order not found: {order_number}")
        return order

    def list_orders(self, customer_id: Optional[int] = None) -> List[Order]:
        query = self._query()
        if customer_id is not None:
            query = query.filter(Order.customer_id == customer_id)
        return query.order_by(Order.created_at.desc(), Order.id.desc()).all()

    def search(self, text: str) -> List[Order]:
        """Match order number, tracking code, customer name or email"""
        if not text or not text.strip():
            return []

        pattern = f"%{text.strip()}%"
        return (
            self._query()
            .join(Customer, Order.customer_id == Customer.id)
            .filter(
                or_(
                    Order.order_number.ilike(pattern),
                    Order.tracking_code.ilike(pattern),
                    Customer.name.ilike(pattern),
                    Customer.email.ilike(pattern),
                )
            )
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    @staticmethod
    def summarize(order: Order) -> Dict:
        """Order row for admin tables"""
        items = order.items or []
        sold_total = sum(
            (i.pricing.final_sale_price or 0) for i in items if i.pricing is not None
        )
        payout_total = sum(
            (i.pricing.final_payout or 0) for i in items if i.pricing is not None
        )
        return {
            "id": order.id,
            "order_number": order.order_number,
            "status": order.status,
            "tracking_code": order.tracking_code,
            "submission_date": order.submission_date,
            "customer_id": order.customer_id,
            "customer_name": order.customer.name if order.customer else None,
            "customer_email": order.customer.email if order.customer else None,
            "item_count": len(items),
            "total_value": from_cents(order.total_value or 0),
            "total_payout": from_cents(order.total_payout or 0),
            "total_sold": from_cents(sold_total),
            "total_final_payout": from_cents(payout_total),
        }

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_order(
        self,
        customer_id: int,
        item_ids: Optional[List[int]] = None,
        status: Optional[str] = None,
        tracking_code: Optional[str] = None,
    ) -> Order:
        if not self.db.get(Customer, customer_id):
            raise NotFoundError(f"Customer not found: {customer_id}")

        order = Order(
            order_number=unique_order_number(self.db),
            customer_id=customer_id,
            status=_order_status(status or OrderStatus.AWAITING_SHIPMENT).value,
            tracking_code=tracking_code,
            submission_date=datetime.now(timezone.utc),
        )
        self.db.add(order)
        try:
            self.db.flush()
            for item_id in item_ids or []:
                self._attach(order, item_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {order.order_number} created for customer {customer_id}")
        return self.get_order(order.id)

    def refresh_totals(self, order_id: int) -> Order:
        """Recompute total_value / total_payout (cents) from the items' suggested pricing; caller commits"""
        self.db.flush()
        value, payout = (
            self.db.query(
                func.coalesce(func.sum(Pricing.suggested_listing_price), 0),
                func.coalesce(func.sum(Pricing.suggested_payout), 0),
            )
            .select_from(Item)
            .join(Pricing, Pricing.item_id == Item.id)
            .filter(Item.order_id == order_id)
            .one()
        )
        order = self.db.get(Order, order_id)
        order.total_value = int(value)
        order.total_payout = int(payout)
        return order

    def _attach(self, order: Order, item_id: int) -> Item:
        item = self.db.get(Item, item_id)
        if not item:
            raise NotFoundError(f"Item not found: {item_id}")
        if item.customer_id != order.customer_id:
            raise InvalidInputError(f"Item {item_id} belongs to a different customer")

        previous_order_id = item.order_id
        item.order_id = order.id
        self.refresh_totals(order.id)
        if previous_order_id is not None and previous_order_id != order.id:
            self.refresh_totals(previous_order_id)
        return item

    def add_item(self, order_id: int, item_id: int) -> Order:
        order = self.get_order(order_id)
        try:
            self._attach(order, item_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self.get_order(order_id)

    def remove_item(self, order_id: int, item_id: int) -> Order:
        order = self.get_order(order_id)
        item = self.db.get(Item, item_id)
        if not item or item.order_id != order.id:
            raise NotFoundError(f"Order item not found: order {order_id}, item {item_id}")
        item.order_id = None
        self.refresh_totals(order.id)
        self.db.commit()
        return self.get_order(order_id)

    def change_status(self, order_id: int, status: str) -> Order:
        target = _order_status(status)
        order = self.get_order(order_id)
        if not OrderStatus.can_transition(order.status, target):
            raise InvalidStatusTransition("order", order.status, target.value)

        order.status = target.value
        order.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        logger.info(f"Order {order.order_number} -> {target.value}")
        return self.get_order(order_id)

    def set_tracking(self, order_id: int, tracking_code: str) -> Order:
        order = self.get_order(order_id)
        order.tracking_code = tracking_code.strip()
        order.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        return self.get_order(order_id)

    def create_shipping_label(self, order_id: int, client, weight_kg: float = 1.0) -> Shipping:
        """
        Request a label from the shipping connector and store it.
        The tracking number becomes the order's tracking code.
        """
        order = self.get_order(order_id)
        customer = order.customer

        label = client.create_label(
            to_address={
                "name": customer.name,
                "address": customer.address,
                "city": customer.city,
                "postal_code": customer.postal_code,
                "country": customer.country or "NL",
                "email": customer.email,
            },
            parcel={"weight": weight_kg, "order_number": order.order_number},
        )

        shipping = order.shipping
        if shipping is None:
            shipping = Shipping(order_id=order.id)
            self.db.add(shipping)

        shipping.label_url = label["label_url"]
        shipping.tracking_number = label["tracking_number"]
        shipping.carrier = label["carrier"]
        order.tracking_code = label["tracking_number"]

        self.db.commit()
        self.db.refresh(shipping)
        logger.info(
            f"Shipping label for {order.order_number}: {shipping.carrier} {shipping.tracking_number}"
        )
        return shipping
