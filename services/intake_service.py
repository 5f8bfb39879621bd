"""
Intake Service - new consignment submissions

One submission = one order (awaiting shipment) holding one or more
pending items. When the consignor gives an estimated value, the item is
checked against the consignment minimum (€50 by default) and gets a suggested price/payout.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List

from sqlalchemy.orm import Session

from app.core import ItemStatus, OrderStatus, IneligibleItemError, InvalidInputError
from database.models import Customer, Item, Order, Pricing
from services.commission import (
    CommissionRules,
    calculate_commission,
    check_eligibility,
    normalize_payout_type,
    to_cents,
)
from services.commission_settings import CommissionSettingsService
from services.order_service import OrderService
from services.references import unique_reference_id, unique_order_number

logger = logging.getLogger(__name__)


class IntakeService:
    """Creates orders and items from intake submissions"""

    def __init__(self, db: Session):
        self.db = db

    def find_or_create_customer(self, data: Dict) -> Customer:
        """Look a customer up by email; create one (or fill blanks) otherwise"""
        email = data["email"].strip().lower()
        customer = self.db.query(Customer).filter(Customer.email == email).first()

        if customer is None:
            customer = Customer(
                name=data["name"],
                email=email,
                phone=data.get("phone"),
                address=data.get("address"),
                city=data.get("city"),
                state=data.get("state"),
                postal_code=data.get("postal_code"),
                country=data.get("country") or "NL",
            )
            self.db.add(customer)
            self.db.flush()
            logger.info(f"New customer created at intake: {email}")
            return customer

        for field in ("phone", "address", "city", "state", "postal_code", "country"):
            if data.get(field) and not getattr(customer, field):
                setattr(customer, field, data[field])
        return customer

    def _validate(self, items: List[Dict], rules: CommissionRules):
        for entry in items:
            value = entry.get("estimated_value")
            if value is None:
                continue
            result = check_eligibility(value, rules)
            if not result.eligible:
                raise IneligibleItemError(
                    f"{entry.get('title', 'Item')}: {result.message}",
                    reason=result.reason,
                )

    def submit(self, customer_id: int, items: List[Dict]) -> Order:
        """
        Create the order and its items in one transaction.

        Raises:
            IneligibleItemError: an item's estimated value is under the minimum
                (nothing is written)
            InvalidInputError: no items
        """
        if not items:
            raise InvalidInputError("At least one item is required")

        rules = CommissionSettingsService(self.db).get_rules()
        self._validate(items, rules)

        try:
            order = Order(
                order_number=unique_order_number(self.db),
                customer_id=customer_id,
                status=OrderStatus.AWAITING_SHIPMENT.value,
                submission_date=datetime.now(timezone.utc),
                total_value=0,
                total_payout=0,
            )
            self.db.add(order)
            self.db.flush()

            for entry in items:
                self._create_item(order, entry, rules)
            OrderService(self.db).refresh_totals(order.id)

            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Intake failed for customer {customer_id}: {e}", exc_info=True)
            raise

        self.db.refresh(order)
        logger.info(
            f"Intake {order.order_number}: {len(items)} item(s) for customer {customer_id}"
        )
        return order

    def _create_item(self, order: Order, entry: Dict, rules: CommissionRules) -> Item:
        item = Item(
            reference_id=unique_reference_id(self.db),
            customer_id=order.customer_id,
            order_id=order.id,
            title=entry["title"],
            description=entry.get("description"),
            image_url=entry.get("image_url"),
            category=entry.get("category"),
            brand=entry.get("brand"),
            condition=entry.get("condition"),
            status=ItemStatus.PENDING.value,
        )
        self.db.add(item)
        self.db.flush()

        value = entry.get("estimated_value")
        if value is not None:
            method = normalize_payout_type(entry.get("payout_type"))
            quote = calculate_commission(value, method, rules=rules)
            item.pricing = Pricing(
                item_id=item.id,
                average_market_price=to_cents(value),
                suggested_listing_price=to_cents(quote.sale_price),
                suggested_payout=to_cents(quote.payout_amount),
                commission_rate=quote.commission_rate_percent,
                payout_type=method.value,
            )
            self.db.flush()

        return item

    def submit_for(self, customer_data: Dict, items: List[Dict]) -> Order:
        """Admin intake on behalf of a customer identified by email"""
        self._validate(items, CommissionSettingsService(self.db).get_rules())
        customer = self.find_or_create_customer(customer_data)
        return self.submit(customer.id, items)
