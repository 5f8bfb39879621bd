"""
Dashboard Service - consignor portal and admin overview numbers
"""
import logging
import math
from collections import Counter, defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from app.core import ItemStatus, TimeRange
from database.models import Customer, Item, Order, Pricing, User
from services.commission import from_cents

logger = logging.getLogger(__name__)


def item_overview(item: Item) -> Dict:
    """Item row as the consignor dashboard shows it (EUR amounts)"""
    pricing = item.pricing
    return {
        "id": item.id,
        "reference_id": item.reference_id,
        "title": item.title,
        "image_url": item.image_url,
        "status": item.status,
        "order_id": item.order_id,
        "created_at": item.created_at,
        "estimated_price": from_cents(pricing.suggested_listing_price) if pricing else None,
        "commission_rate": pricing.commission_rate if pricing else None,
        "payout_type": pricing.payout_type if pricing else "cash",
        "estimated_payout": from_cents(pricing.suggested_payout) if pricing else None,
        "final_sale_price": from_cents(pricing.final_sale_price) if pricing else None,
        "payout_amount": from_cents(pricing.final_payout) if pricing else None,
    }


class DashboardService:
    """Aggregations over items and orders"""

    def __init__(self, db: Session):
        self.db = db

    def consignor_dashboard(self, customer_id: int) -> Dict:
        """
        Items with pricing plus stats for one consignor

        Returns:
            {
                'items': [...],
                'stats': {counts per status, totals, value per stage, distribution}
            }
        """
        items = (
            self.db.query(Item)
            .options(joinedload(Item.pricing))
            .filter(Item.customer_id == customer_id)
            .order_by(Item.created_at.desc(), Item.id.desc())
            .all()
        )
        rows = [item_overview(i) for i in items]
        return {"items": rows, "stats": self._consignor_stats(rows)}

    @staticmethod
    def _consignor_stats(rows: List[Dict]) -> Dict:
        counts = Counter(r["status"] for r in rows)

        total_sales = 0.0
        total_payout = 0.0
        paid_out = 0.0
        for r in rows:
            if r["status"] in (ItemStatus.SOLD.value, ItemStatus.PAID.value) and r["final_sale_price"]:
                total_sales += r["final_sale_price"]
                total_payout += r["payout_amount"] or 0
                if r["status"] == ItemStatus.PAID.value:
                    paid_out += r["payout_amount"] or 0

        def stage_value(status: ItemStatus, key: str = "estimated_price") -> float:
            return round(sum(r[key] or 0 for r in rows if r["status"] == status.value), 2)

        return {
            "items_count": len(rows),
            "pending_count": counts.get(ItemStatus.PENDING.value, 0),
            "analyzing_count": counts.get(ItemStatus.ANALYZING.value, 0),
            "approved_count": counts.get(ItemStatus.APPROVED.value, 0),
            "listed_count": counts.get(ItemStatus.LISTED.value, 0),
            "sold_count": counts.get(ItemStatus.SOLD.value, 0),
            "paid_count": counts.get(ItemStatus.PAID.value, 0),
            "rejected_count": counts.get(ItemStatus.REJECTED.value, 0),
            "total_sales": round(total_sales, 2),
            "total_payout": round(total_payout, 2),
            "paid_out": round(paid_out, 2),
            "outstanding_payout": round(total_payout - paid_out, 2),
            "pending_value": stage_value(ItemStatus.PENDING),
            "approved_value": stage_value(ItemStatus.APPROVED),
            "listed_value": stage_value(ItemStatus.LISTED),
            "sold_value": stage_value(ItemStatus.SOLD, key="final_sale_price"),
            "status_distribution": [
                {"status": status, "count": count} for status, count in sorted(counts.items())
            ],
        }

    def admin_stats(self) -> Dict:
        """Overview numbers for the admin dashboard"""
        by_status = dict(
            self.db.query(Item.status, func.count(Item.id)).group_by(Item.status).all()
        )

        sold_statuses = [ItemStatus.SOLD.value, ItemStatus.PAID.value]
        sales, payouts, commission = (
            self.db.query(
                func.coalesce(func.sum(Pricing.final_sale_price), 0),
                func.coalesce(func.sum(Pricing.final_payout), 0),
                func.coalesce(func.sum(Pricing.final_commission), 0),
            )
            .join(Item, Pricing.item_id == Item.id)
            .filter(Item.status.in_(sold_statuses))
            .one()
        )

        return {
            "total_intakes": sum(by_status.values()),
            "pending_analysis": by_status.get(ItemStatus.PENDING.value, 0)
            + by_status.get(ItemStatus.ANALYZING.value, 0),
            "active_listings": by_status.get(ItemStatus.LISTED.value, 0),
            "sold_items": by_status.get(ItemStatus.SOLD.value, 0) + by_status.get(ItemStatus.PAID.value, 0),
            "paid_items": by_status.get(ItemStatus.PAID.value, 0),
            "total_orders": self.db.query(func.count(Order.id)).scalar() or 0,
            "total_consignors": self.db.query(func.count(Customer.id)).scalar() or 0,
            "total_sales": from_cents(int(sales)),
            "total_payouts": from_cents(int(payouts)),
            "commission_earned": from_cents(int(commission)),
            "items_by_status": by_status,
        }

    def consignor_summary(self, customer_id: int) -> Dict:
        """Short stats block used on the admin consignor pages"""
        by_status = dict(
            self.db.query(Item.status, func.count(Item.id))
            .filter(Item.customer_id == customer_id)
            .group_by(Item.status)
            .all()
        )
        total_payout = (
            self.db.query(func.coalesce(func.sum(Pricing.final_payout), 0))
            .join(Item, Pricing.item_id == Item.id)
            .filter(Item.customer_id == customer_id)
            .scalar()
        )
        return {
            "total_items": sum(by_status.values()),
            "items_by_status": [{"status": s, "count": c} for s, c in sorted(by_status.items())],
            "total_orders": self.db.query(func.count(Order.id))
            .filter(Order.customer_id == customer_id)
            .scalar() or 0,
            "total_payout": from_cents(int(total_payout or 0)),
        }

    def list_consignors(self) -> List[Dict]:
        customers = self.db.query(Customer).order_by(Customer.name).all()
        item_counts = dict(
            self.db.query(Item.customer_id, func.count(Item.id)).group_by(Item.customer_id).all()
        )
        accounts = {
            u.customer_id: u
            for u in self.db.query(User).filter(User.customer_id.isnot(None)).all()
        }
        return [
            {
                "id": c.id,
                "name": c.name,
                "email": c.email,
                "phone": c.phone,
                "city": c.city,
                "country": c.country,
                "item_count": item_counts.get(c.id, 0),
                "has_account": c.id in accounts,
            }
            for c in customers
        ]

    # ------------------------------------------------------------------
    # Insights
    # ------------------------------------------------------------------

    def consignor_insights(self, customer_id: int, time_range: TimeRange = TimeRange.LAST_30_DAYS) -> Dict:
        """
        Sales insights for one consignor over a time window

        Items count when they were created inside the window.

        Returns:
            {
                'time_range': ...,
                'top_selling_categories': [{'name', 'value'}] (top 5, sold items),
                'sales_trend': [{'date', 'value'}] (EUR per bucket),
                'item_status_distribution': [{'status', 'count'}],
                'performance': {average_days_to_sell, sell_through_rate,
                                total_revenue, average_price_point},
                'recent_sales': [...] (latest 5),
                'recommended_actions': [{'type', 'message'}]
            }
        """
        time_range = TimeRange(time_range)
        now = datetime.now(timezone.utc)

        has_items = (
            self.db.query(Item.id).filter(Item.customer_id == customer_id).first() is not None
        )
        if not has_items:
            return self._empty_insights(time_range)

        window = [Item.customer_id == customer_id]
        cutoff = insights_cutoff(time_range, now)
        if cutoff is not None:
            window.append(or_(Item.created_at.is_(None), Item.created_at >= cutoff))

        by_status = dict(
            self.db.query(Item.status, func.count(Item.id))
            .filter(*window)
            .group_by(Item.status)
            .all()
        )
        total_items = sum(by_status.values())

        sold_window = window + [Item.status.in_(SOLD_STATUSES)]
        revenue_cents, sold_count = (
            self.db.query(
                func.coalesce(func.sum(Pricing.final_sale_price), 0),
                func.count(Item.id),
            )
            .select_from(Item)
            .outerjoin(Pricing, Pricing.item_id == Item.id)
            .filter(*sold_window)
            .one()
        )

        categories = Counter()
        for category, count in (
            self.db.query(Item.category, func.count(Item.id))
            .filter(*sold_window)
            .group_by(Item.category)
            .all()
        ):
            categories[category or UNCATEGORIZED] += count

        sales = (
            self.db.query(Item, Pricing)
            .outerjoin(Pricing, Pricing.item_id == Item.id)
            .filter(*sold_window)
            .all()
        )

        distinct_categories = (
            self.db.query(func.count(func.distinct(Item.category)))
            .filter(*window)
            .scalar()
        ) or 0

        total_revenue = from_cents(int(revenue_cents))
        performance = {
            "average_days_to_sell": _average_days_to_sell(sales),
            "sell_through_rate": round(sold_count / total_items, 3) if total_items else 0.0,
            "total_revenue": total_revenue,
            "average_price_point": round(total_revenue / sold_count, 2) if sold_count else 0.0,
        }

        return {
            "time_range": time_range.value,
            "top_selling_categories": [
                {"name": name, "value": count}
                for name, count in sorted(categories.items(), key=lambda c: (-c[1], c[0]))[:5]
            ],
            "sales_trend": sales_trend(sales, time_range, now),
            "item_status_distribution": [
                {"status": status, "count": count}
                for status, count in sorted(by_status.items(), key=lambda s: (-s[1], s[0]))
            ],
            "performance": performance,
            "recent_sales": _recent_sales(sales),
            "recommended_actions": recommended_actions(total_items, distinct_categories, performance),
        }

    @staticmethod
    def _empty_insights(time_range: TimeRange) -> Dict:
        return {
            "time_range": time_range.value,
            "top_selling_categories": [],
            "sales_trend": [],
            "item_status_distribution": [],
            "performance": {
                "average_days_to_sell": 0.0,
                "sell_through_rate": 0.0,
                "total_revenue": 0.0,
                "average_price_point": 0.0,
            },
            "recent_sales": [],
            "recommended_actions": [
                {"type": "info", "message": "Start consigning items to see personalized insights."}
            ],
        }


# ============================================================================
# INSIGHT HELPERS
# ============================================================================

SOLD_STATUSES = (ItemStatus.SOLD.value, ItemStatus.PAID.value)
UNCATEGORIZED = "Uncategorized"

# time range -> (points, days per point); None means calendar months
TREND_BUCKETS = {
    TimeRange.LAST_30_DAYS: (30, 1),
    TimeRange.LAST_90_DAYS: (30, 3),
    TimeRange.LAST_YEAR: (12, None),
    TimeRange.ALL_TIME: (12, 30),
}


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; they are UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _months_back(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


def insights_cutoff(time_range: TimeRange, now: datetime) -> Optional[datetime]:
    """Earliest creation time inside the window; None for all time"""
    if time_range == TimeRange.LAST_30_DAYS:
        return now - timedelta(days=30)
    if time_range == TimeRange.LAST_90_DAYS:
        return now - timedelta(days=90)
    if time_range == TimeRange.LAST_YEAR:
        try:
            return now.replace(year=now.year - 1)
        except ValueError:
            # 29 February
            return now.replace(year=now.year - 1, day=28)
    return None


def sales_trend(sales: List, time_range: TimeRange, now: datetime) -> List[Dict]:
    """Sale revenue per bucket, oldest first, empty buckets included"""
    points, days = TREND_BUCKETS[time_range]
    today = now.date()

    revenue = defaultdict(int)
    for _, pricing in sales:
        if pricing is None or pricing.sold_at is None:
            continue
        sold_on = _utc(pricing.sold_at).date()
        if days is None:
            key = (sold_on.year, sold_on.month)
        else:
            offset = (today - sold_on).days
            if offset < 0:
                continue
            key = offset // days
        revenue[key] += pricing.final_sale_price or 0

    trend = []
    for i in range(points - 1, -1, -1):
        if days is None:
            month = _months_back(today, i)
            label, key = f"{month.year:04d}-{month.month:02d}", (month.year, month.month)
        else:
            label, key = (today - timedelta(days=i * days)).isoformat(), i
        trend.append({"date": label, "value": from_cents(revenue.get(key, 0))})
    return trend


def _average_days_to_sell(sales: List) -> float:
    durations = []
    for item, pricing in sales:
        if pricing is None or pricing.sold_at is None or item.created_at is None:
            continue
        seconds = (_utc(pricing.sold_at) - _utc(item.created_at)).total_seconds()
        if seconds >= 0:
            durations.append(math.ceil(seconds / 86400))

    if not durations:
        return 0.0
    return round(sum(durations) / len(durations), 1)


def _recent_sales(sales: List, limit: int = 5) -> List[Dict]:
    def sold_at(row):
        pricing = row[1]
        if pricing is None or pricing.sold_at is None:
            return datetime.min.replace(tzinfo=timezone.utc)
        return _utc(pricing.sold_at)

    recent = []
    for item, pricing in sorted(sales, key=sold_at, reverse=True)[:limit]:
        recent.append({
            "id": item.id,
            "reference_id": item.reference_id,
            "name": item.title or f"Item #{item.reference_id}",
            "sold_date": _utc(pricing.sold_at).date() if pricing and pricing.sold_at else None,
            "price": from_cents(pricing.final_sale_price or 0) if pricing else 0.0,
            "category": item.category or UNCATEGORIZED,
        })
    return recent


def recommended_actions(total_items: int, distinct_categories: int, performance: Dict) -> List[Dict]:
    """Advice based on sell-through, selling speed and category spread"""
    if total_items == 0:
        return [{
            "type": "info",
            "message": "Start consigning items to see personalized insights and recommendations.",
        }]

    actions = []
    rate = performance["sell_through_rate"]
    if rate < 0.3:
        actions.append({
            "type": "warning",
            "message": "Your sell-through rate is below average. Consider adjusting your pricing "
                       "strategy or focusing on more in-demand categories.",
        })
    elif rate > 0.7:
        actions.append({
            "type": "success",
            "message": "Your sell-through rate is excellent! Consider consigning more items "
                       "to maximize your earnings.",
        })

    days = performance["average_days_to_sell"]
    if days > 30:
        actions.append({
            "type": "info",
            "message": "Your items are taking longer than average to sell. Consider optimizing "
                       "item descriptions and photos.",
        })
    elif 0 < days < 14:
        actions.append({
            "type": "success",
            "message": "Your items sell quickly! You might be able to increase your prices slightly.",
        })

    if distinct_categories < 3 and total_items > 5:
        actions.append({
            "type": "info",
            "message": "Consider diversifying the types of items you consign to reach more "
                       "potential buyers.",
        })

    if not actions:
        actions.append({
            "type": "info",
            "message": "Your consignment performance is on track. Continue to add quality items "
                       "to increase your earnings.",
        })
    return actions
