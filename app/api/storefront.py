"""
Storefront Endpoints - public list of items for sale
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional

from app.core import ItemStatus
from app.models import StorefrontItem
from database.connection import get_db
from database.models import Item
from services.commission import from_cents

router = APIRouter(prefix="/api/storefront", tags=["Storefront"])


@router.get("/items", response_model=List[StorefrontItem])
async def listed_items(
    category: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Listed items with their asking price"""
    query = (
        db.query(Item)
        .options(joinedload(Item.pricing))
        .filter(Item.status == ItemStatus.LISTED.value)
    )
    if category:
        query = query.filter(Item.category == category)

    return [
        StorefrontItem(
            reference_id=item.reference_id,
            title=item.title,
            description=item.description,
            image_url=item.image_url,
            category=item.category,
            brand=item.brand,
            condition=item.condition,
            price=from_cents(item.pricing.suggested_listing_price) if item.pricing else None,
        )
        for item in query.order_by(Item.updated_at.desc(), Item.id.desc()).all()
    ]
