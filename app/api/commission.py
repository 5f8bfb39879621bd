"""
Commission Calculator Endpoints (public)
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from app.core import PayoutType
from app.models import CommissionResponse, EligibilityResponse, CommissionTier
from database.connection import get_db
from services.commission import CommissionRules, calculate_commission, check_eligibility, tier_table
from services.commission_settings import CommissionSettingsService

router = APIRouter(prefix="/api/commission", tags=["Commission"])


def get_commission_rules(db: Session = Depends(get_db)) -> CommissionRules:
    """Current admin commission settings"""
    return CommissionSettingsService(db).get_rules()


@router.get("/calculate", response_model=CommissionResponse)
async def calculate(
    price: float = Query(..., ge=0, description="Expected sale price (EUR)"),
    payout_type: str = Query(PayoutType.CASH.value, description="cash or store_credit"),
    rules: CommissionRules = Depends(get_commission_rules),
):
    """
    Commission and payout for a price

    Defaults (admins can change them under /api/admin/consignment-settings):
    - Below €50: `eligible=false` with a message
    - €50-€500: sliding scale 50% -> 20%
    - €500+: flat 20%
    - store_credit: +10% on the payout
    """
    return calculate_commission(price, payout_type, rules=rules).to_dict()


@router.get("/eligibility", response_model=EligibilityResponse)
async def eligibility(
    value: float = Query(..., ge=0, description="Estimated resale value (EUR)"),
    rules: CommissionRules = Depends(get_commission_rules),
):
    return check_eligibility(value, rules).to_dict()


@router.get("/tiers", response_model=List[CommissionTier])
async def tiers(rules: CommissionRules = Depends(get_commission_rules)):
    return tier_table(rules)
