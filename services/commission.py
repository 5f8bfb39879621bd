"""
Commission Service - sliding-scale consignment commission

Anchor points (rate decreases linearly inside each band):
- €50  -> 50%
- €100 -> 40%
- €200 -> 30%
- €500 and above -> flat 20%

Items under €50 are not eligible. Store credit payouts get a 10% bonus
on top of the cash payout.

Those are the defaults; admins can change the anchor rates, the bonus and
the minimum (see services/commission_settings.py), which arrive here as a
CommissionRules. Every price/payout figure in the API goes through this module.
"""
import logging
import math
from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Tuple, Union

from app.core import PayoutType, CommissionError

logger = logging.getLogger(__name__)

Number = Union[int, float, Decimal]

# band edges the anchor rates belong to
BAND_EDGES = (Decimal("50"), Decimal("100"), Decimal("200"), Decimal("500"))

_CENT = Decimal("0.01")
_TENTH = Decimal("0.1")


def _eur(amount: Decimal) -> str:
    if amount == amount.to_integral_value():
        return f"€{amount:.0f}"
    return f"€{amount:.2f}"


@dataclass(frozen=True)
class CommissionRules:
    """Anchor rates and bonus as fractions, minimum in EUR"""
    tier1_rate: Decimal = Decimal("0.50")
    tier2_rate: Decimal = Decimal("0.40")
    tier3_rate: Decimal = Decimal("0.30")
    tier4_rate: Decimal = Decimal("0.20")
    store_credit_bonus: Decimal = Decimal("0.10")
    minimum_value: Decimal = Decimal("50")
    store_credit_enabled: bool = True

    @property
    def tiers(self) -> Tuple:
        """(band start, band end, rate at start, rate at end); end=None means open-ended"""
        first, second, third, last = BAND_EDGES
        return (
            (first, second, self.tier1_rate, self.tier2_rate),
            (second, third, self.tier2_rate, self.tier3_rate),
            (third, last, self.tier3_rate, self.tier4_rate),
            (last, None, self.tier4_rate, self.tier4_rate),
        )

    @property
    def ineligible_message(self) -> str:
        return (
            f"Items with an expected resale price below {_eur(self.minimum_value)} "
            "are not eligible for consignment."
        )

    @property
    def ineligible_reason(self) -> str:
        return (
            "Due to handling costs, margin requirements, and resale risk, we can only "
            f"accept items with a resale value of {_eur(self.minimum_value)} or more."
        )


DEFAULT_RULES = CommissionRules()

MINIMUM_ELIGIBLE_PRICE = DEFAULT_RULES.minimum_value
STORE_CREDIT_BONUS = DEFAULT_RULES.store_credit_bonus
COMMISSION_TIERS = DEFAULT_RULES.tiers
INELIGIBLE_MESSAGE = DEFAULT_RULES.ineligible_message
INELIGIBLE_REASON = DEFAULT_RULES.ineligible_reason


@dataclass
class CommissionQuote:
    """Result of a commission calculation (amounts in EUR)"""
    eligible: bool
    sale_price: float
    payout_type: str
    commission_rate: Optional[float] = None          # fraction, e.g. 0.45
    commission_rate_percent: Optional[float] = None  # 45.0
    commission_amount: Optional[float] = None
    payout_amount: Optional[float] = None
    store_credit_bonus: float = 0.0
    message: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class EligibilityResult:
    eligible: bool
    message: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)


def _to_decimal(value: Number, field: str = "Sale price") -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise CommissionError(f"{field} must be a positive number")
    if isinstance(value, float) and not math.isfinite(value):
        raise CommissionError(f"{field} must be a positive number")

    amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    if not amount.is_finite() or amount < 0:
        raise CommissionError(f"{field} must be a positive number")
    return amount


def _money(amount: Decimal) -> Decimal:
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


def _rate_for(price: Decimal, rules: CommissionRules) -> Decimal:
    tiers = rules.tiers
    for low, high, start_rate, end_rate in tiers:
        if price < low:
            continue
        if high is None:
            return start_rate
        if price < high:
            position = (price - low) / (high - low)
            return start_rate - position * (start_rate - end_rate)

    # below the first band (minimum lowered under €50): first anchor rate
    return tiers[0][2]


def normalize_payout_type(value) -> PayoutType:
    """PayoutType.normalize, reported as a CommissionError"""
    try:
        return PayoutType.normalize(value)
    except ValueError as e:
        raise CommissionError(str(e)) from e


def commission_rate_for(sale_price: Number, rules: Optional[CommissionRules] = None) -> float:
    """Commission rate (fraction) for a sale price, ignoring eligibility"""
    return float(_rate_for(_to_decimal(sale_price), rules or DEFAULT_RULES))


def check_eligibility(estimated_value: Number, rules: Optional[CommissionRules] = None) -> EligibilityResult:
    """
    Is an item with this estimated resale value accepted for consignment?
    """
    rules = rules or DEFAULT_RULES
    value = _money(_to_decimal(estimated_value, field="Estimated resale value"))

    if value < rules.minimum_value:
        return EligibilityResult(
            eligible=False,
            message=rules.ineligible_message,
            reason=rules.ineligible_reason,
        )

    return EligibilityResult(eligible=True)


def calculate_commission(
    sale_price: Number,
    payout_type=PayoutType.CASH,
    rules: Optional[CommissionRules] = None,
) -> CommissionQuote:
    """
    Commission and payout for a sale price

    Args:
        sale_price: Sale (or expected resale) price in EUR
        payout_type: "cash" or "store_credit" (legacy "storecredit" accepted)
        rules: admin commission settings; defaults when omitted

    Returns:
        CommissionQuote - eligible=False with a message below the minimum

    Raises:
        CommissionError: negative/non-numeric price, unknown payout type,
            or store credit while it is switched off
    """
    rules = rules or DEFAULT_RULES
    price = _money(_to_decimal(sale_price))
    method = normalize_payout_type(payout_type)

    if method == PayoutType.STORE_CREDIT and not rules.store_credit_enabled:
        raise CommissionError("Store credit payouts are currently disabled")

    if price < rules.minimum_value:
        return CommissionQuote(
            eligible=False,
            sale_price=float(price),
            payout_type=method.value,
            message=rules.ineligible_message,
        )

    rate = _rate_for(price, rules)
    commission = _money(price * rate)
    payout = price - commission

    bonus = Decimal("0")
    if method == PayoutType.STORE_CREDIT:
        bonus = _money(payout * rules.store_credit_bonus)
        payout = payout + bonus

    return CommissionQuote(
        eligible=True,
        sale_price=float(price),
        payout_type=method.value,
        commission_rate=float(rate),
        commission_rate_percent=float((rate * 100).quantize(_TENTH, rounding=ROUND_HALF_UP)),
        commission_amount=float(commission),
        payout_amount=float(payout),
        store_credit_bonus=float(bonus),
    )


def tier_table(rules: Optional[CommissionRules] = None) -> List[Dict]:
    """Commission bands for display"""
    return [
        {
            "min_price": float(low),
            "max_price": float(high) if high is not None else None,
            "rate_from_percent": float(start_rate * 100),
            "rate_to_percent": float(end_rate * 100),
        }
        for low, high, start_rate, end_rate in (rules or DEFAULT_RULES).tiers
    ]


def to_cents(amount: Optional[Number]) -> Optional[int]:
    if amount is None:
        return None
    return int((_to_decimal(amount, field="Amount") * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: Optional[int]) -> Optional[float]:
    if cents is None:
        return None
    return cents / 100
