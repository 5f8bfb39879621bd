from decimal import Decimal

import pytest

from app.core import CommissionError
from services.commission import (
    CommissionRules,
    calculate_commission,
    check_eligibility,
    commission_rate_for,
    tier_table,
    to_cents,
    from_cents,
    INELIGIBLE_MESSAGE,
)


def test_below_threshold_is_ineligible():
    quote = calculate_commission(40, "cash")
    assert quote.eligible is False
    assert quote.message == INELIGIBLE_MESSAGE
    assert quote.commission_amount is None
    assert quote.payout_amount is None


def test_threshold_price_is_eligible_at_fifty_percent():
    quote = calculate_commission(50)
    assert quote.eligible is True
    assert quote.commission_rate == pytest.approx(0.50)
    assert quote.commission_amount == 25.00
    assert quote.payout_amount == 25.00


def test_first_band_interpolates():
    quote = calculate_commission(75, "cash")
    assert quote.commission_rate == pytest.approx(0.45)
    assert quote.commission_rate_percent == 45.0
    assert quote.commission_amount == 33.75
    assert quote.payout_amount == 41.25


def test_second_band_midpoint():
    quote = calculate_commission(150)
    assert quote.commission_rate == pytest.approx(0.35)
    assert quote.commission_amount == 52.50
    assert quote.payout_amount == 97.50


def test_third_band():
    quote = calculate_commission(300)
    assert quote.commission_rate_percent == 26.7
    assert quote.commission_amount == 80.00
    assert quote.payout_amount == 220.00


def test_flat_rate_from_five_hundred():
    for price in (500, 750, 2500):
        quote = calculate_commission(price)
        assert quote.commission_rate == pytest.approx(0.20)
    assert calculate_commission(750).payout_amount == 600.00


@pytest.mark.parametrize("boundary, rate", [(100, 0.40), (200, 0.30), (500, 0.20)])
def test_rate_is_continuous_at_band_edges(boundary, rate):
    assert commission_rate_for(boundary) == pytest.approx(rate)
    assert commission_rate_for(boundary - 0.01) == pytest.approx(rate, abs=1e-4)


def test_rate_never_increases_with_price():
    prices = [50 + step * 2.5 for step in range(300)]
    rates = [commission_rate_for(p) for p in prices]
    assert all(a >= b for a, b in zip(rates, rates[1:]))
    assert max(rates) <= 0.50
    assert min(rates) >= 0.20


def test_store_credit_adds_ten_percent():
    cash = calculate_commission(300, "cash")
    credit = calculate_commission(300, "store_credit")
    assert credit.commission_amount == cash.commission_amount
    assert credit.store_credit_bonus == 22.00
    assert credit.payout_amount == 242.00
    assert credit.payout_type == "store_credit"


def test_legacy_storecredit_spelling_is_accepted():
    assert calculate_commission(300, "storecredit").payout_type == "store_credit"


def test_cash_payout_plus_commission_equals_price():
    for price in (50, 63.33, 99.99, 123.45, 480.01, 999.99):
        quote = calculate_commission(price)
        assert to_cents(quote.payout_amount) + to_cents(quote.commission_amount) == to_cents(price)


def test_invalid_inputs_raise():
    with pytest.raises(CommissionError):
        calculate_commission(-1)
    with pytest.raises(CommissionError):
        calculate_commission("100")
    with pytest.raises(CommissionError):
        calculate_commission(float("nan"))
    with pytest.raises(CommissionError):
        calculate_commission(100, "bitcoin")


def test_check_eligibility():
    assert check_eligibility(50).eligible is True
    failed = check_eligibility(45)
    assert failed.eligible is False
    assert failed.message == INELIGIBLE_MESSAGE
    assert "handling costs" in failed.reason


def test_tier_table_shape():
    tiers = tier_table()
    assert [t["min_price"] for t in tiers] == [50, 100, 200, 500]
    assert tiers[-1]["max_price"] is None
    assert tiers[0]["rate_from_percent"] == 50


def test_cents_helpers():
    assert to_cents(35.625) == 3563
    assert to_cents(None) is None
    assert from_cents(3563) == 35.63


def test_price_is_rounded_before_the_minimum_check():
    quote = calculate_commission(49.995)
    assert quote.eligible is True
    assert quote.sale_price == 50.0
    assert quote.commission_amount == 25.0

    below = calculate_commission(49.994)
    assert below.eligible is False
    assert below.sale_price == 49.99

    assert check_eligibility(49.995).eligible is True


def test_custom_bonus_and_minimum():
    rules = CommissionRules(store_credit_bonus=Decimal("0.20"), minimum_value=Decimal("75"))

    refused = calculate_commission(60, rules=rules)
    assert refused.eligible is False
    assert "€75" in refused.message
    assert "€75" in check_eligibility(60, rules).reason

    credit = calculate_commission(300, "store_credit", rules=rules)
    assert credit.commission_amount == 80.0
    assert credit.store_credit_bonus == 44.0
    assert credit.payout_amount == 264.0


def test_lowered_minimum_uses_first_rate():
    rules = CommissionRules(minimum_value=Decimal("25"))
    quote = calculate_commission(30, rules=rules)
    assert quote.eligible is True
    assert quote.commission_rate == pytest.approx(0.50)
    assert quote.payout_amount == 15.0


def test_custom_anchor_rates():
    rules = CommissionRules(tier1_rate=Decimal("0.60"), tier4_rate=Decimal("0.15"))
    assert commission_rate_for(50, rules) == pytest.approx(0.60)
    assert commission_rate_for(75, rules) == pytest.approx(0.50)
    assert commission_rate_for(1000, rules) == pytest.approx(0.15)
    assert tier_table(rules)[0]["rate_from_percent"] == 60


def test_store_credit_can_be_switched_off():
    rules = CommissionRules(store_credit_enabled=False)
    with pytest.raises(CommissionError):
        calculate_commission(300, "store_credit", rules=rules)
    assert calculate_commission(300, "cash", rules=rules).payout_amount == 220.0
