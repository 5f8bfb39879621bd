"""
Commission Settings Service - admin-editable commission rules

The single settings row is turned into a CommissionRules for
services/commission.py. Until an admin saves settings, the defaults apply.
"""
import logging
from decimal import Decimal
from typing import Dict

from sqlalchemy.orm import Session

from database.models import CommissionSettings
from services.commission import DEFAULT_RULES, CommissionRules, from_cents, to_cents

logger = logging.getLogger(__name__)

SETTINGS_ID = 1

_RATE_FIELDS = ("tier1_rate", "tier2_rate", "tier3_rate", "tier4_rate", "store_credit_bonus")
_FLAG_FIELDS = ("store_credit_enabled", "direct_buyout_enabled", "recycling_enabled")


def _percent(fraction: Decimal) -> float:
    return float(fraction * 100)


def _fraction(percent: float) -> Decimal:
    return Decimal(str(percent)) / Decimal(100)


def default_settings() -> CommissionSettings:
    """Unsaved settings row holding the default rules"""
    return CommissionSettings(
        id=SETTINGS_ID,
        store_credit_enabled=DEFAULT_RULES.store_credit_enabled,
        direct_buyout_enabled=False,
        recycling_enabled=True,
        minimum_value=to_cents(DEFAULT_RULES.minimum_value),
        **{field: _percent(getattr(DEFAULT_RULES, field)) for field in _RATE_FIELDS},
    )


class CommissionSettingsService:
    """Loads and updates the commission settings row"""

    def __init__(self, db: Session):
        self.db = db

    def _row(self) -> CommissionSettings:
        return self.db.get(CommissionSettings, SETTINGS_ID) or default_settings()

    def get_rules(self) -> CommissionRules:
        row = self.db.get(CommissionSettings, SETTINGS_ID)
        if row is None:
            return DEFAULT_RULES

        return CommissionRules(
            minimum_value=Decimal(row.minimum_value) / 100,
            store_credit_enabled=row.store_credit_enabled,
            **{field: _fraction(getattr(row, field)) for field in _RATE_FIELDS},
        )

    @staticmethod
    def to_dict(row: CommissionSettings) -> Dict:
        """Settings in the admin form's shape (percentages, EUR)"""
        tiers = {field: getattr(row, field) for field in _RATE_FIELDS}
        tiers["minimum_value"] = from_cents(row.minimum_value)
        return {
            "tiers": tiers,
            **{flag: getattr(row, flag) for flag in _FLAG_FIELDS},
            "updated_at": row.updated_at,
        }

    def get_settings(self) -> Dict:
        return self.to_dict(self._row())

    def update_settings(self, data: Dict) -> Dict:
        """
        Replace the settings

        Args:
            data: {'tiers': {tier1_rate..tier4_rate, store_credit_bonus, minimum_value},
                   store_credit_enabled, direct_buyout_enabled, recycling_enabled}
        """
        row = self.db.get(CommissionSettings, SETTINGS_ID)
        if row is None:
            row = default_settings()
            self.db.add(row)

        tiers = data["tiers"]
        for field in _RATE_FIELDS:
            setattr(row, field, float(tiers[field]))
        row.minimum_value = to_cents(tiers["minimum_value"])
        for flag in _FLAG_FIELDS:
            if flag in data:
                setattr(row, flag, bool(data[flag]))

        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Commission settings update failed: {e}", exc_info=True)
            raise

        self.db.refresh(row)
        logger.info(
            f"Commission settings updated: tiers {row.tier1_rate}/{row.tier2_rate}/"
            f"{row.tier3_rate}/{row.tier4_rate}%, bonus {row.store_credit_bonus}%, "
            f"minimum €{from_cents(row.minimum_value):.2f}"
        )
        return self.to_dict(row)
