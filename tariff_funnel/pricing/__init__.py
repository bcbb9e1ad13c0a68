"""Tariff pricing and voucher arithmetic."""

from tariff_funnel.pricing.calculator import (
    build_offers,
    calculate_annual_cost,
    compare_with_market,
    is_compatible,
    price_tariff,
    round_money,
    select_recommended,
)
from tariff_funnel.pricing.discounts import apply_discount, discount_offer, validate_voucher
from tariff_funnel.pricing.estimator import HOUSEHOLD_CONSUMPTION_KWH, estimate_consumption
from tariff_funnel.pricing.regions import resolve_location

__all__ = [
    "HOUSEHOLD_CONSUMPTION_KWH",
    "apply_discount",
    "build_offers",
    "calculate_annual_cost",
    "compare_with_market",
    "discount_offer",
    "estimate_consumption",
    "is_compatible",
    "price_tariff",
    "resolve_location",
    "round_money",
    "select_recommended",
    "validate_voucher",
]
