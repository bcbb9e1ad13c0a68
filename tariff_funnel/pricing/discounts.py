"""Voucher validation and discount arithmetic."""

from datetime import date
from decimal import Decimal

from tariff_funnel.errors import VoucherInvalidError
from tariff_funnel.models.pricing import AppliedVoucher, TariffOffer
from tariff_funnel.models.tariff import TariffType
from tariff_funnel.models.voucher import DiscountType, Voucher
from tariff_funnel.pricing.calculator import MONTHS_PER_YEAR, round_money

ZERO = Decimal("0")


def apply_discount(
    price: Decimal,
    discount_type: DiscountType,
    value: Decimal,
    *,
    floor_at_zero: bool = False,
) -> Decimal:
    """
    Apply a voucher value to a price.

    Percentage vouchers scale the price, fixed vouchers subtract from it. The
    result is not floored unless ``floor_at_zero`` is set, so a large fixed
    voucher can yield a negative price.
    """
    if discount_type == DiscountType.PERCENTAGE:
        discounted = price * (1 - value / 100)
    else:
        discounted = price - value

    if floor_at_zero and discounted < ZERO:
        discounted = ZERO
    return round_money(discounted)


def validate_voucher(
    voucher: Voucher | None,
    code: str,
    tariff_type: TariffType | None,
    today: date,
) -> Voucher:
    """Return the voucher if it can be redeemed today, else raise VoucherInvalidError."""
    if voucher is None or not voucher.is_active:
        raise VoucherInvalidError(
            f"Gutscheincode {code} ist ungültig", code="VOUCHER_NOT_FOUND"
        )
    if today < voucher.start_date:
        raise VoucherInvalidError(
            f"Gutscheincode {code} ist erst ab {voucher.start_date.isoformat()} gültig",
            code="VOUCHER_NOT_YET_VALID",
        )
    if today > voucher.end_date:
        raise VoucherInvalidError(
            f"Gutscheincode {code} ist abgelaufen", code="VOUCHER_EXPIRED"
        )
    if voucher.usage_limit is not None and voucher.used_count >= voucher.usage_limit:
        raise VoucherInvalidError(
            f"Gutscheincode {code} wurde bereits zu oft eingelöst",
            code="VOUCHER_USAGE_LIMIT_REACHED",
        )
    if tariff_type is not None and not voucher.applies_to(tariff_type):
        raise VoucherInvalidError(
            f"Gutscheincode {code} gilt nicht für diesen Tarif",
            code="VOUCHER_TARIFF_MISMATCH",
            details={"tariff_type": tariff_type.value},
        )
    return voucher


def discount_monthly_cost(
    voucher: Voucher,
    monthly_cost: Decimal,
    *,
    floor_at_zero: bool = False,
) -> AppliedVoucher:
    discounted = apply_discount(
        monthly_cost,
        voucher.discount_type,
        voucher.discount_value,
        floor_at_zero=floor_at_zero,
    )
    savings = monthly_cost - discounted
    return AppliedVoucher(
        code=voucher.code,
        campaign_name=voucher.campaign_name,
        discount_type=voucher.discount_type,
        discount_value=voucher.discount_value,
        original_monthly_cost=monthly_cost,
        discounted_monthly_cost=discounted,
        savings_per_month=savings,
        savings_per_year=savings * MONTHS_PER_YEAR,
    )


def discount_offer(
    offer: TariffOffer,
    voucher: Voucher,
    *,
    floor_at_zero: bool = False,
) -> TariffOffer:
    """Attach the voucher to an offer if the voucher covers the offer's tariff type."""
    if not voucher.applies_to(offer.tariff_type):
        return offer
    applied = discount_monthly_cost(voucher, offer.costs.monthly_cost, floor_at_zero=floor_at_zero)
    return offer.model_copy(update={"voucher": applied})
