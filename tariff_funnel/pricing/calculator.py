"""Tariff pricing.

All arithmetic runs on ``Decimal``. Working prices are gross ct/kWh, base prices
gross EUR/month. Intermediate results are never rounded; only the values put into
an offer are rounded half-up to cents.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from tariff_funnel.models.pricing import CostBreakdown, MarketComparison, PriceDetails, TariffOffer
from tariff_funnel.models.tariff import PricingMargin, Tariff, TariffType

CENT = Decimal("0.01")
MONTHS_PER_YEAR = 12
VAT_FACTOR = Decimal("1.19")

# Average German household price used for the savings badge
MARKET_WORKING_PRICE_CT = Decimal("35")
MARKET_BASE_PRICE_EUR = Decimal("12")


class AnnualCost(NamedTuple):
    energy: Decimal
    base: Decimal
    total: Decimal
    monthly: Decimal


def round_money(value: Decimal, places: Decimal = CENT) -> Decimal:
    """Round half-up, the way prices are displayed."""
    return value.quantize(places, rounding=ROUND_HALF_UP)


def calculate_annual_cost(
    working_price_ct: Decimal,
    base_price_eur: Decimal,
    consumption_kwh: int,
) -> AnnualCost:
    """Unrounded annual and monthly cost of a tariff at a given consumption."""
    energy = working_price_ct * Decimal(consumption_kwh) / 100
    base = base_price_eur * MONTHS_PER_YEAR
    total = energy + base
    return AnnualCost(energy=energy, base=base, total=total, monthly=total / MONTHS_PER_YEAR)


def compare_with_market(total_cost_year: Decimal, consumption_kwh: int) -> MarketComparison:
    market = calculate_annual_cost(MARKET_WORKING_PRICE_CT, MARKET_BASE_PRICE_EUR, consumption_kwh)
    savings = market.total - total_cost_year
    percent = savings / market.total * 100 if market.total else Decimal("0")
    return MarketComparison(
        market_cost_year=round_money(market.total),
        offer_cost_year=round_money(total_cost_year),
        savings_eur=round_money(savings),
        savings_percent=round_money(percent),
        better_than_market=savings > 0,
    )


def is_compatible(tariff: Tariff, smart_meter: bool) -> bool:
    """Smart-meter tariffs need a customer who has or wants a smart meter."""
    return smart_meter or not tariff.requires_smart_meter


def price_tariff(
    tariff: Tariff,
    consumption_kwh: int,
    margin: PricingMargin | None = None,
    *,
    smart_meter: bool = False,
) -> TariffOffer:
    """Price one tariff for a household, including the funnel margin."""
    working_price = tariff.working_price_ct
    base_price = tariff.base_price_eur
    if margin is not None:
        working_price += margin.margin_working_price_ct
        base_price += margin.margin_base_price_eur

    cost = calculate_annual_cost(working_price, base_price, consumption_kwh)
    per_kwh = cost.total / consumption_kwh * 100 if consumption_kwh else None

    return TariffOffer(
        tariff_id=tariff.id,
        name=tariff.name,
        tariff_type=tariff.tariff_type,
        description=tariff.description,
        contract_months=tariff.contract_months,
        prices=PriceDetails(
            working_price_ct=round_money(working_price),
            working_price_net_ct=round_money(working_price / VAT_FACTOR, Decimal("0.0001")),
            base_price_eur=round_money(base_price),
            base_price_net_eur=round_money(base_price / VAT_FACTOR),
        ),
        costs=CostBreakdown(
            energy_cost_year=round_money(cost.energy),
            base_cost_year=round_money(cost.base),
            total_cost_year=round_money(cost.total),
            monthly_cost=round_money(cost.monthly),
            cost_per_kwh_ct=round_money(per_kwh) if per_kwh is not None else None,
        ),
        market_comparison=compare_with_market(cost.total, consumption_kwh),
        requires_smart_meter=tariff.requires_smart_meter,
        compatible=is_compatible(tariff, smart_meter),
    )


def effective_monthly_cost(offer: TariffOffer) -> Decimal:
    if offer.voucher is not None:
        return offer.voucher.discounted_monthly_cost
    return offer.costs.monthly_cost


def select_recommended(offers: list[TariffOffer]) -> list[TariffOffer]:
    """
    Sort offers by monthly cost and flag the cheapest compatible one.

    Ties are broken by tariff id so the order is stable. If no offer is
    compatible, none is recommended.
    """
    ranked = sorted(offers, key=lambda offer: (effective_monthly_cost(offer), offer.tariff_id))
    recommended_id = next((offer.tariff_id for offer in ranked if offer.compatible), None)
    return [
        offer.model_copy(update={"recommended": offer.tariff_id == recommended_id})
        for offer in ranked
    ]


def build_offers(
    tariffs: list[Tariff],
    consumption_kwh: int,
    margins: dict[TariffType, PricingMargin] | None = None,
    *,
    smart_meter: bool = False,
    tariff_type: TariffType | None = None,
) -> list[TariffOffer]:
    """Price every active tariff, optionally restricted to one tariff type."""
    margins = margins or {}
    offers = [
        price_tariff(tariff, consumption_kwh, margins.get(tariff.tariff_type), smart_meter=smart_meter)
        for tariff in tariffs
        if tariff.is_active and (tariff_type is None or tariff.tariff_type == tariff_type)
    ]
    return select_recommended(offers)
