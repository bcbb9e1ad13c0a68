"""Tests for tariff pricing."""

from decimal import Decimal

from tariff_funnel.models.tariff import PricingMargin, Tariff, TariffType
from tariff_funnel.pricing.calculator import (
    build_offers,
    calculate_annual_cost,
    compare_with_market,
    is_compatible,
    price_tariff,
    round_money,
)
from tariff_funnel.state.seed import REFERENCE_TARIFFS


def test_worked_example_monthly_cost(sample_tariff: Tariff) -> None:
    """Two-person household in Berlin on the basic tariff."""
    offer = price_tariff(sample_tariff, 3275)

    assert offer.costs.monthly_cost == Decimal("87.68")
    assert offer.costs.energy_cost_year == Decimal("933.38")
    assert offer.costs.base_cost_year == Decimal("118.80")
    assert offer.costs.total_cost_year == Decimal("1052.18")


def test_annual_cost_is_not_rounded_in_between() -> None:
    cost = calculate_annual_cost(Decimal("28.5"), Decimal("9.90"), 3275)

    assert cost.energy == Decimal("933.375")
    assert cost.total == Decimal("1052.175")
    assert cost.monthly == Decimal("87.68125")


def test_monthly_cost_formula_holds_for_zero_consumption(sample_tariff: Tariff) -> None:
    cost = calculate_annual_cost(sample_tariff.working_price_ct, sample_tariff.base_price_eur, 0)

    assert cost.energy == 0
    assert cost.monthly == sample_tariff.base_price_eur


def test_round_money_rounds_half_up() -> None:
    assert round_money(Decimal("0.125")) == Decimal("0.13")
    assert round_money(Decimal("87.685")) == Decimal("87.69")
    assert round_money(Decimal("-20.005")) == Decimal("-20.01")


def test_net_prices_strip_vat(sample_tariff: Tariff) -> None:
    prices = price_tariff(sample_tariff, 3275).prices

    assert prices.working_price_net_ct == Decimal("23.9496")
    assert prices.base_price_net_eur == Decimal("8.32")


def test_market_comparison() -> None:
    comparison = compare_with_market(Decimal("1052.175"), 3275)

    assert comparison.market_cost_year == Decimal("1290.25")
    assert comparison.savings_eur == Decimal("238.08")
    assert comparison.savings_percent == Decimal("18.45")
    assert comparison.better_than_market is True


def test_margin_is_added_to_list_prices(sample_tariff: Tariff) -> None:
    margin = PricingMargin(
        funnel_id="partner-portal",
        tariff_type=TariffType.BASIC,
        margin_working_price_ct=Decimal("1.5"),
        margin_base_price_eur=Decimal("1.00"),
    )

    offer = price_tariff(sample_tariff, 3275, margin)

    assert offer.prices.working_price_ct == Decimal("30.00")
    assert offer.prices.base_price_eur == Decimal("10.90")
    assert offer.costs.monthly_cost == Decimal("92.78")


def test_smart_meter_compatibility(sample_tariff: Tariff, smart_meter_tariff: Tariff) -> None:
    assert is_compatible(sample_tariff, smart_meter=False)
    assert not is_compatible(smart_meter_tariff, smart_meter=False)
    assert is_compatible(smart_meter_tariff, smart_meter=True)


def test_cheapest_compatible_offer_is_recommended(
    sample_tariff: Tariff, smart_meter_tariff: Tariff
) -> None:
    offers = build_offers([sample_tariff, smart_meter_tariff], 3275, smart_meter=False)

    # Dynamic is cheaper but needs a smart meter
    assert [offer.tariff_id for offer in offers] == ["dynamic", "basic"]
    assert [offer.recommended for offer in offers] == [False, True]
    assert offers[0].compatible is False


def test_smart_meter_household_gets_dynamic_recommendation(
    sample_tariff: Tariff, smart_meter_tariff: Tariff
) -> None:
    offers = build_offers([sample_tariff, smart_meter_tariff], 3275, smart_meter=True)

    recommended = [offer.tariff_id for offer in offers if offer.recommended]
    assert recommended == ["dynamic"]


def test_no_compatible_offer_means_no_recommendation(smart_meter_tariff: Tariff) -> None:
    offers = build_offers([smart_meter_tariff], 3275, smart_meter=False)

    assert len(offers) == 1
    assert not any(offer.recommended for offer in offers)


def test_equal_prices_are_ordered_by_tariff_id(sample_tariff: Tariff) -> None:
    twin = sample_tariff.model_copy(update={"id": "aaa-basic"})

    offers = build_offers([sample_tariff, twin], 3275)

    assert [offer.tariff_id for offer in offers] == ["aaa-basic", "basic"]
    assert offers[0].recommended is True


def test_reference_tariffs_for_two_person_household() -> None:
    offers = build_offers(REFERENCE_TARIFFS, 3275)

    assert [(o.tariff_id, o.costs.monthly_cost) for o in offers] == [
        ("basic", Decimal("87.68")),
        ("dynamic", Decimal("92.68")),
        ("fix12", Decimal("100.60")),
        ("green", Decimal("105.42")),
    ]
    assert offers[0].recommended is True


def test_tariff_type_filter_and_inactive_tariffs(sample_tariff: Tariff) -> None:
    retired = sample_tariff.model_copy(update={"id": "basic-old", "is_active": False})

    offers = build_offers(REFERENCE_TARIFFS + [retired], 3275, tariff_type=TariffType.GREEN)

    assert [offer.tariff_id for offer in offers] == ["green"]
