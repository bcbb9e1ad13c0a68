"""Annual consumption estimate for households that don't know their meter reading."""

from tariff_funnel.errors import CommercialTariffRequiredError, FunnelError

# Published values for 1-4 persons. They derive from a 1500 kWh base load plus
# 800 kWh per person scaled by 1.0/0.85/0.75/0.70, but the table is authoritative.
HOUSEHOLD_CONSUMPTION_KWH: dict[int, int] = {
    1: 2300,
    2: 3275,
    3: 4200,
    4: 4900,
}

EV_ADDITIONAL_KWH = 3000
SOLAR_BATTERY_ADDITIONAL_KWH = 500


def estimate_consumption(
    household_size: int,
    *,
    has_ev: bool = False,
    has_solar: bool = False,
    has_battery: bool = False,
) -> int:
    """
    Estimate the annual consumption in kWh.

    Households larger than four persons are not estimated; they are referred
    to the commercial tariff instead.
    """
    if household_size < 1:
        raise FunnelError(
            "Die Haushaltsgröße muss mindestens 1 sein",
            code="INVALID_HOUSEHOLD_SIZE",
            details={"household_size": household_size},
        )
    if household_size not in HOUSEHOLD_CONSUMPTION_KWH:
        raise CommercialTariffRequiredError(
            "Für Haushalte mit mehr als 4 Personen bieten wir einen Gewerbetarif an",
            details={"household_size": household_size},
        )

    consumption = HOUSEHOLD_CONSUMPTION_KWH[household_size]
    if has_ev:
        consumption += EV_ADDITIONAL_KWH
    if has_solar and has_battery:
        consumption += SOLAR_BATTERY_ADDITIONAL_KWH
    return consumption
