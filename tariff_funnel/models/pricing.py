"""Pricing request and result models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tariff_funnel.models.common import PLZ_PATTERN, Money
from tariff_funnel.models.tariff import TariffType
from tariff_funnel.models.voucher import DiscountType


class PricingRequest(BaseModel):
    """
    Ephemeral pricing input of one funnel visitor.

    Field aliases follow the German payload of the pricing page; the English
    names are accepted as well.
    """

    model_config = ConfigDict(populate_by_name=True)

    plz: str = Field(pattern=PLZ_PATTERN, description="German postal code")
    annual_consumption_kwh: int | None = Field(
        default=None, ge=500, le=50000, alias="jahresverbrauch"
    )
    household_size: int = Field(default=2, ge=1, le=20, alias="haushaltsgroesse")
    tariff_type: TariffType | None = Field(default=None, alias="tariftyp")
    funnel_id: str | None = Field(default=None, alias="funnelId")
    voucher_code: str | None = Field(default=None, alias="voucherCode")

    # Equipment
    has_smart_meter: bool = Field(default=False, alias="hatSmartMeter")
    wants_smart_meter: bool = Field(default=False, alias="moechteSmartMeter")
    has_solar: bool = Field(default=False, alias="hatSolarPV")
    wants_solar: bool = Field(default=False, alias="moechteSolarPV")
    has_ev: bool = Field(default=False, alias="hatElektroauto")
    has_battery: bool = Field(default=False, alias="hatBatterie")
    wants_battery: bool = Field(default=False, alias="moechteBatterie")

    @field_validator("tariff_type", mode="before")
    @classmethod
    def normalize_tariff_type(cls, v: Any) -> Any:
        return TariffType.parse(v)

    @field_validator("voucher_code")
    @classmethod
    def blank_voucher_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip().upper()

    @property
    def smart_meter(self) -> bool:
        return self.has_smart_meter or self.wants_smart_meter


class Location(BaseModel):
    plz: str
    city: str
    district: str | None = None
    state: str | None = None
    network_operator: str | None = None
    available: bool = True
    reason: str | None = None


class ConsumptionInfo(BaseModel):
    annual_kwh: int
    household_size: int
    estimated: bool


class PriceDetails(BaseModel):
    """Unit prices after funnel margins, gross and net of VAT."""

    working_price_ct: Money
    working_price_net_ct: Money
    base_price_eur: Money
    base_price_net_eur: Money


class CostBreakdown(BaseModel):
    energy_cost_year: Money
    base_cost_year: Money
    total_cost_year: Money
    monthly_cost: Money
    cost_per_kwh_ct: Money | None = None


class MarketComparison(BaseModel):
    market_cost_year: Money
    offer_cost_year: Money
    savings_eur: Money
    savings_percent: Money
    better_than_market: bool


class AppliedVoucher(BaseModel):
    code: str
    campaign_name: str | None = None
    discount_type: DiscountType
    discount_value: Money
    original_monthly_cost: Money
    discounted_monthly_cost: Money
    savings_per_month: Money
    savings_per_year: Money


class TariffOffer(BaseModel):
    """One priced tariff as shown on the offers page."""

    tariff_id: str
    name: str
    tariff_type: TariffType
    description: str | None = None
    contract_months: int
    prices: PriceDetails
    costs: CostBreakdown
    market_comparison: MarketComparison
    requires_smart_meter: bool = False
    compatible: bool = True
    recommended: bool = False
    voucher: AppliedVoucher | None = None


class VoucherRejection(BaseModel):
    code: str
    reason: str
    message: str


class PricingResult(BaseModel):
    location: Location
    consumption: ConsumptionInfo
    offers: list[TariffOffer]
    voucher_rejection: VoucherRejection | None = None

    @property
    def recommended(self) -> TariffOffer | None:
        return next((offer for offer in self.offers if offer.recommended), None)
