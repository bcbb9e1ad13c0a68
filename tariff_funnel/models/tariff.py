"""Tariff reference data models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tariff_funnel.models.common import Money

# German and legacy spellings accepted by the public API
TARIFF_TYPE_SYNONYMS = {
    "fest": "fixed",
    "standard": "fixed",
    "fix12": "fixed",
    "gruen": "green",
    "grün": "green",
    "oeko": "green",
    "dynamisch": "dynamic",
    "basis": "basic",
}


class TariffType(str, Enum):
    """Kinds of electricity plans."""

    FIXED = "fixed"
    GREEN = "green"
    DYNAMIC = "dynamic"
    BASIC = "basic"

    @classmethod
    def parse(cls, value: Any) -> Any:
        """Map synonyms onto enum values, leave anything else to pydantic."""
        if isinstance(value, str):
            lowered = value.strip().lower()
            return TARIFF_TYPE_SYNONYMS.get(lowered, lowered)
        return value


class Tariff(BaseModel):
    """A priced electricity plan: working price per kWh plus a monthly base fee."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    tariff_type: TariffType
    description: str | None = None
    working_price_ct: Money = Field(ge=0, description="Gross working price in ct/kWh")
    base_price_eur: Money = Field(ge=0, description="Gross base price in EUR/month")
    contract_months: int = Field(default=12, ge=1)
    price_guarantee_months: int = Field(default=12, ge=0)
    requires_smart_meter: bool = False
    solar_optimized: bool = False
    green_energy: bool = False
    is_active: bool = True


class PricingMargin(BaseModel):
    """Funnel-specific surcharge added on top of a tariff's list prices."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    funnel_id: str = Field(alias="funnelId")
    tariff_type: TariffType = Field(alias="tariffType")
    margin_working_price_ct: Money = Field(default=Decimal("0"), alias="marginWorkingPrice")
    margin_base_price_eur: Money = Field(default=Decimal("0"), alias="marginBasePrice")
    updated_at: datetime | None = None

    @field_validator("tariff_type", mode="before")
    @classmethod
    def normalize_tariff_type(cls, v: Any) -> Any:
        return TariffType.parse(v)
