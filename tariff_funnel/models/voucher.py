"""Voucher models."""

from datetime import date
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tariff_funnel.models.common import Money
from tariff_funnel.models.tariff import TariffType


class DiscountType(str, Enum):
    """How a voucher's value is applied to a price."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


class Voucher(BaseModel):
    """Discount code with a validity window."""

    model_config = ConfigDict(from_attributes=True)

    code: str
    campaign_name: str | None = None
    discount_type: DiscountType
    discount_value: Money = Field(ge=0)
    applicable_tariff_types: list[TariffType] = Field(default_factory=list)
    start_date: date
    end_date: date
    is_active: bool = True
    usage_limit: int | None = Field(default=None, ge=0)
    used_count: int = Field(default=0, ge=0)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()

    def applies_to(self, tariff_type: TariffType) -> bool:
        """An empty applicability list means every tariff type."""
        return not self.applicable_tariff_types or tariff_type in self.applicable_tariff_types


class VoucherValidationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    voucher_code: str = Field(min_length=1, alias="voucherCode")
    tariff_id: str = Field(min_length=1, alias="tariffId")


class VoucherValidationResult(BaseModel):
    voucher_code: str
    is_valid: bool
    discount_type: DiscountType | None = None
    discount_value: Money | None = None
    start_date: date | None = None
    end_date: date | None = None


class VoucherTariffPrice(BaseModel):
    """The monthly price a voucher is applied to."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Tariff id, e.g. 'fix12'")
    monthly_cost: Money = Field(alias="monatliche_kosten")


class VoucherApplyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    voucher_code: str = Field(min_length=1, alias="voucherCode")
    tariff: VoucherTariffPrice


class VoucherApplyResult(BaseModel):
    voucher_code: str
    tariff_id: str
    discount_type: DiscountType
    discount_value: Money
    original_monthly_cost: Money
    discounted_monthly_cost: Money
    savings_per_month: Money
    savings_per_year: Money


class VoucherUsageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    voucher_code: str = Field(min_length=1, alias="voucherCode")
    customer_id: UUID = Field(alias="customerId")
    tariff_id: str = Field(alias="tariffId")
    original_cost: Money = Field(alias="originalCost")
    discounted_cost: Money = Field(alias="discountedCost")
