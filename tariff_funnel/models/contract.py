"""Contract models."""

from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from tariff_funnel.models.common import PLZ_PATTERN
from tariff_funnel.models.customer import PHONE_PATTERN, Customer


class ContractStatus(str, Enum):
    """Lifecycle status of a contract. Transitions are not enforced."""

    DRAFT = "draft"
    PENDING = "pending"
    ACTIVE = "active"
    CANCELLED = "cancelled"


def _normalize_voucher_code(v: str | None) -> str | None:
    if v is None or not v.strip():
        return None
    return v.strip().upper()


class ContractDraftRequest(BaseModel):
    """Draft request of a logged-in customer."""

    model_config = ConfigDict(populate_by_name=True)

    tariff_id: str = Field(min_length=1, alias="tarifId")
    annual_consumption_kwh: int = Field(ge=500, le=50000, alias="jahresverbrauch")
    household_size: int | None = Field(default=None, ge=1, le=20, alias="haushaltsgroesse")
    smart_meter: bool = Field(default=False, alias="smartMeter")
    plz: str | None = Field(default=None, pattern=PLZ_PATTERN)
    start_date: date | None = Field(default=None, alias="vertragsbeginn")
    voucher_code: str | None = Field(default=None, alias="gutscheinCode")
    funnel_id: str | None = Field(default=None, alias="funnelId")
    terms_accepted: bool = Field(default=True, alias="agbAkzeptiert")

    @field_validator("voucher_code")
    @classmethod
    def normalize_voucher(cls, v: str | None) -> str | None:
        return _normalize_voucher_code(v)


class ContractDraft(BaseModel):
    """Contract draft as stored and returned."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    customer_id: UUID
    pricing_id: UUID | None = None
    tariff_id: str
    contract_number: str
    status: ContractStatus
    start_date: date | None = None
    end_date: date | None = None
    terms_accepted: bool = False
    voucher_code: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ContractStatusUpdate(BaseModel):
    status: ContractStatus


class ImportCustomer(BaseModel):
    """Customer block of the one-shot contracting import."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(min_length=2, max_length=100, alias="firstName")
    last_name: str = Field(min_length=2, max_length=100, alias="lastName")
    email: EmailStr
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    street: str = Field(min_length=1, max_length=200)
    house_number: str = Field(min_length=1, max_length=20, alias="houseNumber")
    zip_code: str = Field(pattern=PLZ_PATTERN, alias="zipCode")
    city: str = Field(min_length=2, max_length=100)
    district: str | None = Field(default=None, max_length=100)
    terms_accepted: bool = Field(alias="termsAccepted")
    privacy_accepted: bool = Field(alias="privacyAccepted")
    marketing_consent: bool = Field(default=False, alias="marketingConsent")
    newsletter_consent: bool = Field(default=False, alias="newsletterConsent")
    notes: str | None = Field(default=None, max_length=1000)
    password: str | None = None

    @field_validator("terms_accepted", "privacy_accepted")
    @classmethod
    def must_be_accepted(cls, v: bool) -> bool:
        if not v:
            raise ValueError("AGB und Datenschutzerklärung müssen akzeptiert werden")
        return v


class ImportContract(BaseModel):
    """Contract block of the one-shot contracting import."""

    model_config = ConfigDict(populate_by_name=True)

    tariff_id: str = Field(min_length=1, alias="tariffId")
    estimated_consumption: int = Field(ge=500, le=50000, alias="estimatedConsumption")
    household_size: int | None = Field(default=None, ge=1, le=20, alias="householdSize")
    smart_meter: bool = Field(default=False, alias="smartMeter")
    desired_start_date: date | None = Field(default=None, alias="desiredStartDate")
    voucher_code: str | None = Field(default=None, alias="voucherCode")
    iban: str | None = Field(default=None, max_length=34)
    sepa_mandate: bool = Field(default=False, alias="sepaMandate")

    @field_validator("voucher_code")
    @classmethod
    def normalize_voucher(cls, v: str | None) -> str | None:
        return _normalize_voucher_code(v)


class ContractImportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    funnel_id: str | None = Field(default=None, alias="funnelId")
    customer: ImportCustomer
    contract: ImportContract


class ContractImportResult(BaseModel):
    """Everything written by one import, plus its step trace."""

    customer: Customer
    customer_created: bool
    pricing_id: UUID
    contract: ContractDraft
    trace: dict[str, Any] = Field(default_factory=dict)
