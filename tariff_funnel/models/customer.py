"""Customer-related models."""

import re
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from tariff_funnel.models.common import PLZ_PATTERN

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$")
PHONE_PATTERN = r"^[+]?[0-9\s\-\(\)]{6,20}$"


def check_password_strength(password: str) -> str:
    """Require upper and lower case, a digit and a special character."""
    if not PASSWORD_PATTERN.match(password):
        raise ValueError(
            "Das Passwort muss mindestens 8 Zeichen lang sein und Groß- und "
            "Kleinbuchstaben, eine Zahl und ein Sonderzeichen enthalten"
        )
    return password


class CustomerRegistration(BaseModel):
    """Registration form of the contract page."""

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str = Field(alias="passwort")
    password_confirmation: str = Field(alias="passwortBestaetigung")
    first_name: str = Field(min_length=2, max_length=100, alias="vorname")
    last_name: str = Field(min_length=2, max_length=100, alias="nachname")
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN, alias="telefon")
    street: str = Field(min_length=1, max_length=200, alias="strasse")
    house_number: str = Field(min_length=1, max_length=20, alias="hausnummer")
    plz: str = Field(pattern=PLZ_PATTERN)
    city: str = Field(min_length=2, max_length=100, alias="stadt")
    district: str | None = Field(default=None, max_length=100, alias="bezirk")
    terms_accepted: bool = Field(default=False, alias="agbAkzeptiert")
    privacy_accepted: bool = Field(default=False, alias="datenschutzAkzeptiert")
    marketing_consent: bool = Field(default=False, alias="marketingEinverstaendnis")
    newsletter_consent: bool = Field(default=False, alias="newsletterEinverstaendnis")
    notes: str | None = Field(default=None, max_length=1000, alias="notizen")

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return check_password_strength(v)

    @model_validator(mode="after")
    def validate_confirmation_and_consent(self) -> "CustomerRegistration":
        if self.password != self.password_confirmation:
            raise ValueError("Passwörter stimmen nicht überein")
        if not (self.terms_accepted and self.privacy_accepted):
            raise ValueError("AGB und Datenschutzerklärung müssen akzeptiert werden")
        return self


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str = Field(min_length=1, alias="passwort")


class CustomerUpdate(BaseModel):
    """Profile edit; only the fields sent are changed."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str | None = Field(default=None, min_length=2, max_length=100, alias="vorname")
    last_name: str | None = Field(default=None, min_length=2, max_length=100, alias="nachname")
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN, alias="telefon")
    street: str | None = Field(default=None, min_length=1, max_length=200, alias="strasse")
    house_number: str | None = Field(default=None, min_length=1, max_length=20, alias="hausnummer")
    plz: str | None = Field(default=None, pattern=PLZ_PATTERN)
    city: str | None = Field(default=None, min_length=2, max_length=100, alias="stadt")
    district: str | None = Field(default=None, max_length=100, alias="bezirk")
    marketing_consent: bool | None = Field(default=None, alias="marketingEinverstaendnis")
    newsletter_consent: bool | None = Field(default=None, alias="newsletterEinverstaendnis")
    notes: str | None = Field(default=None, max_length=1000, alias="notizen")

    @field_validator(
        "first_name",
        "last_name",
        "street",
        "house_number",
        "plz",
        "city",
        "marketing_consent",
        "newsletter_consent",
    )
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        """Omit a field to keep it; an explicit null cannot clear a required value."""
        if v is None:
            raise ValueError("Feld darf nicht leer sein")
        return v


class Customer(BaseModel):
    """Customer profile as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    street: str
    house_number: str
    plz: str
    city: str
    district: str | None = None
    terms_accepted: bool = False
    privacy_accepted: bool = False
    marketing_consent: bool = False
    newsletter_consent: bool = False
    notes: str | None = None
    is_active: bool = True
    is_verified: bool = False
    created_at: datetime | None = None
    last_login: datetime | None = None


class AuthResult(BaseModel):
    customer: Customer
    token: str
    token_type: str = "bearer"
    # Returned outside production, there is no mail delivery
    verification_token: str | None = None


class EmailVerificationRequest(BaseModel):
    token: str = Field(min_length=1)


class PasswordForgotRequest(BaseModel):
    email: EmailStr


class PasswordResetTicket(BaseModel):
    """Answer to a reset request; identical whether or not the email exists."""

    reset_token: str | None = None
    expires_at: datetime | None = None


class PasswordResetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(min_length=1)
    password: str = Field(alias="passwort")

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return check_password_strength(v)


class EnergyProfileUpdate(BaseModel):
    """Household and equipment data; only the fields sent are changed."""

    model_config = ConfigDict(populate_by_name=True)

    annual_consumption_kwh: int | None = Field(
        default=None, ge=500, le=50000, alias="annualConsumption"
    )
    household_size: int | None = Field(default=None, ge=1, le=20, alias="householdSize")
    meter_number: str | None = Field(default=None, max_length=50, alias="meterNumber")
    heating_type: str | None = Field(default=None, max_length=50, alias="heatingType")
    has_electric_vehicle: bool | None = Field(default=None, alias="hasElectricVehicle")
    has_solar_panels: bool | None = Field(default=None, alias="hasSolarPanels")
    has_battery: bool | None = Field(default=None, alias="hasBattery")
    has_heat_pump: bool | None = Field(default=None, alias="hasHeatPump")
    has_smart_meter: bool | None = Field(default=None, alias="hasSmartMeter")

    @field_validator(
        "has_electric_vehicle",
        "has_solar_panels",
        "has_battery",
        "has_heat_pump",
        "has_smart_meter",
    )
    @classmethod
    def reject_null(cls, v: bool | None) -> bool:
        if v is None:
            raise ValueError("Feld darf nicht leer sein")
        return v


class EnergyProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    customer_id: UUID
    annual_consumption_kwh: int | None = None
    household_size: int | None = None
    meter_number: str | None = None
    heating_type: str | None = None
    has_electric_vehicle: bool = False
    has_solar_panels: bool = False
    has_battery: bool = False
    has_heat_pump: bool = False
    has_smart_meter: bool = False
    updated_at: datetime | None = None
