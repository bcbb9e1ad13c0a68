"""Relational schema of the funnel."""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class CustomerRecord(TimestampMixin, Base):
    __tablename__ = "customers"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255))
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30))
    street: Mapped[str] = mapped_column(String(200), nullable=False)
    house_number: Mapped[str] = mapped_column(String(20), nullable=False)
    plz: Mapped[str] = mapped_column(String(5), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    district: Mapped[str | None] = mapped_column(String(100))
    terms_accepted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    privacy_accepted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    marketing_consent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    newsletter_consent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verification_token: Mapped[str | None] = mapped_column(String(64), unique=True)
    password_reset_token: Mapped[str | None] = mapped_column(String(64), unique=True)
    password_reset_expires: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    pricing_records: Mapped[list["PricingRecord"]] = relationship(
        back_populates="customer", cascade="all, delete-orphan", passive_deletes=True
    )
    contracts: Mapped[list["ContractRecord"]] = relationship(
        back_populates="customer", cascade="all, delete-orphan", passive_deletes=True
    )


class TariffRecord(TimestampMixin, Base):
    __tablename__ = "tariffs"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    tariff_type: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    working_price_ct: Mapped[Decimal] = mapped_column(Numeric(8, 4), nullable=False)
    base_price_eur: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    contract_months: Mapped[int] = mapped_column(Integer, default=12, nullable=False)
    price_guarantee_months: Mapped[int] = mapped_column(Integer, default=12, nullable=False)
    requires_smart_meter: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    solar_optimized: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    green_energy: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "tariff_type IN ('fixed', 'green', 'dynamic', 'basic')", name="ck_tariffs_type"
        ),
    )


class VoucherRecord(TimestampMixin, Base):
    __tablename__ = "vouchers"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    campaign_name: Mapped[str | None] = mapped_column(String(200))
    discount_type: Mapped[str] = mapped_column(String(20), nullable=False)
    discount_value: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    applicable_tariff_types: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    usage_limit: Mapped[int | None] = mapped_column(Integer)
    used_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "discount_type IN ('percentage', 'fixed')", name="ck_vouchers_discount_type"
        ),
    )


class VoucherUsageRecord(Base):
    __tablename__ = "voucher_usage"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    voucher_id: Mapped[UUID] = mapped_column(
        ForeignKey("vouchers.id", ondelete="CASCADE"), nullable=False
    )
    customer_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("customers.id", ondelete="SET NULL")
    )
    tariff_id: Mapped[str] = mapped_column(String(50), nullable=False)
    original_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    discounted_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    used_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class PricingMarginRecord(Base):
    __tablename__ = "pricing_margins"

    funnel_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    tariff_type: Mapped[str] = mapped_column(String(20), primary_key=True)
    margin_working_price_ct: Mapped[Decimal] = mapped_column(Numeric(8, 4), default=Decimal("0"))
    margin_base_price_eur: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=Decimal("0"))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class EnergyProfileRecord(Base):
    """Household and equipment data a customer keeps with the account."""

    __tablename__ = "customer_energy_profiles"

    customer_id: Mapped[UUID] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), primary_key=True
    )
    annual_consumption_kwh: Mapped[int | None] = mapped_column(Integer)
    household_size: Mapped[int | None] = mapped_column(Integer)
    meter_number: Mapped[str | None] = mapped_column(String(50))
    heating_type: Mapped[str | None] = mapped_column(String(50))
    has_electric_vehicle: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_solar_panels: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_battery: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_heat_pump: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_smart_meter: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class PricingRecord(Base):
    """Snapshot of a price quote a customer went on to contract."""

    __tablename__ = "pricing_data"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    customer_id: Mapped[UUID] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False
    )
    plz: Mapped[str] = mapped_column(String(5), nullable=False)
    annual_consumption_kwh: Mapped[int] = mapped_column(Integer, nullable=False)
    household_size: Mapped[int | None] = mapped_column(Integer)
    smart_meter: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    selected_tariff: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    estimated_costs: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    customer: Mapped[CustomerRecord] = relationship(back_populates="pricing_records")

    __table_args__ = (Index("idx_pricing_data_customer", "customer_id"),)


class ContractRecord(TimestampMixin, Base):
    __tablename__ = "contracts"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    customer_id: Mapped[UUID] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False
    )
    pricing_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("pricing_data.id", ondelete="SET NULL")
    )
    tariff_id: Mapped[str] = mapped_column(String(50), nullable=False)
    contract_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="draft", nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date)
    terms_accepted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    voucher_code: Mapped[str | None] = mapped_column(String(50))

    customer: Mapped[CustomerRecord] = relationship(back_populates="contracts")

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'pending', 'active', 'cancelled')", name="ck_contracts_status"
        ),
        Index("idx_contracts_customer", "customer_id"),
    )
