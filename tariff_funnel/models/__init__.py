"""Data models for the tariff funnel."""

from tariff_funnel.models.common import ApiResponse, ErrorResponse, FieldError, Money
from tariff_funnel.models.contract import (
    ContractDraft,
    ContractDraftRequest,
    ContractImportRequest,
    ContractImportResult,
    ContractStatus,
    ContractStatusUpdate,
)
from tariff_funnel.models.customer import (
    AuthResult,
    Customer,
    CustomerRegistration,
    CustomerUpdate,
    EmailVerificationRequest,
    EnergyProfile,
    EnergyProfileUpdate,
    LoginRequest,
    PasswordForgotRequest,
    PasswordResetRequest,
    PasswordResetTicket,
)
from tariff_funnel.models.pricing import (
    PricingRequest,
    PricingResult,
    TariffOffer,
    VoucherRejection,
)
from tariff_funnel.models.tariff import PricingMargin, Tariff, TariffType
from tariff_funnel.models.voucher import (
    DiscountType,
    Voucher,
    VoucherApplyRequest,
    VoucherApplyResult,
    VoucherUsageRequest,
    VoucherValidationRequest,
    VoucherValidationResult,
)

__all__ = [
    # Envelope
    "ApiResponse",
    "ErrorResponse",
    "FieldError",
    "Money",
    # Contract
    "ContractDraft",
    "ContractDraftRequest",
    "ContractImportRequest",
    "ContractImportResult",
    "ContractStatus",
    "ContractStatusUpdate",
    # Customer
    "AuthResult",
    "Customer",
    "CustomerRegistration",
    "CustomerUpdate",
    "EmailVerificationRequest",
    "EnergyProfile",
    "EnergyProfileUpdate",
    "LoginRequest",
    "PasswordForgotRequest",
    "PasswordResetRequest",
    "PasswordResetTicket",
    # Pricing
    "PricingRequest",
    "PricingResult",
    "TariffOffer",
    "VoucherRejection",
    # Tariff
    "PricingMargin",
    "Tariff",
    "TariffType",
    # Voucher
    "DiscountType",
    "Voucher",
    "VoucherApplyRequest",
    "VoucherApplyResult",
    "VoucherUsageRequest",
    "VoucherValidationRequest",
    "VoucherValidationResult",
]
