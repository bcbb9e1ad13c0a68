"""Domain errors translated into the `{erfolg, nachricht}` envelope by the API layer."""

from typing import Any


class FunnelError(Exception):
    """Base class for errors that map onto an HTTP status and error code."""

    status_code: int = 400
    code: str = "FUNNEL_ERROR"

    def __init__(self, message: str, *, code: str | None = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details


class NotFoundError(FunnelError):
    status_code = 404
    code = "NOT_FOUND"


class PostalCodeNotSupportedError(NotFoundError):
    code = "PLZ_NOT_SUPPORTED"


class PostalCodeUnavailableError(FunnelError):
    """A known postal code that is currently not being supplied."""

    status_code = 422
    code = "PLZ_NOT_AVAILABLE"


class CommercialTariffRequiredError(FunnelError):
    """Households above four persons are referred to the commercial tariff."""

    status_code = 422
    code = "COMMERCIAL_TARIFF_REQUIRED"


class TariffNotFoundError(NotFoundError):
    code = "TARIFF_NOT_FOUND"


class VoucherInvalidError(FunnelError):
    code = "VOUCHER_INVALID"


class EmailAlreadyRegisteredError(FunnelError):
    status_code = 409
    code = "EMAIL_ALREADY_REGISTERED"


class InvalidCredentialsError(FunnelError):
    status_code = 401
    code = "INVALID_CREDENTIALS"


class AccountInactiveError(FunnelError):
    status_code = 403
    code = "ACCOUNT_INACTIVE"
