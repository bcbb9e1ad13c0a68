"""Funnel use cases on top of the persistence layer."""

from tariff_funnel.services.contracting import ContractingService
from tariff_funnel.services.customers import CustomerService
from tariff_funnel.services.pricing import PricingService
from tariff_funnel.services.vouchers import VoucherService

__all__ = [
    "ContractingService",
    "CustomerService",
    "PricingService",
    "VoucherService",
]
