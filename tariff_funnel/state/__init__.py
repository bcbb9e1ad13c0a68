"""Persistence layer."""

from tariff_funnel.state.catalog import CatalogStore
from tariff_funnel.state.contracts import ContractStore
from tariff_funnel.state.customers import CustomerStore
from tariff_funnel.state.manager import DatabaseManager, get_database_manager

__all__ = [
    "CatalogStore",
    "ContractStore",
    "CustomerStore",
    "DatabaseManager",
    "get_database_manager",
]
