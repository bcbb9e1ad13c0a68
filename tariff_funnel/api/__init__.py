"""HTTP API."""

from tariff_funnel.api.errors import register_exception_handlers
from tariff_funnel.api.routes import router

__all__ = ["register_exception_handlers", "router"]
