"""Utility modules."""

from tariff_funnel.utils.logging import FunnelLogger, get_logger, setup_logging
from tariff_funnel.utils.tracing import FunnelTracer

__all__ = ["setup_logging", "get_logger", "FunnelLogger", "FunnelTracer"]
