"""Structured logging configuration."""

import logging
import sys
from typing import Any

import structlog
from pythonjsonlogger.json import JsonFormatter

from tariff_funnel.config import get_settings


def setup_logging() -> None:
    """Configure structured logging for the application."""
    settings = get_settings()

    log_level = getattr(logging, settings.log_level)

    handler = logging.StreamHandler(sys.stdout)
    if settings.log_format == "json":
        formatter = JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "asctime": "timestamp"},
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    handler.setFormatter(formatter)

    # Uvicorn and SQLAlchemy log through the stdlib root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer() if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class FunnelLogger:
    """Logger for the steps a customer walks through in one funnel."""

    def __init__(self, funnel_id: str):
        self.funnel_id = funnel_id
        self.logger = get_logger("tariff_funnel.funnel")

    def log_step(
        self,
        step: str,
        duration_ms: float | None = None,
        **kwargs: Any,
    ) -> None:
        """Log a completed funnel step with structured data."""
        log_data: dict[str, Any] = {"funnel_id": self.funnel_id, "step": step}

        if duration_ms is not None:
            log_data["duration_ms"] = duration_ms

        log_data.update(kwargs)
        self.logger.info("funnel_step", **log_data)

    def log_discount_warning(self, voucher_code: str, price: Any, **kwargs: Any) -> None:
        """Log a voucher that pushed a price below zero."""
        self.logger.warning(
            "voucher_price_below_zero",
            funnel_id=self.funnel_id,
            voucher_code=voucher_code,
            price=str(price),
            **kwargs,
        )

    def log_error(self, step: str, error: str, **kwargs: Any) -> None:
        """Log a failed funnel step."""
        self.logger.error(
            "funnel_step_failed",
            funnel_id=self.funnel_id,
            step=step,
            error=error,
            **kwargs,
        )
