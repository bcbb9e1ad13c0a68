"""Enfinitus electricity tariff funnel."""

__version__ = "0.1.0"
