"""Zyrotech trading-bot subscription platform API."""

__version__ = "1.0.0"
