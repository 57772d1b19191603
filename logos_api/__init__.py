"""Logos: LLM-backed argument analysis API."""

__version__ = "1.0.0"
