"""Carrier rate quote integration."""

__version__ = "1.0.0"
