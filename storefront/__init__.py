"""Storefront catalog API."""

__version__ = "2.0.0"
