"""Storefront cart and checkout backend."""

__version__ = "0.1.0"
