"""Collects browser performance traces from WebPageTest and local Lighthouse runs."""

__version__ = "0.1.0"
