"""
WebPageTest trace source.
"""

from .client import WebPageTestClient

__all__ = ['WebPageTestClient']
