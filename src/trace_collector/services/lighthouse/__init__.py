"""
Local unthrottled Lighthouse trace source.
"""

from .runner import LighthouseRunner

__all__ = ['LighthouseRunner']
