"""
Trace Collection Service

Drives both trace sources over the configured URL list.
"""

from .main import TraceCollector, main

__all__ = ['TraceCollector', 'main']
