"""
Data models for trace collection.
"""

from .trace_models import (
    JobHandle,
    TraceRef,
    TraceResult,
    UrlResultSet,
)

__all__ = [
    "JobHandle",
    "TraceRef",
    "TraceResult",
    "UrlResultSet",
]
