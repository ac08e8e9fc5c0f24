"""
Models for collected traces and the resumable manifest.
"""
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class TraceResult(BaseModel):
    """A captured trace held in memory, before it is written to disk."""
    trace: str


class TraceRef(BaseModel):
    """A persisted trace; `trace` is the file name inside the output directory."""
    # Unknown manifest keys survive a load/save round trip.
    model_config = ConfigDict(extra="allow")

    trace: str


class UrlResultSet(BaseModel):
    """Every trace collected for one URL."""
    model_config = ConfigDict(extra="allow")

    url: str
    wpt: List[TraceRef] = Field(default_factory=list)
    unthrottled: List[TraceRef] = Field(default_factory=list)

    def is_complete(self, samples: int) -> bool:
        return len(self.wpt) == samples and len(self.unthrottled) == samples


class JobHandle(BaseModel):
    """A WebPageTest test that has been queued but not yet downloaded."""
    test_id: str
    json_url: str
