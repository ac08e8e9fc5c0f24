"""Helpers shared by the trace collection services."""

from .archive import archive_directory
from .manifest import ManifestStore
from .progress import ProgressHandler, ProgressLogger
from .retry import RetryPolicy, repeat_until_success
from .url_loader import load_urls_from_file

__all__ = [
    "archive_directory",
    "load_urls_from_file",
    "ManifestStore",
    "ProgressHandler",
    "ProgressLogger",
    "repeat_until_success",
    "RetryPolicy",
]
