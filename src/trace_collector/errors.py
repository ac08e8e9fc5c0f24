"""Exceptions raised while collecting traces."""

from typing import Optional


class CollectionError(Exception):
    """Base exception for trace collection errors."""

    pass


class ConfigurationError(CollectionError):
    """Exception raised when required configuration is missing."""

    pass


class RemoteJobError(CollectionError):
    """Exception raised when WebPageTest reports an unexpected status."""

    def __init__(self, status_code, status_text: str = ""):
        self.status_code = status_code
        self.status_text = status_text
        super().__init__(f"unexpected status code {status_code} {status_text}".rstrip())


class NetworkError(CollectionError):
    """Exception raised when an HTTP resource cannot be fetched."""

    def __init__(self, message: str, url: str, status: Optional[int] = None):
        self.url = url
        self.status = status
        super().__init__(message)


class SubprocessError(CollectionError):
    """Exception raised when the local capture tool fails."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        self.returncode = returncode
        super().__init__(message)
