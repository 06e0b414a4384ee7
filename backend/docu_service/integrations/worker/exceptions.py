"""
Worker-specific exceptions for error handling.
"""

from typing import Optional, Dict, Any


class WorkerError(Exception):
    """Base exception for ingestion worker API errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, status_code={self.status_code})"


class WorkerTimeoutError(WorkerError):
    """Raised when a worker request exceeds the configured timeout."""

    def __init__(
        self,
        message: str = "Request to ingestion worker timed out",
        **kwargs,
    ):
        super().__init__(message, **kwargs)


class WorkerConnectionError(WorkerError):
    """Raised when network/connection errors occur."""

    def __init__(
        self,
        message: str = "Connection error - unable to reach ingestion worker",
        **kwargs,
    ):
        super().__init__(message, **kwargs)


class WorkerResponseError(WorkerError):
    """Raised when the worker answers with an error status or an unusable body."""

    def __init__(
        self,
        message: str,
        retry_after: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after
