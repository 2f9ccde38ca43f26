"""Exception types raised by the pool monitor.

Loop-body failures (``ReadFailure``, ``DerivationError``) are recoverable and
retried after a backoff; ``ConfigError`` is fatal at startup.
"""
from typing import Optional


class MonitorError(Exception):
    """Base exception for all monitor errors."""

    code: Optional[str] = None

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ConfigError(MonitorError):
    """Raised when a CLI argument or environment variable is invalid."""


class ReadFailure(MonitorError):
    """Raised when a JSON-RPC read fails or returns a malformed result."""


class DerivationError(MonitorError):
    """Raised when a price cannot be derived from the sampled reserves."""

    code = "ZERO_RESERVE"
