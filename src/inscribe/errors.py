"""
Error types raised by the write pipeline.

Usage errors (arguments, configuration, malformed transactions) are raised
synchronously where they are detected.  Anything that happens after the
first network or signer await is delivered through the returned awaitable
or the completion callback.
"""

from __future__ import annotations

from typing import Optional


class WriteApiError(Exception):
    pass


class ArgumentError(WriteApiError, TypeError):
    pass


class ConfigurationError(WriteApiError):
    pass


class ValidationError(WriteApiError, ValueError):
    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class UnknownActionError(ValidationError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown type: {name}")
        self.name = name


class NetworkError(WriteApiError):
    """Context fetch or submission failure.

    ``digest`` is the sha256 hex digest of the canonical transaction bytes when
    the failure happened during submission, for correlating with node logs.
    """

    def __init__(
        self,
        message: str,
        digest: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.digest = digest
        self.status_code = status_code


class SigningError(WriteApiError):
    pass


__all__ = [
    "ArgumentError",
    "ConfigurationError",
    "NetworkError",
    "SigningError",
    "UnknownActionError",
    "ValidationError",
    "WriteApiError",
]
