"""
Exception classes for the domain finder system.

All exceptions inherit from DomainFinderError and carry a machine-readable
code, a human-readable message and optional details.
"""

from typing import Optional


class DomainFinderError(Exception):
    """Base exception for all domain finder errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainFinderError):
    """Raised when a domain or request payload is malformed."""

    pass


class StoreError(DomainFinderError):
    """Raised when the key-value store cannot be read or written."""

    pass


class TamperingError(StoreError):
    """Raised when the HMAC of a persisted store does not match its content."""

    pass


class ConfigError(DomainFinderError):
    """Raised when a configuration file cannot be loaded or is invalid."""

    pass
