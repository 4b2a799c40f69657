"""
Data models for the domain finder system.

Results are created fresh per request and never persisted.
"""

from dataclasses import dataclass, field
from typing import Optional

from .enums import ResolutionMethod, TierErrorCode


@dataclass
class DomainResult:
    """Availability answer (or failure) for a single domain."""

    domain: str
    available: bool
    registrar: Optional[str] = None
    expires: Optional[str] = None  # ISO date, YYYY-MM-DD
    method: Optional[ResolutionMethod] = None
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict:
        """Serialize, leaving out optional fields that are not set."""
        data: dict = {"domain": self.domain, "available": self.available}
        if self.registrar is not None:
            data["registrar"] = self.registrar
        if self.expires is not None:
            data["expires"] = self.expires
        if self.method is not None:
            data["method"] = self.method.value
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class TierError:
    """A non-fatal tier failure; drives the fallback to the next tier."""

    tier: ResolutionMethod
    code: TierErrorCode
    message: str
    http_status_code: Optional[int] = None


@dataclass
class BatchResult:
    """Ordered results of a batch check."""

    results: list[DomainResult] = field(default_factory=list)
    cached_bootstrap: bool = False

    def to_dict(self) -> dict:
        return {
            "results": [result.to_dict() for result in self.results],
            "cached_bootstrap": self.cached_bootstrap,
        }
