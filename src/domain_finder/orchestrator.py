"""
Fallback orchestrator for a single domain.

Runs the resolution tiers in a fixed priority order and returns the first
usable answer:

1. RDAP: authoritative and structured, skipped when no server covers the TLD
2. DNS: fast existence signal, can only prove registration
3. WHOIS: slow last resort, parsed from an unstable HTML page

When every tier fails the domain is reported as not available with an error
naming the TLD.
"""

from typing import Awaitable, Callable, Mapping, Optional, Sequence, Union

from .audit_logger import AuditLogger
from .dns_client import DNSClient
from .domain_validator import get_tld
from .enums import LogLevel, ResolutionMethod
from .models import DomainResult, TierError
from .rdap_client import RDAPClient
from .whois_client import WHOISClient


TierOutcome = Optional[Union[DomainResult, TierError]]

# (domain, bootstrap directory) -> result, tier error, or None when skipped
Tier = Callable[[str, Mapping[str, str]], Awaitable[TierOutcome]]

COMPONENT = "FallbackOrchestrator"


def exhausted_result(domain: str) -> DomainResult:
    """Terminal result when no tier produced an answer."""
    return DomainResult(
        domain=domain,
        available=False,
        error=(
            f"Could not determine availability (no RDAP for .{get_tld(domain)}, "
            "DNS and WHOIS inconclusive)"
        ),
    )


class FallbackOrchestrator:
    """Tries each tier in order; knows nothing tier-specific."""

    def __init__(
        self,
        tiers: Sequence[tuple[ResolutionMethod, Tier]],
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._tiers = list(tiers)
        self._logger = logger

    @classmethod
    def from_clients(
        cls,
        rdap: RDAPClient,
        dns: DNSClient,
        whois: WHOISClient,
        logger: Optional[AuditLogger] = None,
    ) -> "FallbackOrchestrator":
        async def rdap_tier(domain: str, directory: Mapping[str, str]) -> TierOutcome:
            return await rdap.query(domain, directory)

        async def dns_tier(domain: str, directory: Mapping[str, str]) -> TierOutcome:
            return await dns.query(domain)

        async def whois_tier(domain: str, directory: Mapping[str, str]) -> TierOutcome:
            return await whois.query(domain)

        return cls(
            tiers=[
                (ResolutionMethod.RDAP, rdap_tier),
                (ResolutionMethod.DNS, dns_tier),
                (ResolutionMethod.WHOIS, whois_tier),
            ],
            logger=logger,
        )

    @property
    def tier_names(self) -> list[str]:
        return [method.value for method, _ in self._tiers]

    async def resolve(self, domain: str, directory: Mapping[str, str]) -> DomainResult:
        """Resolve one canonical domain through the tier chain."""
        for method, tier in self._tiers:
            outcome = await tier(domain, directory)

            if outcome is None:
                self._log(LogLevel.DEBUG, f"{method.value} tier skipped", {
                    "domain": domain,
                })
                continue

            if isinstance(outcome, TierError):
                self._log(LogLevel.DEBUG, f"{method.value} tier failed", {
                    "domain": domain,
                    "code": outcome.code.value,
                    "error": outcome.message,
                    "http_status_code": outcome.http_status_code,
                })
                continue

            if outcome.is_error:
                continue

            self._log(LogLevel.DEBUG, f"Resolved by {method.value}", {
                "domain": domain,
                "available": outcome.available,
            })
            return outcome

        self._log(LogLevel.WARN, "All tiers exhausted", {"domain": domain})
        return exhausted_result(domain)

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, COMPONENT, message, data)
