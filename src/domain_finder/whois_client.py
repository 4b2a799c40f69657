"""
WHOIS client using a web gateway.

Port 43 is not reachable from every runtime, so WHOIS data is read from the
HTML page a public gateway renders for each domain. The page format is not
stable; parsing is kept in the pure function parse_whois_text() so it can be
tested without network access.
"""

import re
from typing import Optional, Union
from urllib.parse import quote

import httpx

from .enums import ResolutionMethod, TierErrorCode
from .models import DomainResult, TierError


USER_AGENT = "Mozilla/5.0 (compatible; DomainFinder/1.0)"

# Phrases meaning "not registered", matched case-insensitively, in order
NOT_REGISTERED_PHRASES = (
    "No match for",
    "NOT FOUND",
    "No Data Found",
    "Domain not found",
    "No entries found",
    "is available for registration",
    "Status: free",
    "Domain Status: No Object Found",
)

# Labels that only appear in a record for a registered domain, in order
REGISTERED_MARKERS = (
    "Creation Date:",
    "Created Date:",
    "Registration Date:",
    "Domain Name:",
    "Registrar:",
    "Registry Domain ID:",
)

REGISTRAR_PATTERN = re.compile(r"Registrar:\s*([^\n<]+)", re.IGNORECASE)
EXPIRY_PATTERN = re.compile(r"Expir(?:y|ation) Date:\s*(\d{4}-\d{2}-\d{2})", re.IGNORECASE)


def parse_whois_text(domain: str, text: str) -> Union[DomainResult, TierError]:
    """
    Interpret a WHOIS page.

    Returns:
        available=True on the first "not registered" phrase, available=False
        on the first registration marker (with registrar and expiry when
        they can be read), otherwise an inconclusive TierError
    """
    lowered = text.lower()
    for phrase in NOT_REGISTERED_PHRASES:
        if phrase.lower() in lowered:
            return DomainResult(
                domain=domain,
                available=True,
                method=ResolutionMethod.WHOIS,
            )

    for marker in REGISTERED_MARKERS:
        if marker in text:
            return DomainResult(
                domain=domain,
                available=False,
                registrar=_first_group(REGISTRAR_PATTERN, text),
                expires=_first_group(EXPIRY_PATTERN, text),
                method=ResolutionMethod.WHOIS,
            )

    return TierError(
        tier=ResolutionMethod.WHOIS,
        code=TierErrorCode.INCONCLUSIVE,
        message="WHOIS lookup inconclusive",
    )


def _first_group(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    if not match:
        return None
    value = match.group(1).strip()
    return value or None


class WHOISClient:
    """Fetches the gateway page for a domain and parses it."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        gateway_url: str,
        timeout: float = 10.0,
    ) -> None:
        self._client = client
        self._gateway_url = gateway_url if gateway_url.endswith("/") else f"{gateway_url}/"
        self._timeout = timeout

    def build_url(self, domain: str) -> str:
        return f"{self._gateway_url}{quote(domain, safe='')}"

    async def query(self, domain: str) -> Union[DomainResult, TierError]:
        try:
            response = await self._client.get(
                self.build_url(domain),
                headers={"User-Agent": USER_AGENT},
                timeout=httpx.Timeout(self._timeout),
            )
        except httpx.TimeoutException:
            return TierError(
                tier=ResolutionMethod.WHOIS,
                code=TierErrorCode.TIMEOUT,
                message=f"WHOIS lookup timed out after {self._timeout}s",
            )
        except httpx.HTTPError as e:
            return TierError(
                tier=ResolutionMethod.WHOIS,
                code=TierErrorCode.NETWORK_ERROR,
                message=f"WHOIS lookup failed: {e}",
            )

        if not response.is_success:
            return TierError(
                tier=ResolutionMethod.WHOIS,
                code=TierErrorCode.SERVER_ERROR,
                message=f"WHOIS gateway returned HTTP {response.status_code}",
                http_status_code=response.status_code,
            )

        return parse_whois_text(domain, response.text)
