"""
RDAP client for domain availability checking.

Queries the registry RDAP server listed in the bootstrap directory:

- HTTP 404 -> the domain is not registered
- HTTP 2xx -> the domain is registered; registrar and expiry are read from
  the entity/event structures when present
- anything else -> tier error, the caller falls back to the next tier
"""

from typing import Any, Mapping, Optional, Union

import httpx

from .domain_validator import get_tld
from .enums import ResolutionMethod, TierErrorCode
from .models import DomainResult, TierError


RDAP_HEADERS = {"Accept": "application/rdap+json, application/json"}

UNKNOWN_REGISTRAR = "Unknown"


def build_rdap_url(server: str, domain: str) -> str:
    """Join a bootstrap base URL and a domain as {base}/domain/{name}."""
    base = server if server.endswith("/") else f"{server}/"
    return f"{base}domain/{domain.lower()}"


def extract_registrar(data: Mapping[str, Any]) -> Optional[str]:
    """
    Display name of the first entity carrying the 'registrar' role.

    Uses the vCard 'fn' value, then the entity handle, then 'Unknown'.
    Returns None when no registrar entity exists.
    """
    entities = data.get("entities")
    if not isinstance(entities, list):
        return None

    for entity in entities:
        if not isinstance(entity, dict):
            continue
        roles = entity.get("roles") or []
        if "registrar" not in roles:
            continue
        return _vcard_value(entity, "fn") or entity.get("handle") or UNKNOWN_REGISTRAR
    return None


def extract_expiration(data: Mapping[str, Any]) -> Optional[str]:
    """Date part (YYYY-MM-DD) of the 'expiration' event, if any."""
    events = data.get("events")
    if not isinstance(events, list):
        return None

    for event in events:
        if not isinstance(event, dict) or event.get("eventAction") != "expiration":
            continue
        event_date = event.get("eventDate")
        if isinstance(event_date, str) and event_date:
            return event_date.split("T")[0]
    return None


def _vcard_value(entity: Mapping[str, Any], name: str) -> Optional[str]:
    try:
        for item in entity["vcardArray"][1]:
            if item[0] == name and isinstance(item[3], str) and item[3]:
                return item[3]
    except (KeyError, IndexError, TypeError):
        pass
    return None


class RDAPClient:
    """
    Async RDAP client.

    Never raises for network or protocol failures: they come back as
    TierError so the orchestrator can move on.
    """

    def __init__(self, client: httpx.AsyncClient, timeout: float = 10.0) -> None:
        self._client = client
        self._timeout = timeout

    def get_server_for_domain(
        self, domain: str, directory: Mapping[str, str]
    ) -> Optional[str]:
        return directory.get(get_tld(domain))

    async def query(
        self, domain: str, directory: Mapping[str, str]
    ) -> Optional[Union[DomainResult, TierError]]:
        """
        Look a domain up over RDAP.

        Returns:
            None if no RDAP server covers the TLD, otherwise a DomainResult
            or a TierError
        """
        server = self.get_server_for_domain(domain, directory)
        if server is None:
            return None

        rdap_url = build_rdap_url(server, domain)

        try:
            response = await self._client.get(
                rdap_url,
                headers=RDAP_HEADERS,
                timeout=httpx.Timeout(self._timeout),
            )
        except httpx.TimeoutException:
            return self._error(
                TierErrorCode.TIMEOUT,
                f"RDAP request timed out after {self._timeout}s",
            )
        except httpx.HTTPError as e:
            return self._error(TierErrorCode.NETWORK_ERROR, f"RDAP request failed: {e}")

        if response.status_code == 404:
            return DomainResult(
                domain=domain,
                available=True,
                method=ResolutionMethod.RDAP,
            )

        if response.status_code == 429:
            return self._error(
                TierErrorCode.RATE_LIMITED,
                "Rate limited by RDAP server",
                response.status_code,
            )

        if not response.is_success:
            return self._error(
                TierErrorCode.SERVER_ERROR,
                f"Unexpected RDAP status: {response.status_code}",
                response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            return self._error(
                TierErrorCode.PARSE_ERROR,
                f"Failed to parse RDAP response: {e}",
                response.status_code,
            )

        if not isinstance(data, dict):
            return self._error(
                TierErrorCode.PARSE_ERROR,
                "RDAP response is not a JSON object",
                response.status_code,
            )

        return DomainResult(
            domain=domain,
            available=False,
            registrar=extract_registrar(data),
            expires=extract_expiration(data),
            method=ResolutionMethod.RDAP,
        )

    def _error(
        self,
        code: TierErrorCode,
        message: str,
        http_status_code: Optional[int] = None,
    ) -> TierError:
        return TierError(
            tier=ResolutionMethod.RDAP,
            code=code,
            message=message,
            http_status_code=http_status_code,
        )
