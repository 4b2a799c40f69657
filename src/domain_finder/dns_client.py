"""
DNS-over-HTTPS existence check.

DNS can only prove that a name exists: NOERROR with answers for NS or A
means the domain is registered. NXDOMAIN does not prove availability,
since registered domains may have no delegation, so it is reported as
inconclusive unless the NXDOMAIN-as-available policy is switched on.
"""

import asyncio
from typing import Any, Union

import httpx

from .enums import DNSStatus, ResolutionMethod, TierErrorCode
from .models import DomainResult, TierError


DOH_HEADERS = {"Accept": "application/dns-json"}

RECORD_TYPES = ("NS", "A")


class DNSClient:
    """Queries NS and A records concurrently over DNS-over-HTTPS."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        doh_url: str,
        timeout: float = 10.0,
        treat_nxdomain_as_available: bool = False,
    ) -> None:
        self._client = client
        self._doh_url = doh_url
        self._timeout = timeout
        self._treat_nxdomain_as_available = treat_nxdomain_as_available

    async def query(self, domain: str) -> Union[DomainResult, TierError]:
        answers = await asyncio.gather(
            *(self._lookup(domain, record_type) for record_type in RECORD_TYPES),
            return_exceptions=True,
        )

        statuses: list[int] = []
        failures: list[str] = []
        for record_type, answer in zip(RECORD_TYPES, answers):
            if isinstance(answer, BaseException):
                failures.append(f"{record_type}: {answer}")
                continue
            status, records = answer
            if status == DNSStatus.NOERROR.value and records:
                return DomainResult(
                    domain=domain,
                    available=False,
                    method=ResolutionMethod.DNS,
                )
            statuses.append(status)

        if failures and not statuses:
            return TierError(
                tier=ResolutionMethod.DNS,
                code=TierErrorCode.NETWORK_ERROR,
                message=f"DNS lookup failed: {'; '.join(failures)}",
            )

        if (
            self._treat_nxdomain_as_available
            and not failures
            and all(status == DNSStatus.NXDOMAIN.value for status in statuses)
        ):
            return DomainResult(
                domain=domain,
                available=True,
                method=ResolutionMethod.DNS,
            )

        return TierError(
            tier=ResolutionMethod.DNS,
            code=TierErrorCode.INCONCLUSIVE,
            message=_inconclusive_message(statuses),
        )

    async def _lookup(self, domain: str, record_type: str) -> tuple[int, list[Any]]:
        """
        Run one DoH query.

        Returns:
            (DNS status code, answer records)

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status
            ValueError: On a malformed JSON body
        """
        response = await self._client.get(
            self._doh_url,
            params={"name": domain, "type": record_type},
            headers=DOH_HEADERS,
            timeout=httpx.Timeout(self._timeout),
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("DNS response is not a JSON object")

        status = data.get("Status")
        if not isinstance(status, int):
            raise ValueError("DNS response has no Status")

        records = data.get("Answer") or []
        if not isinstance(records, list):
            records = []
        return status, records


def _inconclusive_message(statuses: list[int]) -> str:
    if not statuses:
        return "DNS lookup inconclusive"
    names = []
    for status in statuses:
        try:
            names.append(DNSStatus(status).name)
        except ValueError:
            names.append(str(status))
    return f"DNS lookup inconclusive ({', '.join(names)})"
