"""
Tests for the DNS-over-HTTPS client.
"""

import asyncio

import httpx

from domain_finder.config import DOH_URL
from domain_finder.dns_client import DNSClient
from domain_finder.enums import ResolutionMethod, TierErrorCode
from domain_finder.models import DomainResult, TierError

from fakes import NS_ANSWER, FakeNetwork


A_ANSWER = [{"name": "example.com", "type": 1, "TTL": 300, "data": "93.184.216.34"}]


async def _query(network: FakeNetwork, domain: str, treat_nxdomain_as_available: bool = False):
    async with network.client() as client:
        dns = DNSClient(
            client,
            doh_url=DOH_URL,
            timeout=5.0,
            treat_nxdomain_as_available=treat_nxdomain_as_available,
        )
        return await dns.query(domain)


class TestExistence:

    def test_ns_answer_means_taken(self) -> None:
        network = FakeNetwork(dns={("example.com", "NS"): (0, NS_ANSWER)})
        result = asyncio.run(_query(network, "example.com"))

        assert result == DomainResult(
            domain="example.com",
            available=False,
            method=ResolutionMethod.DNS,
        )

    def test_a_answer_alone_means_taken(self) -> None:
        network = FakeNetwork(dns={
            ("example.com", "NS"): (0, []),
            ("example.com", "A"): (0, A_ANSWER),
        })
        result = asyncio.run(_query(network, "example.com"))

        assert isinstance(result, DomainResult)
        assert result.available is False

    def test_queries_both_record_types(self) -> None:
        network = FakeNetwork()
        asyncio.run(_query(network, "example.com"))

        queried = sorted(url.params["type"] for url in network.calls_to("cloudflare-dns.com"))
        assert queried == ["A", "NS"]


class TestInconclusive:

    def test_nxdomain_is_not_availability(self) -> None:
        result = asyncio.run(_query(FakeNetwork(), "maybe-free.com"))

        assert isinstance(result, TierError)
        assert result.code == TierErrorCode.INCONCLUSIVE
        assert result.message == "DNS lookup inconclusive (NXDOMAIN, NXDOMAIN)"

    def test_noerror_without_answers(self) -> None:
        network = FakeNetwork(dns={
            ("example.com", "NS"): (0, []),
            ("example.com", "A"): (0, []),
        })
        result = asyncio.run(_query(network, "example.com"))

        assert isinstance(result, TierError)
        assert result.code == TierErrorCode.INCONCLUSIVE

    def test_servfail(self) -> None:
        network = FakeNetwork(dns={
            ("example.com", "NS"): (2, []),
            ("example.com", "A"): (2, []),
        })
        result = asyncio.run(_query(network, "example.com"))
        assert "SERVFAIL" in result.message

    def test_transport_failure(self) -> None:
        network = FakeNetwork(dns={
            ("example.com", "NS"): httpx.ConnectError("down"),
            ("example.com", "A"): httpx.ReadTimeout("slow"),
        })
        result = asyncio.run(_query(network, "example.com"))

        assert isinstance(result, TierError)
        assert result.code == TierErrorCode.NETWORK_ERROR
        assert result.message.startswith("DNS lookup failed")

    def test_one_failure_one_answer_still_taken(self) -> None:
        network = FakeNetwork(dns={
            ("example.com", "NS"): httpx.ConnectError("down"),
            ("example.com", "A"): (0, A_ANSWER),
        })
        result = asyncio.run(_query(network, "example.com"))

        assert isinstance(result, DomainResult)
        assert result.available is False


class TestNxdomainPolicy:

    def test_nxdomain_available_when_enabled(self) -> None:
        result = asyncio.run(_query(FakeNetwork(), "free.com", treat_nxdomain_as_available=True))

        assert isinstance(result, DomainResult)
        assert result.available is True
        assert result.method == ResolutionMethod.DNS

    def test_partial_failure_stays_inconclusive(self) -> None:
        network = FakeNetwork(dns={("free.com", "A"): httpx.ConnectError("down")})
        result = asyncio.run(_query(network, "free.com", treat_nxdomain_as_available=True))

        assert isinstance(result, TierError)
        assert result.code == TierErrorCode.INCONCLUSIVE
