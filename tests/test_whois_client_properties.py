"""
Property-based tests for the WHOIS gateway client.

Page parsing is pure, so most properties are checked against generated text
without any network access.
"""

import asyncio

import httpx
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_finder.config import WHOIS_GATEWAY_URL
from domain_finder.enums import ResolutionMethod, TierErrorCode
from domain_finder.models import DomainResult, TierError
from domain_finder.whois_client import (
    NOT_REGISTERED_PHRASES,
    REGISTERED_MARKERS,
    USER_AGENT,
    WHOISClient,
    parse_whois_text,
)

from fakes import FakeNetwork


REGISTERED_PAGE = """
<pre class="df-raw">
Domain Name: EXAMPLE.ORG
Registry Domain ID: 2e5bba3cdef
Registrar: Public Interest Registry<br>
Creation Date: 1995-04-30T04:00:00Z
Registry Expiry Date: 2028-08-30T04:00:00Z
</pre>
"""

# Filler that contains none of the phrases or markers
filler_strategy = st.text(alphabet="qwzxjkv \n<>/=", max_size=200)


def _change_case(text: str, flags: list[bool]) -> str:
    return "".join(
        c.upper() if flag else c.lower()
        for c, flag in zip(text, flags + [False] * len(text))
    )


class TestNotRegisteredPhrases:

    @given(
        phrase=st.sampled_from(NOT_REGISTERED_PHRASES),
        before=filler_strategy,
        after=filler_strategy,
        flags=st.lists(st.booleans(), max_size=40),
    )
    @settings(max_examples=100)
    def test_any_phrase_any_case_means_available(
        self,
        phrase: str,
        before: str,
        after: str,
        flags: list[bool],
    ) -> None:
        text = f"{before}{_change_case(phrase, flags)}{after}"
        result = parse_whois_text("example.com", text)

        assert isinstance(result, DomainResult)
        assert result.available is True
        assert result.method == ResolutionMethod.WHOIS

    def test_phrase_wins_over_markers(self) -> None:
        text = "Domain Name: example.com\nNo match for \"EXAMPLE.COM\"."
        result = parse_whois_text("example.com", text)
        assert result.available is True


class TestRegisteredMarkers:

    @given(
        marker=st.sampled_from(REGISTERED_MARKERS),
        before=filler_strategy,
        after=filler_strategy,
    )
    @settings(max_examples=100)
    def test_any_marker_means_taken(self, marker: str, before: str, after: str) -> None:
        result = parse_whois_text("example.com", f"{before}{marker} value{after}")

        assert isinstance(result, DomainResult)
        assert result.available is False
        assert result.method == ResolutionMethod.WHOIS

    def test_registrar_and_expiry_extracted(self) -> None:
        result = parse_whois_text("example.org", REGISTERED_PAGE)

        assert result.available is False
        assert result.registrar == "Public Interest Registry"
        assert result.expires == "2028-08-30"

    def test_expiration_date_label(self) -> None:
        text = "Creation Date: 2001-01-01\nExpiration Date: 2030-01-15\n"
        result = parse_whois_text("example.net", text)

        assert result.expires == "2030-01-15"
        assert result.registrar is None


class TestInconclusive:

    @given(text=filler_strategy)
    @settings(max_examples=100)
    def test_unrecognized_page(self, text: str) -> None:
        result = parse_whois_text("example.com", text)

        assert isinstance(result, TierError)
        assert result.code == TierErrorCode.INCONCLUSIVE
        assert result.message == "WHOIS lookup inconclusive"


class TestGatewayQuery:

    def test_builds_gateway_url(self) -> None:
        client = WHOISClient(httpx.AsyncClient(), gateway_url="https://www.whois.com/whois")
        assert client.build_url("example.com") == "https://www.whois.com/whois/example.com"

    def test_fetches_and_parses(self) -> None:
        network = FakeNetwork(whois={"example.org": (200, REGISTERED_PAGE)})
        seen_headers = []
        original = network.handler

        def handler(request: httpx.Request) -> httpx.Response:
            seen_headers.append(request.headers.get("user-agent"))
            return original(request)

        async def run():
            transport = httpx.MockTransport(handler)
            async with httpx.AsyncClient(transport=transport) as client:
                return await WHOISClient(client, WHOIS_GATEWAY_URL).query("example.org")

        result = asyncio.run(run())

        assert result.available is False
        assert result.registrar == "Public Interest Registry"
        assert seen_headers == [USER_AGENT]

    def test_non_success_status(self) -> None:
        network = FakeNetwork(whois={"example.org": (503, "busy")})

        async def run():
            async with network.client() as client:
                return await WHOISClient(client, WHOIS_GATEWAY_URL).query("example.org")

        result = asyncio.run(run())

        assert isinstance(result, TierError)
        assert result.code == TierErrorCode.SERVER_ERROR
        assert result.http_status_code == 503

    def test_timeout(self) -> None:
        network = FakeNetwork(whois={"example.org": httpx.ReadTimeout("slow")})

        async def run():
            async with network.client() as client:
                return await WHOISClient(client, WHOIS_GATEWAY_URL, timeout=3.0).query("example.org")

        result = asyncio.run(run())
        assert result.code == TierErrorCode.TIMEOUT
