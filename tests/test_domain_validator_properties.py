"""
Property-based tests for the Domain Validator module.

Uses Hypothesis to check normalization, canonicalization and rejection of
malformed input.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from domain_finder.domain_validator import DomainValidator, get_tld
from domain_finder.enums import DomainValidationErrorCode


# Suffixes without ICANN sub-suffixes that could swallow the generated label
SIMPLE_SUFFIXES = ["com", "net", "org", "de", "co.uk", "fr"]


@st.composite
def label_strategy(draw) -> str:
    """Generate a lowercase LDH label that is never itself a public suffix."""
    tail = draw(st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789", min_size=1, max_size=20))
    return f"dom{tail}"


@st.composite
def registrable_domain_strategy(draw) -> str:
    return f"{draw(label_strategy())}.{draw(st.sampled_from(SIMPLE_SUFFIXES))}"


@st.composite
def decorated_domain_strategy(draw) -> tuple[str, str]:
    """Generate (decorated input, expected canonical domain) pairs."""
    domain = draw(registrable_domain_strategy())
    host = domain
    if draw(st.booleans()):
        host = f"{draw(label_strategy())}.{host}"

    if draw(st.booleans()):
        host = f"{host}."

    scheme = draw(st.sampled_from(["", "http://", "https://"]))
    port = draw(st.sampled_from(["", ":8080", ":443"]))
    path = draw(st.sampled_from(["", "/", "/path/to/page", "/?q=1"]))
    raw = f"{scheme}{host}{port}{path}"

    if draw(st.booleans()):
        raw = raw.upper()
    if draw(st.booleans()):
        raw = f"  {raw}\t"
    return raw, domain


class TestCanonicalization:
    """A valid input always reduces to its registrable domain."""

    @given(pair=decorated_domain_strategy())
    @settings(max_examples=100)
    def test_decorations_are_stripped(self, pair: tuple[str, str]) -> None:
        raw, expected = pair
        result = DomainValidator().validate(raw)

        assert result.valid, f"{raw!r} should be valid: {result.reason}"
        assert result.canonical_domain == expected
        assert result.error is None

    @given(domain=registrable_domain_strategy())
    @settings(max_examples=100)
    def test_canonical_form_is_a_fixed_point(self, domain: str) -> None:
        validator = DomainValidator()
        first = validator.validate(domain)
        second = validator.validate(first.canonical_domain)

        assert second.valid
        assert second.canonical_domain == first.canonical_domain

    def test_subdomain_of_multi_label_suffix(self) -> None:
        result = DomainValidator().validate("app.example.co.uk")
        assert result.canonical_domain == "example.co.uk"

    def test_url_with_port_and_path(self) -> None:
        result = DomainValidator().validate("https://Example.COM:8080/about")
        assert result.canonical_domain == "example.com"

    def test_fully_qualified_name(self) -> None:
        validator = DomainValidator()
        assert validator.validate("example.com.").canonical_domain == "example.com"
        assert validator.validate("https://app.example.co.uk.:443/").canonical_domain == "example.co.uk"
        assert validator.validate("example.com..").reason == "Invalid domain"

    def test_international_name_is_idna_encoded(self) -> None:
        result = DomainValidator().validate("münchen.de")
        assert result.valid
        assert result.canonical_domain == "xn--mnchen-3ya.de"


class TestRejection:
    """Invalid input never produces a canonical domain."""

    @given(address=st.ip_addresses(v=4))
    @settings(max_examples=100)
    def test_ipv4_literals_rejected(self, address) -> None:
        result = DomainValidator().validate(f"http://{address}/")

        assert not result.valid
        assert result.canonical_domain is None
        assert result.error.code == DomainValidationErrorCode.IP_ADDRESS
        assert result.reason == "IP addresses are not allowed"

    def test_missing_input(self) -> None:
        validator = DomainValidator()
        for raw in (None, "", 42, ["example.com"]):
            result = validator.validate(raw)
            assert not result.valid
            assert result.reason == "Domain is required"

    def test_blank_input(self) -> None:
        for raw in ("   ", "https://", "/path"):
            result = DomainValidator().validate(raw)
            assert result.reason == "Domain is empty"

    def test_no_public_suffix(self) -> None:
        for raw in ("localhost", "example", "com", "co.uk"):
            result = DomainValidator().validate(raw)
            assert not result.valid, raw
            assert result.reason == "Invalid domain"
            assert result.error.code == DomainValidationErrorCode.INVALID_DOMAIN

    def test_illegal_characters(self) -> None:
        for raw in ("exa mple.com", "exa_mple.com", "example..com", "ex!ample.com"):
            result = DomainValidator().validate(raw)
            assert not result.valid, raw
            assert result.reason == "Invalid domain"

    def test_raw_input_kept_in_details(self) -> None:
        result = DomainValidator().validate("http://10.0.0.1")
        assert result.error.details["raw_input"] == "http://10.0.0.1"


class TestDeterminism:
    """Validation is a pure function of its input."""

    @given(raw=st.text(alphabet="abcXYZ019.-/:ü ", max_size=30))
    @settings(max_examples=200)
    def test_same_input_same_outcome(self, raw: str) -> None:
        validator = DomainValidator()
        first = validator.validate(raw)
        second = DomainValidator().validate(raw)

        assert first.valid == second.valid
        assert first.canonical_domain == second.canonical_domain
        assert first.reason == second.reason
        if first.valid:
            assert first.canonical_domain == first.canonical_domain.lower()


class TestGetTld:

    def test_rightmost_label(self) -> None:
        assert get_tld("example.co.uk") == "uk"
        assert get_tld("Example.COM.") == "com"
        assert get_tld("xn--mnchen-3ya.de") == "de"
