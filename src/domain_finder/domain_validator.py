"""
Domain validation and normalization module.

Turns an untrusted caller string into the canonical registrable domain
(second-level label + public suffix) or a structured validation error.
Validation is pure: the Public Suffix List snapshot bundled with tldextract
is used and no network I/O is performed.
"""

import ipaddress
import re
from dataclasses import dataclass
from typing import Any, Optional

import idna
import tldextract

from .enums import DomainValidationErrorCode
from .exceptions import ValidationError


SCHEME_PATTERN = re.compile(r"^https?://")

# Truncate at the first path separator or port delimiter
HOST_TERMINATORS = re.compile(r"[/:]")

# Letters, digits, hyphen and dot only, after IDNA encoding
LDH_PATTERN = re.compile(r"^[a-z0-9-]+(\.[a-z0-9-]+)*$")

# Offline extractor: bundled PSL snapshot, never fetched, never cached to disk
_EXTRACTOR = tldextract.TLDExtract(suffix_list_urls=(), cache_dir=None)


@dataclass
class DomainValidationError:
    """Structured error information for domain validation failures."""

    code: DomainValidationErrorCode
    message: str
    details: dict


@dataclass
class DomainValidationResult:
    """Result of domain validation operation."""

    valid: bool
    canonical_domain: Optional[str]
    error: Optional[DomainValidationError]

    @property
    def reason(self) -> Optional[str]:
        return self.error.message if self.error else None


class DomainValidator:
    """
    Validates and normalizes domain names.

    Handles:
    - Stripping scheme, path and port decorations
    - Lowercasing and IDNA encoding of international names
    - Rejection of IP literals and malformed hosts
    - Reduction to the registrable domain using public-suffix rules
    """

    def validate(self, raw_domain: Any) -> DomainValidationResult:
        """
        Validate and normalize a raw domain string.

        Args:
            raw_domain: Caller-supplied value; anything but a non-empty
                string is rejected

        Returns:
            DomainValidationResult with the canonical domain or an error
        """
        if not raw_domain or not isinstance(raw_domain, str):
            return self._failure(
                DomainValidationErrorCode.EMPTY_INPUT,
                "Domain is required",
                raw_domain,
            )

        host = self.normalize_host(raw_domain)
        if not host:
            return self._failure(
                DomainValidationErrorCode.EMPTY_INPUT,
                "Domain is empty",
                raw_domain,
            )

        if self.is_ip_address(host):
            return self._failure(
                DomainValidationErrorCode.IP_ADDRESS,
                "IP addresses are not allowed",
                raw_domain,
            )

        try:
            host = self.encode_idna(host)
        except ValidationError as e:
            return self._failure(
                DomainValidationErrorCode.IDNA_ERROR,
                "Invalid domain",
                raw_domain,
                {"idna_error": e.message},
            )

        if not LDH_PATTERN.match(host):
            return self._failure(
                DomainValidationErrorCode.INVALID_DOMAIN,
                "Invalid domain",
                raw_domain,
                {"host": host},
            )

        registrable = self.registrable_domain(host)
        if registrable is None:
            return self._failure(
                DomainValidationErrorCode.INVALID_DOMAIN,
                "Invalid domain",
                raw_domain,
                {"host": host},
            )

        return DomainValidationResult(
            valid=True,
            canonical_domain=registrable,
            error=None,
        )

    def normalize_host(self, raw_domain: str) -> str:
        """
        Trim, lowercase, drop a leading http(s)://, cut at the first '/' or
        ':' and drop the root dot of a fully-qualified name.
        """
        host = SCHEME_PATTERN.sub("", raw_domain.strip().lower())
        host = HOST_TERMINATORS.split(host, maxsplit=1)[0]
        if host.endswith("."):
            host = host[:-1]
        return host

    def is_ip_address(self, host: str) -> bool:
        try:
            ipaddress.ip_address(host.strip("[]"))
        except ValueError:
            return False
        return True

    def encode_idna(self, host: str) -> str:
        """
        Encode an international host name to its ASCII form.

        Raises:
            ValidationError: If IDNA encoding fails
        """
        if all(ord(c) < 128 for c in host):
            return host
        try:
            return idna.encode(host, uts46=True).decode("ascii")
        except idna.IDNAError as e:
            raise ValidationError(
                code=DomainValidationErrorCode.IDNA_ERROR.value,
                message=f"IDNA encoding failed: {e}",
                details={"host": host},
            )

    def registrable_domain(self, host: str) -> Optional[str]:
        """Return '<label>.<public suffix>' for host, or None if there is none."""
        extracted = _EXTRACTOR(host)
        if not extracted.domain or not extracted.suffix:
            return None
        return f"{extracted.domain}.{extracted.suffix}"

    def _failure(
        self,
        code: DomainValidationErrorCode,
        message: str,
        raw_domain: Any,
        extra: Optional[dict] = None,
    ) -> DomainValidationResult:
        details = {"raw_input": raw_domain}
        if extra:
            details.update(extra)
        return DomainValidationResult(
            valid=False,
            canonical_domain=None,
            error=DomainValidationError(code=code, message=message, details=details),
        )


def get_tld(domain: str) -> str:
    """Rightmost label of a domain name."""
    return domain.lower().rstrip(".").rsplit(".", 1)[-1]
