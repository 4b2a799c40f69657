"""
Enumeration types for the domain finder system.
"""

from enum import Enum


class ResolutionMethod(Enum):
    """Tier that produced a definitive availability answer."""

    RDAP = "rdap"
    DNS = "dns"
    WHOIS = "whois"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    EMPTY_INPUT = "empty_input"
    IP_ADDRESS = "ip_address"
    INVALID_DOMAIN = "invalid_domain"
    IDNA_ERROR = "idna_error"


class TierErrorCode(Enum):
    """Why a resolution tier failed to produce an answer."""

    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    PARSE_ERROR = "parse_error"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    INCONCLUSIVE = "inconclusive"


class DNSStatus(Enum):
    """DNS response codes returned by DNS-over-HTTPS JSON resolvers."""

    NOERROR = 0
    SERVFAIL = 2
    NXDOMAIN = 3
    REFUSED = 5
