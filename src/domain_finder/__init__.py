"""
Domain Finder - domain availability checks for any TLD.

Resolves each domain through RDAP (using the IANA bootstrap directory),
falls back to DNS-over-HTTPS and finally to a WHOIS web gateway, and checks
batches of up to 50 domains concurrently.
"""

__version__ = "1.1.0"
__author__ = "Domain Finder Team"

from domain_finder.exceptions import (
    DomainFinderError,
    ValidationError,
    StoreError,
    TamperingError,
    ConfigError,
)
from domain_finder.enums import (
    ResolutionMethod,
    LogLevel,
    DomainValidationErrorCode,
    TierErrorCode,
    DNSStatus,
)
from domain_finder.config import (
    EndpointConfig,
    TimeoutConfig,
    BootstrapConfig,
    RateLimitRule,
    StoreConfig,
    LoggingConfig,
    SystemConfig,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
    apply_env_overrides,
)
from domain_finder.models import (
    DomainResult,
    TierError,
    BatchResult,
)
from domain_finder.audit_logger import (
    AuditLogger,
    LogEntry,
)
from domain_finder.kv_store import (
    KeyValueStore,
    MemoryStore,
    FileStore,
    create_store,
)
from domain_finder.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    DomainValidationError,
)
from domain_finder.bootstrap_cache import (
    BootstrapCache,
    parse_bootstrap,
)
from domain_finder.rdap_client import RDAPClient
from domain_finder.dns_client import DNSClient
from domain_finder.whois_client import (
    WHOISClient,
    parse_whois_text,
)
from domain_finder.orchestrator import FallbackOrchestrator
from domain_finder.checker import DomainChecker
from domain_finder.rate_limiter import (
    RateLimiter,
    RateLimitStatus,
)
from domain_finder.relay_client import RelayClient
from domain_finder.cli import (
    main as cli_main,
    create_parser,
)

__all__ = [
    # Exceptions
    "DomainFinderError",
    "ValidationError",
    "StoreError",
    "TamperingError",
    "ConfigError",
    # Enums
    "ResolutionMethod",
    "LogLevel",
    "DomainValidationErrorCode",
    "TierErrorCode",
    "DNSStatus",
    # Configuration
    "EndpointConfig",
    "TimeoutConfig",
    "BootstrapConfig",
    "RateLimitRule",
    "StoreConfig",
    "LoggingConfig",
    "SystemConfig",
    "create_default_config",
    "load_config_from_file",
    "save_config_to_file",
    "apply_env_overrides",
    # Models
    "DomainResult",
    "TierError",
    "BatchResult",
    # Logging
    "AuditLogger",
    "LogEntry",
    # Store
    "KeyValueStore",
    "MemoryStore",
    "FileStore",
    "create_store",
    # Validation
    "DomainValidator",
    "DomainValidationResult",
    "DomainValidationError",
    # Resolution
    "BootstrapCache",
    "parse_bootstrap",
    "RDAPClient",
    "DNSClient",
    "WHOISClient",
    "parse_whois_text",
    "FallbackOrchestrator",
    "DomainChecker",
    # Rate limiting
    "RateLimiter",
    "RateLimitStatus",
    # Relay / CLI
    "RelayClient",
    "cli_main",
    "create_parser",
]
