"""
Configuration dataclasses for the domain finder system.

This module defines the configuration structures used throughout the system
(endpoints, timeouts, bootstrap caching, rate limiting, storage and logging)
together with helpers to load them from JSON files and the environment.
"""

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

from .exceptions import ConfigError


IANA_BOOTSTRAP_URL = "https://data.iana.org/rdap/dns.json"
DOH_URL = "https://cloudflare-dns.com/dns-query"
WHOIS_GATEWAY_URL = "https://www.whois.com/whois/"
DEFAULT_API_URL = "https://domain-finder-api.j-coulaud.workers.dev"

# Environment variables understood by apply_env_overrides()
ENV_PREFIX = "DOMAIN_FINDER_"


@dataclass
class EndpointConfig:
    """Outbound collaborators and the relay base URL."""

    bootstrap_url: str = IANA_BOOTSTRAP_URL
    doh_url: str = DOH_URL
    whois_gateway_url: str = WHOIS_GATEWAY_URL
    api_url: str = DEFAULT_API_URL


@dataclass
class TimeoutConfig:
    """Per-call timeouts in seconds."""

    bootstrap: float = 10.0
    rdap: float = 10.0
    dns: float = 10.0
    whois: float = 10.0
    relay: float = 60.0


@dataclass
class BootstrapConfig:
    """IANA bootstrap directory caching."""

    ttl_seconds: int = 86400
    cache_key: str = "iana-rdap-bootstrap"


@dataclass
class RateLimitRule:
    """A fixed-window rate limit rule."""

    max_requests: int = 30
    window_seconds: int = 60


@dataclass
class StoreConfig:
    """Backing key-value store for shared state."""

    backend: str = "memory"  # 'memory' or 'file'
    file_path: Optional[Path] = None
    hmac_secret: Optional[str] = None


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class SystemConfig:
    """Main system configuration combining all sub-configurations."""

    endpoints: EndpointConfig = field(default_factory=EndpointConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    bootstrap: BootstrapConfig = field(default_factory=BootstrapConfig)
    rate_limit: RateLimitRule = field(default_factory=RateLimitRule)
    store: StoreConfig = field(default_factory=StoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    max_batch_size: int = 50
    treat_nxdomain_as_available: bool = False
    # Take the client IP from CF-Connecting-IP / X-Real-IP / X-Forwarded-For
    trust_proxy_headers: bool = False


def create_default_config() -> SystemConfig:
    """Create a configuration with production defaults."""
    return SystemConfig()


def config_to_dict(config: SystemConfig) -> dict:
    """Convert a configuration to a JSON-serializable dictionary."""
    data = asdict(config)
    file_path = data["store"]["file_path"]
    data["store"]["file_path"] = str(file_path) if file_path is not None else None
    return data


def config_from_dict(data: dict) -> SystemConfig:
    """
    Build a configuration from a dictionary, using defaults for missing keys.

    Raises:
        ConfigError: If a section has an unexpected shape or unknown key
    """
    try:
        store_data = dict(data.get("store", {}))
        if store_data.get("file_path"):
            store_data["file_path"] = Path(store_data["file_path"])

        config = SystemConfig(
            endpoints=EndpointConfig(**data.get("endpoints", {})),
            timeouts=TimeoutConfig(**data.get("timeouts", {})),
            bootstrap=BootstrapConfig(**data.get("bootstrap", {})),
            rate_limit=RateLimitRule(**data.get("rate_limit", {})),
            store=StoreConfig(**store_data),
            logging=LoggingConfig(**data.get("logging", {})),
            max_batch_size=data.get("max_batch_size", 50),
            treat_nxdomain_as_available=data.get("treat_nxdomain_as_available", False),
            trust_proxy_headers=data.get("trust_proxy_headers", False),
        )
    except (TypeError, AttributeError) as e:
        raise ConfigError(
            code="invalid_config",
            message=f"Invalid configuration: {e}",
        )

    validate_config(config)
    return config


def validate_config(config: SystemConfig) -> None:
    """Raise ConfigError if any value is out of range."""
    if config.store.backend not in ("memory", "file"):
        raise ConfigError(
            code="invalid_store_backend",
            message=f"Unknown store backend: {config.store.backend}",
        )
    if config.store.backend == "file" and config.store.file_path is None:
        raise ConfigError(
            code="missing_store_path",
            message="File store backend requires store.file_path",
        )
    if config.logging.output_format not in ("json", "text", "both"):
        raise ConfigError(
            code="invalid_log_format",
            message=f"Invalid logging output format: {config.logging.output_format}",
        )
    if config.rate_limit.max_requests < 1 or config.rate_limit.window_seconds < 1:
        raise ConfigError(
            code="invalid_rate_limit",
            message="Rate limit values must be positive",
        )
    if not 1 <= config.max_batch_size <= 50:
        raise ConfigError(
            code="invalid_batch_size",
            message="max_batch_size must be between 1 and 50",
        )


def load_config_from_file(config_path: Path) -> SystemConfig:
    """
    Load configuration from a JSON file.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigError(
            code="not_found",
            message=f"Configuration file not found: {config_path}",
        )
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(
            code="unreadable",
            message=f"Could not read configuration: {e}",
            details={"path": str(config_path)},
        )

    if not isinstance(data, dict):
        raise ConfigError(
            code="invalid_config",
            message="Configuration root must be a JSON object",
        )
    return config_from_dict(data)


def save_config_to_file(config: SystemConfig, config_path: Path) -> None:
    """Save configuration to a JSON file, creating parent directories."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config_to_dict(config), f, indent=2)


def apply_env_overrides(
    config: SystemConfig,
    environ: Optional[dict] = None,
) -> SystemConfig:
    """
    Apply DOMAIN_FINDER_* environment variables on top of a configuration.

    Recognized variables: DOMAIN_FINDER_API_URL, DOMAIN_FINDER_LOG_LEVEL,
    DOMAIN_FINDER_LOG_FORMAT, DOMAIN_FINDER_STORE_PATH,
    DOMAIN_FINDER_STORE_SECRET, DOMAIN_FINDER_RATE_LIMIT,
    DOMAIN_FINDER_RATE_WINDOW, DOMAIN_FINDER_TRUST_PROXY.
    """
    env = os.environ if environ is None else environ

    api_url = env.get(f"{ENV_PREFIX}API_URL")
    if api_url:
        config.endpoints.api_url = api_url.rstrip("/")

    level = env.get(f"{ENV_PREFIX}LOG_LEVEL")
    if level:
        config.logging.level = level.lower()

    log_format = env.get(f"{ENV_PREFIX}LOG_FORMAT")
    if log_format:
        config.logging.output_format = log_format.lower()

    store_path = env.get(f"{ENV_PREFIX}STORE_PATH")
    if store_path:
        config.store.backend = "file"
        config.store.file_path = Path(store_path)

    secret = env.get(f"{ENV_PREFIX}STORE_SECRET")
    if secret:
        config.store.hmac_secret = secret

    config.rate_limit.max_requests = _int_env(
        env, f"{ENV_PREFIX}RATE_LIMIT", config.rate_limit.max_requests
    )
    config.rate_limit.window_seconds = _int_env(
        env, f"{ENV_PREFIX}RATE_WINDOW", config.rate_limit.window_seconds
    )

    trust_proxy = env.get(f"{ENV_PREFIX}TRUST_PROXY")
    if trust_proxy:
        config.trust_proxy_headers = trust_proxy.strip().lower() in ("1", "true", "yes")

    validate_config(config)
    return config


def _int_env(env, name: str, default: int) -> int:
    try:
        return int(env.get(name, default))
    except (TypeError, ValueError):
        return default
