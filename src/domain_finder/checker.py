"""
Batch coordinator: the entry point of the resolution engine.

Validates up to max_batch_size raw domain strings, resolves the valid ones
concurrently through the fallback orchestrator and returns results in input
order, together with whether the bootstrap directory came from cache.
"""

import asyncio
import time
from types import MappingProxyType
from typing import Any, Mapping, Optional

import httpx

from .audit_logger import AuditLogger
from .bootstrap_cache import BootstrapCache
from .config import SystemConfig, create_default_config
from .dns_client import DNSClient
from .domain_validator import DomainValidator
from .enums import LogLevel
from .exceptions import ValidationError
from .kv_store import KeyValueStore, create_store
from .models import BatchResult, DomainResult
from .orchestrator import FallbackOrchestrator
from .rdap_client import RDAPClient
from .whois_client import WHOISClient


COMPONENT = "DomainChecker"


class DomainChecker:
    """
    Resolves batches of domains.

    Usage:
        async with DomainChecker(config) as checker:
            batch = await checker.check_domains(["example.com", "example.io"])

    The HTTP client is shared by all tiers; pass one in to control transport
    (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        config: Optional[SystemConfig] = None,
        store: Optional[KeyValueStore] = None,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._config = config or create_default_config()
        self._store = store if store is not None else create_store(self._config.store)
        self._logger = logger
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=True)

        self._validator = DomainValidator()
        self._bootstrap = BootstrapCache(
            store=self._store,
            client=self._client,
            bootstrap_url=self._config.endpoints.bootstrap_url,
            config=self._config.bootstrap,
            timeout=self._config.timeouts.bootstrap,
            logger=logger,
        )
        self._orchestrator = FallbackOrchestrator.from_clients(
            rdap=RDAPClient(self._client, timeout=self._config.timeouts.rdap),
            dns=DNSClient(
                self._client,
                doh_url=self._config.endpoints.doh_url,
                timeout=self._config.timeouts.dns,
                treat_nxdomain_as_available=self._config.treat_nxdomain_as_available,
            ),
            whois=WHOISClient(
                self._client,
                gateway_url=self._config.endpoints.whois_gateway_url,
                timeout=self._config.timeouts.whois,
            ),
            logger=logger,
        )

    async def __aenter__(self) -> "DomainChecker":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this checker created it."""
        if self._owns_client:
            await self._client.aclose()

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def validator(self) -> DomainValidator:
        return self._validator

    async def check_domains(self, raw_domains: Any) -> BatchResult:
        """
        Check a batch of raw domain strings.

        Entries beyond max_batch_size are dropped silently. Invalid entries
        get an error result without any network access.

        Raises:
            ValidationError: If raw_domains is not a list
        """
        if not isinstance(raw_domains, (list, tuple)):
            raise ValidationError(
                code="invalid_request",
                message='Missing or invalid "domains" array',
            )

        start_time = time.perf_counter()
        batch = list(raw_domains)[: self._config.max_batch_size]
        validations = [self._validator.validate(raw) for raw in batch]

        cached_bootstrap = False
        directory: Mapping[str, str] = MappingProxyType({})
        if any(validation.valid for validation in validations):
            directory, cached_bootstrap = await self._bootstrap.get_directory()

        async def resolve(raw: Any, validation) -> DomainResult:
            if not validation.valid:
                return DomainResult(
                    domain=_display(raw),
                    available=False,
                    error=validation.reason,
                )
            return await self._orchestrator.resolve(validation.canonical_domain, directory)

        results = await asyncio.gather(
            *(resolve(raw, validation) for raw, validation in zip(batch, validations))
        )

        self._log(LogLevel.INFO, "Batch checked", {
            "requested": len(raw_domains),
            "checked": len(batch),
            "invalid": sum(1 for validation in validations if not validation.valid),
            "cached_bootstrap": cached_bootstrap,
            "duration_ms": round((time.perf_counter() - start_time) * 1000, 1),
        })

        return BatchResult(results=list(results), cached_bootstrap=cached_bootstrap)

    async def check_domain(self, raw_domain: Any) -> DomainResult:
        """Check a single domain; same as a one-element batch."""
        batch = await self.check_domains([raw_domain])
        return batch.results[0]

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, COMPONENT, message, data)


def _display(raw: Any) -> str:
    if raw is None:
        return ""
    return raw if isinstance(raw, str) else str(raw)
