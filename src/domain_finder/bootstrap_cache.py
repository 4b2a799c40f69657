"""
IANA RDAP bootstrap directory cache.

The IANA bootstrap file maps TLDs to the RDAP servers of their registries:

    {
        "services": [
            [["com", "net"], ["https://rdap.verisign.com/com/v1/"]],
            ...
        ]
    }

The flattened TLD -> server map is kept in the key-value store for the
configured TTL. A failed fetch yields an empty directory instead of an error,
so every domain simply falls through to the DNS tier.
"""

from types import MappingProxyType
from typing import Any, Mapping, Optional

import httpx

from .audit_logger import AuditLogger
from .config import BootstrapConfig
from .enums import LogLevel
from .kv_store import KeyValueStore


COMPONENT = "BootstrapCache"


def parse_bootstrap(document: Any) -> dict[str, str]:
    """
    Flatten an IANA bootstrap document into a TLD -> RDAP base URL map.

    The first URL of each service wins; malformed services are skipped.
    """
    directory: dict[str, str] = {}
    if not isinstance(document, dict):
        return directory

    services = document.get("services")
    if not isinstance(services, list):
        return directory

    for service in services:
        if not isinstance(service, list) or len(service) < 2:
            continue
        tlds, urls = service[0], service[1]
        if not isinstance(tlds, list) or not isinstance(urls, list) or not urls:
            continue
        server = urls[0]
        if not isinstance(server, str) or not server:
            continue
        for tld in tlds:
            if isinstance(tld, str) and tld:
                directory[tld.lower().lstrip(".")] = server

    return directory


class BootstrapCache:
    """Serves the current bootstrap directory, refreshing it once per TTL."""

    def __init__(
        self,
        store: KeyValueStore,
        client: httpx.AsyncClient,
        bootstrap_url: str,
        config: Optional[BootstrapConfig] = None,
        timeout: float = 10.0,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._store = store
        self._client = client
        self._bootstrap_url = bootstrap_url
        self._config = config or BootstrapConfig()
        self._timeout = timeout
        self._logger = logger

    async def get_directory(self) -> tuple[Mapping[str, str], bool]:
        """
        Return the current directory and whether it was served from cache.

        The returned mapping is read-only.
        """
        cached = self._read_cache()
        if cached:
            return MappingProxyType(cached), True

        directory = await self._fetch()
        if directory:
            self._write_cache(directory)
        return MappingProxyType(directory), False

    def _read_cache(self) -> Optional[dict[str, str]]:
        try:
            value = self._store.get(self._config.cache_key)
        except Exception as e:
            self._log(LogLevel.WARN, "Bootstrap cache unreadable, refetching", {
                "error_type": type(e).__name__,
                "error_message": str(e),
            })
            return None

        if not isinstance(value, dict) or not value:
            return None
        return {str(k): str(v) for k, v in value.items()}

    def _write_cache(self, directory: dict[str, str]) -> None:
        try:
            self._store.put(self._config.cache_key, directory, self._config.ttl_seconds)
        except Exception as e:
            self._log(LogLevel.WARN, "Could not store bootstrap directory", {
                "error_type": type(e).__name__,
                "error_message": str(e),
            })

    async def _fetch(self) -> dict[str, str]:
        try:
            response = await self._client.get(
                self._bootstrap_url,
                timeout=httpx.Timeout(self._timeout),
            )
            response.raise_for_status()
            directory = parse_bootstrap(response.json())
        except (httpx.HTTPError, ValueError) as e:
            if self._logger:
                self._logger.log_error(
                    COMPONENT,
                    "Bootstrap fetch failed, continuing without RDAP",
                    error=e,
                    request_url=self._bootstrap_url,
                )
            return {}

        self._log(LogLevel.INFO, "Bootstrap directory refreshed", {
            "tld_count": len(directory),
        })
        return directory

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, COMPONENT, message, data)
