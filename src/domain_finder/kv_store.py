"""
Key-value stores for state that outlives a single request.

The bootstrap directory snapshot and the rate limit counters are kept in a
store with per-key expiry. Expired keys read as missing; there is no explicit
delete. Two implementations are provided:

- MemoryStore: process-local dictionary, for the HTTP service and tests.
- FileStore: JSON file with optional HMAC protection, so the CLI can reuse
  the bootstrap snapshot across invocations.
"""

import hashlib
import hmac
import json
import time
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from .config import StoreConfig
from .exceptions import StoreError, TamperingError


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal get/put-with-expiry interface."""

    def get(self, key: str) -> Optional[Any]:
        ...

    def put(self, key: str, value: Any, ttl_seconds: float) -> None:
        ...


class MemoryStore:
    """In-memory store; values expire ttl_seconds after being written."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._data: dict[str, tuple[Any, float]] = {}

    def get(self, key: str) -> Optional[Any]:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if self._clock() >= expires_at:
            self._data.pop(key, None)
            return None
        return value

    def put(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Write a key and drop expired entries."""
        now = self._clock()
        self._data = {
            k: item for k, item in self._data.items()
            if item[1] > now
        }
        self._data[key] = (value, now + ttl_seconds)

    def __len__(self) -> int:
        return len(self._data)


class FileStore:
    """
    JSON file store with HMAC protection.

    The whole file is read on every get and rewritten on every put. When an
    HMAC secret is configured the file carries an HMAC-SHA256 over its entries
    and a mismatch raises TamperingError.
    """

    VERSION = 1

    def __init__(
        self,
        file_path: Path,
        hmac_secret: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._file_path = file_path
        self._hmac_secret = hmac_secret.encode("utf-8") if hmac_secret else None
        self._clock = clock

    @property
    def file_path(self) -> Path:
        return self._file_path

    def get(self, key: str) -> Optional[Any]:
        """
        Read a key.

        Raises:
            StoreError: If the file cannot be read or parsed
            TamperingError: If HMAC validation fails
        """
        entries = self._load_entries()
        item = entries.get(key)
        if not isinstance(item, dict):
            return None
        if self._clock() >= item.get("expires_at", 0):
            return None
        return item.get("value")

    def put(self, key: str, value: Any, ttl_seconds: float) -> None:
        """
        Write a key and drop expired entries.

        Raises:
            StoreError: If the file cannot be written
        """
        try:
            entries = self._load_entries()
        except TamperingError:
            # A tampered file is replaced wholesale
            entries = {}

        now = self._clock()
        entries = {
            k: v for k, v in entries.items()
            if isinstance(v, dict) and v.get("expires_at", 0) > now
        }
        entries[key] = {"value": value, "expires_at": now + ttl_seconds}
        self._save_entries(entries)

    def compute_hmac(self, entries: dict) -> str:
        content = json.dumps(entries, sort_keys=True, ensure_ascii=False)
        return hmac.new(
            self._hmac_secret or b"",
            content.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def _load_entries(self) -> dict:
        if not self._file_path.exists():
            return {}

        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                raw_data = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreError(
                code="parse_error",
                message=f"Failed to parse store file: {e}",
                details={"file_path": str(self._file_path)},
            )
        except OSError as e:
            raise StoreError(
                code="io_error",
                message=f"Failed to read store file: {e}",
                details={"file_path": str(self._file_path)},
            )

        if not isinstance(raw_data, dict) or not isinstance(raw_data.get("entries"), dict):
            raise StoreError(
                code="parse_error",
                message="Store file has an unexpected layout",
                details={"file_path": str(self._file_path)},
            )

        entries = raw_data["entries"]
        if self._hmac_secret is not None:
            stored_hmac = raw_data.get("hmac", "")
            if not hmac.compare_digest(stored_hmac, self.compute_hmac(entries)):
                raise TamperingError(
                    code="hmac_mismatch",
                    message="HMAC validation failed - store may have been tampered with",
                    details={"file_path": str(self._file_path)},
                )
        return entries

    def _save_entries(self, entries: dict) -> None:
        output: dict = {"version": self.VERSION, "entries": entries}
        if self._hmac_secret is not None:
            output["hmac"] = self.compute_hmac(entries)

        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._file_path, "w", encoding="utf-8") as f:
                json.dump(output, f, sort_keys=True)
        except (OSError, TypeError) as e:
            raise StoreError(
                code="io_error",
                message=f"Failed to write store file: {e}",
                details={"file_path": str(self._file_path)},
            )


def create_store(config: StoreConfig) -> KeyValueStore:
    """Build the store selected by configuration."""
    if config.backend == "file" and config.file_path is not None:
        return FileStore(config.file_path, hmac_secret=config.hmac_secret)
    return MemoryStore()
