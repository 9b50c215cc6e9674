"""Synchronous key-value storage with a byte capacity limit.

Stands in for browser storage: string values keyed by string, where a write
that would push the total encoded size over the quota is rejected.
"""

from collections.abc import MutableMapping
from typing import Any, Protocol

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024  # 5MB, typical localStorage limit


class StorageQuotaError(Exception):
    """Raised when a write would exceed the storage capacity."""

    pass


class KeyValueStore(Protocol):
    """Minimal storage interface used by the session store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MappingStorage:
    """Quota-enforcing key-value store backed by any mutable mapping.

    Backed by a plain dict in tests and by NiceGUI's per-browser
    `app.storage.user` in the running app.
    """

    def __init__(
        self,
        backend: MutableMapping[str, Any] | None = None,
        quota_bytes: int = DEFAULT_QUOTA_BYTES,
    ) -> None:
        self._backend = backend if backend is not None else {}
        self._quota_bytes = quota_bytes

    @property
    def quota_bytes(self) -> int:
        return self._quota_bytes

    def used_bytes(self, exclude: str | None = None) -> int:
        """Total encoded size of keys and values, optionally skipping one key."""
        return sum(
            len(k.encode()) + len(str(v).encode())
            for k, v in self._backend.items()
            if k != exclude
        )

    def get(self, key: str) -> str | None:
        value = self._backend.get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous value for the key.

        Raises:
            StorageQuotaError: If the write would exceed the quota.
        """
        needed = self.used_bytes(exclude=key) + len(key.encode()) + len(value.encode())
        if needed > self._quota_bytes:
            raise StorageQuotaError(
                f"Writing {key!r} needs {needed} bytes, quota is {self._quota_bytes}"
            )
        self._backend[key] = value
