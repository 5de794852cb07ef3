"""Key-value store interface.

Services depend on this abstraction (not a concrete backend) so storage can
move to a shared server-side store without touching service code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractKeyValueStore(ABC):
    """String-to-string store with get/set/delete semantics.

    Implementations raise ``StorageAppError`` when the underlying medium
    cannot be read or written. Callers decide whether to swallow it.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under ``key`` or None when absent."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``. Missing keys are ignored."""
        raise NotImplementedError

    def close(self) -> None:
        """Release backend resources. Default is a no-op."""
