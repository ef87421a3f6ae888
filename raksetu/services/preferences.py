# SPDX-License-Identifier: Apache-2.0

"""
Per-client preference store.

Each client id gets its own key space in a shared backend. The store is the
server-side counterpart of browser local storage: it survives reloads, a
missing key is a normal first-run state, and a failing backend reads as
empty instead of raising.
"""

import threading
from typing import Dict, Optional, Protocol
import logging

logger = logging.getLogger(__name__)

KEY_PREFIX = "preferences"


class PreferenceBackend(Protocol):
    """Minimal string key-value interface a preference store writes through."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> bool:
        ...

    def delete(self, key: str) -> bool:
        ...


class InMemoryPreferenceBackend:
    """Process-local backend for development and tests."""

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> bool:
        with self._lock:
            self._data[key] = value
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def health_check(self) -> dict:
        return {"status": "healthy", "backend": "memory", "keys": len(self._data)}


class PreferenceStore:
    """Key-value preferences of a single client."""

    def __init__(self, backend: PreferenceBackend, client_id: str):
        self.backend = backend
        self.client_id = client_id

    def _key(self, key: str) -> str:
        return f"{KEY_PREFIX}:{self.client_id}:{key}"

    def get(self, key: str) -> Optional[str]:
        """
        Read a preference.

        Returns:
            Stored value, or None when absent or the backend is unreachable
        """
        try:
            return self.backend.get(self._key(key))
        except Exception as e:
            logger.warning(
                "Preference read failed, treating as unset",
                extra={"client_id": self.client_id, "key": key, "error": str(e)}
            )
            return None

    def set(self, key: str, value: str) -> bool:
        """
        Write a preference.

        Returns:
            True if the backend accepted the write
        """
        try:
            return bool(self.backend.set(self._key(key), value))
        except Exception as e:
            logger.warning(
                "Preference write failed",
                extra={"client_id": self.client_id, "key": key, "error": str(e)}
            )
            return False

    def delete(self, key: str) -> bool:
        try:
            return bool(self.backend.delete(self._key(key)))
        except Exception as e:
            logger.warning(
                "Preference delete failed",
                extra={"client_id": self.client_id, "key": key, "error": str(e)}
            )
            return False
