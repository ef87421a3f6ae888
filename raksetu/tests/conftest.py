# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import threading
import pytest
from typing import Dict, List, Optional

from raksetu.config import Settings
from raksetu.models.entities import EmergencyRequest
from raksetu.services.preferences import InMemoryPreferenceBackend, PreferenceStore
from raksetu.services.translations import (
    FileTranslationBackend,
    TranslationCatalog,
    TranslationLoadError
)

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'


class FakeEmergencyRepository:
    """In-memory stand-in for the MongoDB emergency repository."""

    def __init__(self, records: List[EmergencyRequest]):
        self.records = list(records)
        self.error: Optional[Exception] = None

    def list_active(self, limit: int = 50) -> List[EmergencyRequest]:
        if self.error:
            raise self.error
        return self.records[:limit]

    def get(self, emergency_id: str) -> Optional[EmergencyRequest]:
        if self.error:
            raise self.error
        return next((r for r in self.records if r.id == emergency_id), None)


class CountingBackend(InMemoryPreferenceBackend):
    """In-memory backend that records writes."""

    def __init__(self):
        super().__init__()
        self.writes: List[tuple] = []

    def set(self, key: str, value: str) -> bool:
        self.writes.append((key, value))
        return super().set(key, value)


class BrokenBackend:
    """Backend whose every call fails, like an unreachable Redis."""

    def get(self, key):
        raise ConnectionError("backend down")

    def set(self, key, value):
        raise ConnectionError("backend down")

    def delete(self, key):
        raise ConnectionError("backend down")


class GatedTranslationBackend:
    """
    Translation backend whose fetches block until released per language.

    Lets tests control the order in which resource sets finish loading.
    """

    def __init__(self, resources: Dict[str, Dict]):
        self.resources = resources
        self.calls: List[str] = []
        self._gates: Dict[str, threading.Event] = {}
        self._lock = threading.Lock()

    def _gate(self, language: str) -> threading.Event:
        with self._lock:
            return self._gates.setdefault(language, threading.Event())

    def release(self, language: str) -> None:
        self._gate(language).set()

    def fetch(self, language: str) -> Dict:
        with self._lock:
            self.calls.append(language)
        if not self._gate(language).wait(timeout=5):
            raise TranslationLoadError(language, "gate never released")
        if language not in self.resources:
            raise TranslationLoadError(language, "no such resource set")
        return self.resources[language]


@pytest.fixture
def sample_records():
    """Emergency requests covering every urgency and a few locations."""
    return [
        EmergencyRequest(
            id="e1", blood_type="A+", urgency="Critical", location="Hyderabad",
            hospital="Apollo Hospital", units=3, response_count=1,
            coordinates={"latitude": 17.385, "longitude": 78.4867}
        ),
        EmergencyRequest(
            id="e2", blood_type="O-", urgency="Low", location="Delhi",
            hospital="AIIMS", units=1, response_count=0,
            coordinates={"latitude": 28.6139, "longitude": 77.209}
        ),
        EmergencyRequest(
            id="e3", blood_type="B+", urgency="High", location="HYDERABAD Central",
            hospital="Care Hospital", units=2, response_count=0
        ),
        EmergencyRequest(
            id="e4", blood_type="A+", urgency="Medium", location="Chennai",
            hospital="Fortis Malar", units=1, response_count=1,
            coordinates={"latitude": 13.0827, "longitude": 80.2707}
        ),
    ]


@pytest.fixture
def memory_backend():
    return InMemoryPreferenceBackend()


@pytest.fixture
def counting_backend():
    return CountingBackend()


@pytest.fixture
def store(counting_backend):
    """Preference store of a single test client."""
    return PreferenceStore(counting_backend, "client-1")


@pytest.fixture
def broken_store():
    return PreferenceStore(BrokenBackend(), "client-broken")


@pytest.fixture
def catalog():
    """Catalog over the bundled resource sets."""
    catalog = TranslationCatalog(FileTranslationBackend(), max_workers=2)
    yield catalog
    catalog.shutdown()


@pytest.fixture
def gated_resources():
    return {
        "en": {"greeting": "Hello"},
        "hi": {"greeting": "नमस्ते"},
        "ta": {"greeting": "வணக்கம்"},
    }


@pytest.fixture
def gated_backend(gated_resources):
    backend = GatedTranslationBackend(gated_resources)
    yield backend
    for language in gated_resources:
        backend.release(language)


@pytest.fixture
def gated_catalog(gated_backend):
    catalog = TranslationCatalog(gated_backend, max_workers=4)
    yield catalog
    catalog.shutdown()


@pytest.fixture
def test_settings():
    return Settings(
        environment='test',
        otel_enabled=False,
        preference_backend='memory',
        translation_timeout_seconds=2.0
    )


@pytest.fixture
def emergency_repository(sample_records):
    return FakeEmergencyRepository(sample_records)


@pytest.fixture
def app(test_settings, emergency_repository, memory_backend, catalog):
    """Application wired with in-memory collaborators."""
    from raksetu.app import create_app

    app = create_app(
        test_settings,
        emergency_repository=emergency_repository,
        preference_backend=memory_backend,
        translation_catalog=catalog
    )
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    with app.test_client() as client:
        yield client
