# SPDX-License-Identifier: Apache-2.0

"""
Locale state manager.

Holds one client's display language, persists every change, and tracks
whether that language's translation resource set has loaded. Subscribers
are notified synchronously on every change and again once the resource set
for the latest selection is ready. A slow load for an earlier selection
never marks a later one ready.
"""

import threading
import time
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, replace
from typing import Callable, List, Optional
import logging
from opentelemetry import trace

from ..domain.locale import (
    DEFAULT_DETECTION_SETTINGS,
    DetectionSettings,
    LocaleSources,
    detect_initial_locale
)
from .preferences import PreferenceStore
from .translations import TranslationCatalog, Translator, remaining

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocaleState:
    """Active language and whether its resource set is loaded."""
    language: str
    ready: bool = False


Subscriber = Callable[[LocaleState], None]


class LocaleManager:
    """Owns the display language of a single client."""

    def __init__(
        self,
        store: PreferenceStore,
        catalog: TranslationCatalog,
        settings: DetectionSettings = DEFAULT_DETECTION_SETTINGS,
        sources: Optional[LocaleSources] = None
    ):
        self.store = store
        self.catalog = catalog
        self.settings = settings
        self._subscribers: List[Subscriber] = []
        self._condition = threading.Condition()
        self._sequence = 0

        sources = replace(sources or LocaleSources(), store=store.get(settings.lookup_key))
        language = detect_initial_locale(sources, settings)

        # The detected language is cached like an explicit choice
        if sources.store != language:
            store.set(settings.lookup_key, language)

        self._state = LocaleState(language, ready=catalog.is_loaded(language))
        self._watch(language, self._sequence)

    @property
    def state(self) -> LocaleState:
        with self._condition:
            return self._state

    @property
    def language(self) -> str:
        return self.state.language

    @property
    def ready(self) -> bool:
        return self.state.ready

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for state changes.

        Returns:
            Function that removes the subscription
        """
        with self._condition:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._condition:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, state: LocaleState) -> None:
        with self._condition:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            callback(state)

    def change_language(self, code: str) -> bool:
        """
        Switch the display language.

        Unsupported codes are ignored. A supported code is persisted, its
        resource set starts loading, and subscribers are notified before this
        returns; the load itself is not awaited.

        Args:
            code: Language code to switch to

        Returns:
            True if the language was accepted
        """
        language = code.strip().lower() if isinstance(code, str) else None
        if not self.settings.is_supported(language):
            logger.info(
                "Ignoring unsupported language",
                extra={"client_id": self.store.client_id, "language": code}
            )
            return False

        with tracer.start_as_current_span("locale.change_language") as span:
            span.set_attribute("locale.language", language)

            with self._condition:
                self._sequence += 1
                sequence = self._sequence
                state = LocaleState(language, ready=self.catalog.is_loaded(language))
                self._state = state
                self._condition.notify_all()

            self.store.set(self.settings.lookup_key, language)
            self._notify(state)
            self._watch(language, sequence)

            logger.info(
                "Language changed",
                extra={"client_id": self.store.client_id, "language": language, "ready": state.ready}
            )
            return True

    def _watch(self, language: str, sequence: int) -> None:
        future = self.catalog.load(language)
        future.add_done_callback(lambda _: self._on_loaded(language, sequence))

    def _on_loaded(self, language: str, sequence: int) -> None:
        with self._condition:
            if sequence != self._sequence:
                logger.debug("Discarding stale translation load", extra={"language": language})
                return
            if self._state.ready:
                return
            state = LocaleState(language, ready=True)
            self._state = state
            self._condition.notify_all()

        self._notify(state)

    def wait_until_ready(self, timeout: Optional[float] = None) -> LocaleState:
        """
        Block until the active language's resource set has loaded.

        Returns:
            Current state; ready is False if the timeout expired first
        """
        with self._condition:
            self._condition.wait_for(lambda: self._state.ready, timeout=timeout)
            return self._state

    def translator(self, timeout: Optional[float] = None) -> Translator:
        """
        Translator for the active language once its resources are loaded.

        Raises:
            FutureTimeoutError: The active language did not load within timeout
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        state = self.wait_until_ready(timeout)
        if not state.ready:
            raise FutureTimeoutError(f"Translations for '{state.language}' not loaded")
        return self.catalog.translator(state.language, remaining(deadline))
