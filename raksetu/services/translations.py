# SPDX-License-Identifier: Apache-2.0

"""
Translation resource loading and lookup.

Resource sets are fetched per language code from a backend, either an HTTP
endpoint serving `/locales/{code}.json` or the JSON files bundled with the
package, and cached after the first successful load. A set that fails to
load resolves to an empty mapping, so lookups fall back to the raw keys.
"""

import json
import os
import re
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol
import logging
import requests
from opentelemetry import trace

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

BUNDLED_LOCALES_DIR = Path(__file__).resolve().parent.parent / "locales"

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


class TranslationLoadError(Exception):
    """Raised by a backend when a resource set cannot be fetched or parsed."""

    def __init__(self, language: str, message: str):
        super().__init__(f"Failed to load translations for '{language}': {message}")
        self.language = language


class TranslationBackend(Protocol):
    """Source of translation resource sets keyed by language code."""

    def fetch(self, language: str) -> Dict[str, Any]:
        ...


class HttpTranslationBackend:
    """Fetches `{base_url}/locales/{language}.json` over HTTP."""

    def __init__(self, base_url: str, timeout: float = 5.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def resource_url(self, language: str) -> str:
        return f"{self.base_url}/locales/{language}.json"

    def fetch(self, language: str) -> Dict[str, Any]:
        url = self.resource_url(language)

        with tracer.start_as_current_span("translations.http_fetch") as span:
            span.set_attributes({"translations.language": language, "http.url": url})

            try:
                response = self.session.get(url, timeout=self.timeout)
                response.raise_for_status()
                data = response.json()
            except requests.RequestException as e:
                raise TranslationLoadError(language, str(e)) from e
            except ValueError as e:
                raise TranslationLoadError(language, f"invalid JSON: {e}") from e

            if not isinstance(data, dict):
                raise TranslationLoadError(language, "resource set is not an object")

            span.set_attribute("translations.keys", len(data))
            return data


class FileTranslationBackend:
    """Reads `{directory}/{language}.json` from disk."""

    def __init__(self, directory: Optional[os.PathLike] = None):
        self.directory = Path(directory) if directory else BUNDLED_LOCALES_DIR

    def fetch(self, language: str) -> Dict[str, Any]:
        path = self.directory / f"{language}.json"
        try:
            with path.open(encoding="utf-8") as handle:
                data = json.load(handle)
        except OSError as e:
            raise TranslationLoadError(language, str(e)) from e
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError
            raise TranslationLoadError(language, f"unreadable resource set: {e}") from e

        if not isinstance(data, dict):
            raise TranslationLoadError(language, "resource set is not an object")
        return data


def remaining(deadline: Optional[float]) -> Optional[float]:
    """Seconds left until a monotonic deadline, or None for no deadline."""
    if deadline is None:
        return None
    return max(0.0, deadline - time.monotonic())


def lookup(resources: Mapping[str, Any], key: str) -> Optional[str]:
    """
    Resolve a translation key against a resource set.

    Flat keys are tried first, then dotted paths into nested mappings.
    Only string values count as translations.
    """
    value = resources.get(key)
    if isinstance(value, str):
        return value

    node: Any = resources
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]
    return node if isinstance(node, str) else None


def interpolate(text: str, params: Mapping[str, Any]) -> str:
    """Replace `{{name}}` placeholders; unknown names are left in place."""
    if not params:
        return text
    return _PLACEHOLDER.sub(
        lambda match: str(params[match.group(1)]) if match.group(1) in params else match.group(0),
        text
    )


class Translator:
    """Looks up keys in one language, falling back to a second resource set."""

    def __init__(
        self,
        language: str,
        resources: Mapping[str, Any],
        fallback_resources: Optional[Mapping[str, Any]] = None,
        placeholder: Optional[str] = None
    ):
        self.language = language
        self.resources = resources
        self.fallback_resources = fallback_resources or {}
        self.placeholder = placeholder

    def t(self, key: str, default: Optional[str] = None, **params: Any) -> str:
        """
        Translate a key.

        Args:
            key: Flat or dotted translation key
            default: Text to use when the key is missing everywhere
            **params: Values for `{{name}}` placeholders

        Returns:
            Translated text; a missing key renders as the default, the
            configured placeholder, or the key itself
        """
        text = lookup(self.resources, key)
        if text is None:
            text = lookup(self.fallback_resources, key)
        if text is None:
            logger.debug("Missing translation", extra={"language": self.language, "key": key})
            if default is not None:
                text = default
            elif self.placeholder is not None:
                text = self.placeholder
            else:
                return key
        return interpolate(text, params)


class TranslationCatalog:
    """
    Process-wide cache of translation resource sets.

    load() never blocks: it returns a future that resolves to the resource
    set. Concurrent loads of one code share a single in-flight fetch.
    """

    def __init__(
        self,
        backend: TranslationBackend,
        fallback_language: str = "en",
        max_workers: int = 4,
        placeholder: Optional[str] = None
    ):
        self.backend = backend
        self.fallback_language = fallback_language
        self.placeholder = placeholder
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="translations")
        self._resources: Dict[str, Dict[str, Any]] = {}
        self._pending: Dict[str, Future] = {}
        self._lock = threading.Lock()

    def is_loaded(self, language: str) -> bool:
        with self._lock:
            return language in self._resources

    def cached(self, language: str) -> Optional[Dict[str, Any]]:
        """Resource set if already loaded, without triggering a fetch."""
        with self._lock:
            return self._resources.get(language)

    def load(self, language: str) -> "Future[Dict[str, Any]]":
        """
        Start loading a resource set, or reuse the cached or in-flight one.

        Returns:
            Future resolving to the resource set; never resolves to an error
        """
        with self._lock:
            if language in self._resources:
                future: Future = Future()
                future.set_result(self._resources[language])
                return future

            pending = self._pending.get(language)
            if pending is not None:
                return pending

            future = self._executor.submit(self._fetch, language)
            self._pending[language] = future
            return future

    def _fetch(self, language: str) -> Dict[str, Any]:
        with tracer.start_as_current_span("translations.load") as span:
            span.set_attribute("translations.language", language)

            try:
                resources = self.backend.fetch(language)
            except TranslationLoadError as e:
                span.set_attribute("translations.result", "error")
                logger.error(str(e), extra={"language": language})
                return {}
            except Exception:
                span.set_attribute("translations.result", "error")
                logger.error("Unexpected error loading translations", extra={"language": language}, exc_info=True)
                return {}
            else:
                with self._lock:
                    self._resources[language] = resources
            finally:
                with self._lock:
                    self._pending.pop(language, None)

            span.set_attribute("translations.result", "loaded")
            logger.info("Translations loaded", extra={"language": language, "keys": len(resources)})
            return resources

    def resources(self, language: str, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Block until a resource set is available and return it."""
        return self.load(language).result(timeout=timeout)

    def translator(self, language: str, timeout: Optional[float] = None) -> Translator:
        """
        Translator for a language, waiting for it and the fallback set to load.

        Both loads share one timeout budget.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        fallback = None
        if language != self.fallback_language:
            fallback = self.resources(self.fallback_language, remaining(deadline))
        return Translator(
            language,
            self.resources(language, remaining(deadline)),
            fallback_resources=fallback,
            placeholder=self.placeholder
        )

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)
