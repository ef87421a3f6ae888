# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Per-request preference context.

A PreferenceContext bundles the theme and locale managers of the client
making the request. It is constructed once per request by
PreferenceProvider.install() and read through use_theme() / use_locale().
Reading it before it is installed is a programming error and raises.
"""

import re
import uuid
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit
from flask import Flask, Response, g, has_app_context, request
from opentelemetry import trace
import logging

from ..domain.locale import DEFAULT_DETECTION_SETTINGS, DetectionSettings, LocaleSources
from ..domain.theme import DocumentRoot, ThemeManager
from ..services.locale_manager import LocaleManager
from ..services.preferences import PreferenceBackend, PreferenceStore
from ..services.translations import TranslationCatalog

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

CLIENT_COOKIE = "raksetu_client"
CLIENT_COOKIE_MAX_AGE = 365 * 24 * 3600
DOCUMENT_LANG_HEADER = "X-Document-Lang"

_UUID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


class ProviderScopeError(RuntimeError):
    """Raised when preference state is read outside an installed provider."""
    pass


@dataclass
class PreferenceContext:
    """Theme and locale state of the client making the current request."""
    client_id: str
    store: PreferenceStore
    document: DocumentRoot
    theme: ThemeManager
    locale: LocaleManager

    def to_dict(self):
        state = self.locale.state
        return {
            "clientId": self.client_id,
            "theme": self.theme.to_dict(),
            "locale": {"language": state.language, "ready": state.ready},
            "document": self.document.to_dict()
        }


def resolve_client_id(raw: Optional[str]) -> Optional[str]:
    """Accept only ids this service issued (uuid4 hex)."""
    if raw and _UUID_PATTERN.match(raw):
        return raw
    return None


def gather_locale_sources() -> LocaleSources:
    """
    Collect language hints from the current request.

    Path and subdomain hints come from the page the client is on (the
    Referer), falling back to the request URL itself.
    """
    page_url = request.headers.get("Referer")
    if page_url:
        parts = urlsplit(page_url)
        path, host = parts.path, parts.hostname
    else:
        path, host = request.path, request.host.split(":")[0]

    return LocaleSources(
        navigator=tuple(request.accept_languages.values()),
        html_tag=request.headers.get(DOCUMENT_LANG_HEADER) or request.args.get("lang"),
        path=path,
        subdomain=host
    )


class PreferenceProvider:
    """Builds the preference context for each request that needs it."""

    def __init__(
        self,
        backend: PreferenceBackend,
        catalog: TranslationCatalog,
        settings: DetectionSettings = DEFAULT_DETECTION_SETTINGS,
        secure_cookie: bool = False
    ):
        self.backend = backend
        self.catalog = catalog
        self.settings = settings
        self.secure_cookie = secure_cookie

    def init_app(self, app: Flask) -> None:
        """Issue the client cookie on responses to newly seen clients."""

        @app.after_request
        def set_client_cookie(response: Response) -> Response:
            new_client_id = g.get("new_client_id")
            if new_client_id:
                response.set_cookie(
                    CLIENT_COOKIE,
                    new_client_id,
                    max_age=CLIENT_COOKIE_MAX_AGE,
                    httponly=True,
                    samesite="Lax",
                    secure=self.secure_cookie
                )
            return response

    def install(self) -> PreferenceContext:
        """Create the preference context for the current request."""
        existing = g.get("preferences")
        if existing is not None:
            return existing

        with tracer.start_as_current_span("preferences.install") as span:
            client_id = resolve_client_id(request.cookies.get(CLIENT_COOKIE))
            if client_id is None:
                client_id = uuid.uuid4().hex
                g.new_client_id = client_id
                span.set_attribute("preferences.new_client", True)

            store = PreferenceStore(self.backend, client_id)
            document = DocumentRoot()
            theme = ThemeManager(store, document)
            locale = LocaleManager(store, self.catalog, self.settings, gather_locale_sources())
            document.lang = locale.language
            locale.subscribe(lambda state: setattr(document, "lang", state.language))

            context = PreferenceContext(client_id, store, document, theme, locale)
            g.preferences = context

            logger.debug(
                "Preference context installed",
                extra={"client_id": client_id, "language": locale.language, "theme": theme.state.name.value}
            )
            return context


def use_preferences() -> PreferenceContext:
    """
    Get the current request's preference context.

    Raises:
        ProviderScopeError: If no provider installed a context for this request
    """
    context = g.get("preferences") if has_app_context() else None
    if context is None:
        raise ProviderScopeError("Preference state accessed outside a PreferenceProvider scope")
    return context


def use_theme() -> ThemeManager:
    """Theme manager of the current request; raises outside a provider scope."""
    return use_preferences().theme


def use_locale() -> LocaleManager:
    """Locale manager of the current request; raises outside a provider scope."""
    return use_preferences().locale
