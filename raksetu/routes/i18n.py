# SPDX-License-Identifier: Apache-2.0

"""
Translation resource endpoints.
"""

from concurrent.futures import TimeoutError as FutureTimeoutError
from flask import request, jsonify, current_app
from flask_openapi3 import APIBlueprint, Tag
from pydantic import BaseModel
import logging

from ..middleware.error_handler import NotFoundException, ServiceUnavailableException
from ..utils.context import use_locale

logger = logging.getLogger(__name__)

i18n_tag = Tag(name="Translations", description="Translation resource sets")
i18n_bp = APIBlueprint(
    'i18n',
    __name__,
    url_prefix='/api/i18n',
    abp_tags=[i18n_tag]
)


class LanguagePath(BaseModel):
    language: str


class TranslationKeyPath(BaseModel):
    language: str
    key: str


class CurrentKeyPath(BaseModel):
    key: str


def _require_supported(language: str) -> str:
    if not current_app.detection_settings.is_supported(language):
        raise NotFoundException(f"Language '{language}' is not supported")
    return language


def _timeout() -> float:
    return current_app.settings.translation_timeout_seconds


@i18n_bp.get('/current/<path:key>')
def translate_current(path: CurrentKeyPath):
    """
    Translate a key into the calling client's display language.

    Waits for the language's resource set; responds 503 if it does not
    load in time.
    """
    current_app.preference_provider.install()
    locale = use_locale()

    try:
        translator = locale.translator(timeout=_timeout())
    except FutureTimeoutError:
        raise ServiceUnavailableException(f"Translations for '{locale.language}' are still loading")

    params = {name: value for name, value in request.args.items() if name not in ("default", "key")}
    return jsonify({
        "language": translator.language,
        "key": path.key,
        "text": translator.t(path.key, request.args.get("default"), **params)
    })


@i18n_bp.get('/<language>')
def get_resources(path: LanguagePath):
    """Full translation resource set of a supported language."""
    language = _require_supported(path.language)

    try:
        resources = current_app.translation_catalog.resources(language, timeout=_timeout())
    except FutureTimeoutError:
        raise ServiceUnavailableException(f"Translations for '{language}' are still loading")

    return jsonify({"language": language, "resources": resources})


@i18n_bp.get('/<language>/<path:key>')
def translate_key(path: TranslationKeyPath):
    """Translate a single key; missing keys come back as the key itself."""
    language = _require_supported(path.language)

    try:
        translator = current_app.translation_catalog.translator(language, timeout=_timeout())
    except FutureTimeoutError:
        raise ServiceUnavailableException(f"Translations for '{language}' are still loading")

    params = {name: value for name, value in request.args.items() if name not in ("default", "key")}
    return jsonify({
        "language": language,
        "key": path.key,
        "text": translator.t(path.key, request.args.get("default"), **params)
    })
