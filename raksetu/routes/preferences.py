# SPDX-License-Identifier: Apache-2.0

"""
Client preference endpoints.

Every request to this blueprint runs inside a preference provider scope:
the client's theme and locale managers are built before the view runs.
"""

from flask import request, jsonify, current_app
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from pydantic import ValidationError
import logging

from ..domain.locale import LANGUAGE_NAMES
from ..middleware.error_handler import ValidationException, format_validation_errors
from ..models.requests import ChangeLanguageRequest
from ..utils.context import use_locale, use_preferences, use_theme

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

preferences_tag = Tag(name="Preferences", description="Theme and display language of a client")
preferences_bp = APIBlueprint(
    'preferences',
    __name__,
    url_prefix='/api/preferences',
    abp_tags=[preferences_tag]
)


@preferences_bp.before_request
def install_preferences():
    current_app.preference_provider.install()


def _locale_response(changed=None):
    locale = use_locale()
    state = locale.state
    body = {
        "language": state.language,
        "ready": state.ready,
        "supported": [
            {"code": code, **LANGUAGE_NAMES.get(code, {})}
            for code in locale.settings.supported_languages
        ],
        "document": use_preferences().document.to_dict()
    }
    if changed is not None:
        body["changed"] = changed
    return body


@preferences_bp.get('')
def get_preferences():
    """Theme, language and page root attributes of the calling client."""
    return jsonify(use_preferences().to_dict())


@preferences_bp.get('/theme')
def get_theme():
    """Current presentation theme."""
    return jsonify(use_theme().to_dict())


@preferences_bp.post('/theme/toggle')
def toggle_theme():
    """Switch between dark and light; the new theme is persisted before responding."""
    theme = use_theme()
    with tracer.start_as_current_span("preferences.theme.toggle") as span:
        state = theme.toggle()
        span.set_attribute("theme.is_dark", state.is_dark)
    return jsonify(theme.to_dict())


@preferences_bp.get('/locale')
def get_locale():
    """Current display language and the supported languages."""
    return jsonify(_locale_response())


@preferences_bp.put('/locale')
def change_locale():
    """
    Change the display language.

    Unsupported codes are not an error: the response reports
    `changed: false` with the language left as it was.
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationException("Request body must be a JSON object")

    try:
        body = ChangeLanguageRequest.model_validate(payload)
    except ValidationError as e:
        raise ValidationException("Invalid language change request", format_validation_errors(e))

    changed = use_locale().change_language(body.language)
    return jsonify(_locale_response(changed=changed))
