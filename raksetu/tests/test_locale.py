# SPDX-License-Identifier: Apache-2.0

"""
Tests for initial display language detection.
"""

import pytest
from pydantic import ValidationError

from raksetu.domain.locale import (
    DEFAULT_DETECTION_SETTINGS,
    FALLBACK_LANGUAGE,
    SUPPORTED_LANGUAGES,
    DetectionSettings,
    LocaleSources,
    detect_initial_locale,
    language_from_host,
    language_from_path,
    normalize_language
)
from raksetu.models.enums import DetectionSource


class TestDetectInitialLocale:
    """Test detection order and fallback."""

    def test_supported_set(self):
        assert set(SUPPORTED_LANGUAGES) == {"bn", "en", "hi", "kn", "ta", "te"}
        assert FALLBACK_LANGUAGE == "en"

    def test_no_hints_falls_back(self):
        assert detect_initial_locale(LocaleSources()) == "en"

    def test_persisted_choice_wins(self):
        sources = LocaleSources(store="hi", navigator=("ta",), html_tag="bn")
        assert detect_initial_locale(sources) == "hi"

    def test_unsupported_persisted_value_is_skipped(self):
        sources = LocaleSources(store="fr", navigator=("te-IN",))
        assert detect_initial_locale(sources) == "te"

    def test_navigator_preferences_tried_in_order(self):
        sources = LocaleSources(navigator=("fr-FR", "de", "ta-IN", "hi"))
        assert detect_initial_locale(sources) == "ta"

    def test_html_tag(self):
        assert detect_initial_locale(LocaleSources(navigator=("fr",), html_tag="kn")) == "kn"

    def test_path(self):
        assert detect_initial_locale(LocaleSources(path="/bn/emergencies")) == "bn"

    def test_subdomain(self):
        sources = LocaleSources(path="/emergencies", subdomain="hi.raksetu.in")
        assert detect_initial_locale(sources) == "hi"

    def test_only_unsupported_hints_fall_back(self):
        sources = LocaleSources(store="xx", navigator=("fr",), html_tag="de", path="/es/", subdomain="www.example.org")
        assert detect_initial_locale(sources) == "en"

    def test_custom_order(self):
        settings = DetectionSettings(order=[DetectionSource.SUBDOMAIN, DetectionSource.STORE])
        sources = LocaleSources(store="hi", subdomain="ta.raksetu.in")
        assert detect_initial_locale(sources, settings) == "ta"

    def test_custom_fallback(self):
        settings = DetectionSettings(fallback="hi")
        assert detect_initial_locale(LocaleSources(navigator=("fr",)), settings) == "hi"


class TestHintParsing:

    @pytest.mark.parametrize("value,expected", [
        ("ta-IN", "ta"),
        ("TA_in", "ta"),
        (" HI ", "hi"),
        ("english", None),
        ("fr", None),
        ("", None),
        (None, None),
    ])
    def test_normalize_language(self, value, expected):
        assert normalize_language(value) == expected

    @pytest.mark.parametrize("path,expected", [
        ("/ta/emergencies", "ta"),
        ("/", None),
        ("", None),
        (None, None),
    ])
    def test_language_from_path(self, path, expected):
        assert language_from_path(path) == expected

    @pytest.mark.parametrize("host,expected", [
        ("hi.raksetu.in", "hi"),
        ("localhost", None),
        ("a.raksetu.in", None),
        (None, None),
    ])
    def test_language_from_host(self, host, expected):
        assert language_from_host(host) == expected


class TestDetectionSettings:

    def test_defaults(self):
        assert DEFAULT_DETECTION_SETTINGS.order[0] is DetectionSource.STORE
        assert DEFAULT_DETECTION_SETTINGS.lookup_key == "preferredLanguage"
        assert DEFAULT_DETECTION_SETTINGS.is_supported("bn")
        assert not DEFAULT_DETECTION_SETTINGS.is_supported("BN")

    def test_supported_languages_lowercased(self):
        settings = DetectionSettings(supported_languages=["EN", "Hi"])
        assert settings.supported_languages == ("en", "hi")

    def test_fallback_must_be_supported(self):
        with pytest.raises(ValidationError):
            DetectionSettings(supported_languages=["hi", "ta"])

    def test_order_must_not_repeat(self):
        with pytest.raises(ValidationError):
            DetectionSettings(order=["store", "navigator", "store"])

    def test_frozen(self):
        with pytest.raises(ValidationError):
            DEFAULT_DETECTION_SETTINGS.fallback = "hi"
