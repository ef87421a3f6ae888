# SPDX-License-Identifier: Apache-2.0

"""
Display language detection.

The initial language is read from an ordered list of sources; the first
value naming a supported language wins and the fallback applies when none
does.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.enums import DetectionSource, LanguageCode

SUPPORTED_LANGUAGES: Tuple[str, ...] = tuple(code.value for code in LanguageCode)
FALLBACK_LANGUAGE = LanguageCode.EN.value
LANGUAGE_STORE_KEY = "preferredLanguage"

DEFAULT_DETECTION_ORDER: Tuple[DetectionSource, ...] = (
    DetectionSource.STORE,
    DetectionSource.NAVIGATOR,
    DetectionSource.HTML_TAG,
    DetectionSource.PATH,
    DetectionSource.SUBDOMAIN,
)

LANGUAGE_NAMES: Dict[str, Dict[str, str]] = {
    "bn": {"name": "Bengali", "nativeName": "বাংলা"},
    "en": {"name": "English", "nativeName": "English"},
    "hi": {"name": "Hindi", "nativeName": "हिंदी"},
    "kn": {"name": "Kannada", "nativeName": "ಕನ್ನಡ"},
    "ta": {"name": "Tamil", "nativeName": "தமிழ்"},
    "te": {"name": "Telugu", "nativeName": "తెలుగు"},
}

_PATH_SEGMENT = re.compile(r"^/([a-zA-Z-]*)")
_SUBDOMAIN = re.compile(r"^(\w{2,5})\.", re.IGNORECASE)


class DetectionSettings(BaseModel):
    """Where and how the initial display language is detected."""

    model_config = ConfigDict(frozen=True)

    order: Tuple[DetectionSource, ...] = Field(default=DEFAULT_DETECTION_ORDER, min_length=1)
    lookup_key: str = Field(default=LANGUAGE_STORE_KEY, min_length=1)
    supported_languages: Tuple[str, ...] = Field(default=SUPPORTED_LANGUAGES, min_length=1)
    fallback: str = FALLBACK_LANGUAGE

    @field_validator("order")
    @classmethod
    def validate_order(cls, v):
        """Each source may be consulted once."""
        if len(set(v)) != len(v):
            raise ValueError("Detection order must not repeat a source")
        return v

    @field_validator("supported_languages")
    @classmethod
    def validate_supported(cls, v):
        return tuple(code.lower() for code in v)

    @model_validator(mode="after")
    def validate_fallback(self):
        if self.fallback not in self.supported_languages:
            raise ValueError(f"Fallback language '{self.fallback}' is not supported")
        return self

    def is_supported(self, code: Optional[str]) -> bool:
        return code in self.supported_languages


DEFAULT_DETECTION_SETTINGS = DetectionSettings()


@dataclass(frozen=True)
class LocaleSources:
    """
    Raw language hints gathered for one client.

    navigator holds the client's accepted languages in preference order;
    path and subdomain hold the page URL parts they are extracted from.
    """
    store: Optional[str] = None
    navigator: Sequence[str] = field(default_factory=tuple)
    html_tag: Optional[str] = None
    path: Optional[str] = None
    subdomain: Optional[str] = None

    def candidates(self, source: DetectionSource) -> List[str]:
        """Values a source offers, best first."""
        if source is DetectionSource.NAVIGATOR:
            return [value for value in self.navigator if value]

        value = {
            DetectionSource.STORE: self.store,
            DetectionSource.HTML_TAG: self.html_tag,
            DetectionSource.PATH: language_from_path(self.path),
            DetectionSource.SUBDOMAIN: language_from_host(self.subdomain),
        }[source]
        return [value] if value else []


def language_from_path(path: Optional[str]) -> Optional[str]:
    """First path segment of a URL path, e.g. "/ta/emergencies" -> "ta"."""
    if not path:
        return None
    match = _PATH_SEGMENT.match(path)
    if not match or not match.group(1):
        return None
    return match.group(1)


def language_from_host(host: Optional[str]) -> Optional[str]:
    """Leading host label of two to five word characters, e.g. "hi.raksetu.in" -> "hi"."""
    if not host:
        return None
    match = _SUBDOMAIN.match(host)
    return match.group(1) if match else None


def normalize_language(value: Optional[str], supported: Iterable[str] = SUPPORTED_LANGUAGES) -> Optional[str]:
    """
    Reduce a language tag to a supported code.

    "ta-IN" and "TA_in" both resolve to "ta"; tags whose primary subtag is
    not supported resolve to None.
    """
    if not value or not isinstance(value, str):
        return None

    primary = re.split(r"[-_]", value.strip().lower(), maxsplit=1)[0]
    return primary if primary in supported else None


def detect_initial_locale(
    sources: LocaleSources,
    settings: DetectionSettings = DEFAULT_DETECTION_SETTINGS
) -> str:
    """
    Pick the initial display language.

    Args:
        sources: Language hints for the client
        settings: Detection order and supported set

    Returns:
        First supported language found in detection order, else the fallback
    """
    for source in settings.order:
        for candidate in sources.candidates(source):
            code = normalize_language(candidate, settings.supported_languages)
            if code:
                return code
    return settings.fallback
