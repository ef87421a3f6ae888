# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - External integrations and side effects.
"""

from .mongodb import MongoDBService, EmergencyRepository
from .redis import RedisService
from .preferences import InMemoryPreferenceBackend, PreferenceStore
from .translations import (
    FileTranslationBackend,
    HttpTranslationBackend,
    TranslationCatalog,
    TranslationLoadError,
    Translator
)
from .locale_manager import LocaleManager, LocaleState

__all__ = [
    "MongoDBService",
    "EmergencyRepository",
    "RedisService",
    "InMemoryPreferenceBackend",
    "PreferenceStore",
    "FileTranslationBackend",
    "HttpTranslationBackend",
    "TranslationCatalog",
    "TranslationLoadError",
    "Translator",
    "LocaleManager",
    "LocaleState"
]
