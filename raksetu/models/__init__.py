# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and enumerations for the Raksetu platform.
"""

from .enums import (
    BloodType,
    UrgencyLevel,
    UrgencyDisplayClass,
    FilterKind,
    EmergencySort,
    ThemeName,
    LanguageCode,
    DetectionSource
)
from .entities import Coordinates, EmergencyRequest
from .requests import EmergencyQuery, ChangeLanguageRequest

__all__ = [
    "BloodType",
    "UrgencyLevel",
    "UrgencyDisplayClass",
    "FilterKind",
    "EmergencySort",
    "ThemeName",
    "LanguageCode",
    "DetectionSource",
    "Coordinates",
    "EmergencyRequest",
    "EmergencyQuery",
    "ChangeLanguageRequest"
]
