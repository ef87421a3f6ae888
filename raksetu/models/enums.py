# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the Raksetu platform.
"""

from enum import Enum


class BloodType(str, Enum):
    """ABO/Rh blood groups accepted on emergency requests."""
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"


class UrgencyLevel(str, Enum):
    """Categorical severity of a blood request."""
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class UrgencyDisplayClass(str, Enum):
    """Visual emphasis applied to an urgency level."""
    SEVERE = "severe"
    ELEVATED = "elevated"
    MODERATE = "moderate"
    MILD = "mild"
    NEUTRAL = "neutral"


class FilterKind(str, Enum):
    """Fields an emergency list can be narrowed by."""
    BLOOD_TYPE = "bloodType"
    URGENCY = "urgency"
    LOCATION = "location"


class EmergencySort(str, Enum):
    """Orderings available for emergency listings."""
    NONE = "none"
    URGENCY = "urgency"
    DISTANCE = "distance"


class ThemeName(str, Enum):
    """Persisted values of the theme preference."""
    DARK = "dark"
    LIGHT = "light"


class LanguageCode(str, Enum):
    """Display languages with a translation resource set."""
    BN = "bn"
    EN = "en"
    HI = "hi"
    KN = "kn"
    TA = "ta"
    TE = "te"


class DetectionSource(str, Enum):
    """Places the initial display language can be read from."""
    STORE = "store"
    NAVIGATOR = "navigator"
    HTML_TAG = "html_tag"
    PATH = "path"
    SUBDOMAIN = "subdomain"
