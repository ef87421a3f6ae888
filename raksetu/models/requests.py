# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for API endpoints.
"""

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from .enums import EmergencySort


class EmergencyQuery(BaseModel):
    """Query string accepted by the emergency listing endpoint."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    blood_type: Optional[str] = Field(None, alias="bloodType")
    urgency: Optional[str] = None
    location: Optional[str] = None
    search: Optional[str] = None
    hide_fulfilled: bool = Field(True, alias="hideFulfilled")
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    max_distance: Optional[float] = Field(None, gt=0, alias="maxDistance")
    sort: EmergencySort = EmergencySort.NONE

    @field_validator("blood_type")
    @classmethod
    def restore_plus_sign(cls, v):
        """An unescaped "+" in a query string arrives as a space ("A+" -> "A ")."""
        if v is None:
            return v
        if v.endswith(" ") and v.strip():
            return v.strip() + "+"
        return v.strip()

    @model_validator(mode="after")
    def validate_origin(self):
        """Latitude and longitude only make sense together."""
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be provided together")
        return self


class ChangeLanguageRequest(BaseModel):
    """Body of a language change request."""

    language: str = Field(..., min_length=1, max_length=16)

    @field_validator("language")
    @classmethod
    def strip_language(cls, v):
        return v.strip()
