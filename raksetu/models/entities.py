# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the Raksetu platform.

Emergency requests are owned by the document database; this service only
reads them, so the models are frozen.
"""

from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, AliasChoices, ConfigDict, field_validator


class Coordinates(BaseModel):
    """Geographic position of a request, in decimal degrees."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    latitude: float = Field(..., ge=-90, le=90, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(..., ge=-180, le=180, validation_alias=AliasChoices("longitude", "lng"))


class EmergencyRequest(BaseModel):
    """
    Emergency blood request as stored by the database collaborator.

    Blood type and urgency are kept as plain strings: records written by
    older clients may carry values outside the known enumerations, and the
    filter engine must degrade on those rather than reject the record.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore"
    )

    id: Optional[str] = Field(None, description="Document identifier")
    blood_type: str = Field(..., alias="bloodType", description="Requested blood group")
    urgency: str = Field("Medium", description="Urgency label")
    location: str = Field("", description="Free-text location")
    hospital: Optional[str] = Field(None, description="Hospital name")
    patient_name: Optional[str] = Field(None, alias="patientName")
    units: int = Field(1, ge=1, description="Units of blood needed")
    response_count: int = Field(0, ge=0, alias="responseCount", description="Donors who responded")
    coordinates: Optional[Coordinates] = None
    status: Optional[str] = None

    @field_validator("units", mode="before")
    @classmethod
    def coerce_units(cls, v):
        """Unparseable unit counts count as a single unit."""
        try:
            return max(int(v), 1)
        except (TypeError, ValueError):
            return 1

    @field_validator("response_count", mode="before")
    @classmethod
    def coerce_response_count(cls, v):
        """Unparseable response counts count as no responses."""
        try:
            return max(int(v), 0)
        except (TypeError, ValueError):
            return 0

    @field_validator("location", mode="before")
    @classmethod
    def coerce_location(cls, v):
        return "" if v is None else str(v)

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "EmergencyRequest":
        """Build a request from a raw MongoDB document."""
        data = dict(document)
        if "_id" in data:
            data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)

    def to_response(self) -> Dict[str, Any]:
        """Serialize using the client-facing camelCase field names."""
        return self.model_dump(by_alias=True, exclude_none=True)
