# SPDX-License-Identifier: Apache-2.0

"""
Emergency request endpoints.

Read-only listing and detail views over the emergency requests stored by
the database collaborator, with filtering and urgency classification.
"""

from flask import request, jsonify, current_app
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from pydantic import BaseModel, ValidationError
from pymongo.errors import PyMongoError
import logging

from ..domain import emergencies as emergency_domain
from ..domain.blood_types import compatible_donors, is_known_blood_type, is_rare
from ..middleware.error_handler import (
    NotFoundException,
    ServiceUnavailableException,
    ValidationException,
    format_validation_errors
)
from ..models.entities import Coordinates
from ..models.requests import EmergencyQuery

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

emergencies_tag = Tag(name="Emergencies", description="Emergency blood requests")
emergencies_bp = APIBlueprint(
    'emergencies',
    __name__,
    url_prefix='/api',
    abp_tags=[emergencies_tag]
)


class EmergencyPath(BaseModel):
    emergency_id: str


class BloodTypePath(BaseModel):
    blood_type: str


def _parse_query() -> EmergencyQuery:
    try:
        return EmergencyQuery.model_validate(request.args.to_dict())
    except ValidationError as e:
        raise ValidationException("Invalid emergency query", format_validation_errors(e))


def _load_active():
    try:
        return current_app.emergency_repository.list_active(current_app.settings.emergency_list_limit)
    except PyMongoError as e:
        logger.error("Failed to read emergency requests", extra={"error": str(e)})
        raise ServiceUnavailableException("Emergency requests are temporarily unavailable")


@emergencies_bp.get('/emergencies')
def list_emergencies():
    """
    List active emergency requests.

    Query parameters narrow the listing by blood type, urgency, location or
    free text, drop fulfilled requests, and limit or sort by distance from
    the viewer's position.
    """
    query = _parse_query()
    origin = None
    if query.lat is not None:
        origin = Coordinates(latitude=query.lat, longitude=query.lng)

    try:
        filters = emergency_domain.EmergencyFilterSet(
            blood_type=query.blood_type,
            urgency=query.urgency,
            location=query.location,
            search=query.search,
            max_distance_km=query.max_distance,
            hide_fulfilled=query.hide_fulfilled,
            sort=query.sort
        )
    except ValueError as e:
        raise ValidationException(str(e))

    with tracer.start_as_current_span("emergencies.list") as span:
        records = _load_active()

        with tracer.start_as_current_span("domain.emergencies.filter") as domain_span:
            result = filters.apply(records, origin)
            domain_span.set_attributes({
                "domain.input_count": len(records),
                "domain.result_count": len(result)
            })

        span.set_attribute("emergencies.count", len(result))

    return jsonify({
        "items": [emergency_domain.describe_emergency(record, origin) for record in result],
        "count": len(result),
        "total": len(records),
        "filters": {
            "bloodType": filters.blood_type or "All",
            "urgency": filters.urgency or "All",
            "location": filters.location,
            "search": filters.search,
            "maxDistance": filters.max_distance_km,
            "hideFulfilled": filters.hide_fulfilled,
            "sort": filters.sort.value
        }
    })


@emergencies_bp.get('/emergencies/<emergency_id>')
def get_emergency(path: EmergencyPath):
    """Get a single emergency request."""
    try:
        record = current_app.emergency_repository.get(path.emergency_id)
    except PyMongoError as e:
        logger.error("Failed to read emergency request", extra={"error": str(e)})
        raise ServiceUnavailableException("Emergency requests are temporarily unavailable")

    if record is None:
        raise NotFoundException(f"Emergency request '{path.emergency_id}' not found")

    return jsonify(emergency_domain.describe_emergency(record))


@emergencies_bp.get('/blood-types/<blood_type>/donors')
def get_compatible_donors(path: BloodTypePath):
    """Donor blood groups compatible with a recipient group."""
    if not is_known_blood_type(path.blood_type):
        raise NotFoundException(f"Unknown blood type '{path.blood_type}'")

    return jsonify({
        "recipient": path.blood_type,
        "donors": compatible_donors(path.blood_type),
        "isRare": is_rare(path.blood_type)
    })
