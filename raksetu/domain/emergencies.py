# SPDX-License-Identifier: Apache-2.0

"""
Emergency request domain logic.

Pure functions that narrow, classify and order emergency blood requests.
None of them mutate their input; when a filter does not apply, the input
sequence itself is handed back.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence, Union

from ..models.entities import Coordinates, EmergencyRequest
from ..models.enums import EmergencySort, FilterKind, UrgencyDisplayClass, UrgencyLevel
from .blood_types import ALL_SENTINEL, is_rare
from .distance import distance_to, filter_by_distance, format_distance, sort_by_distance

URGENCY_DISPLAY_CLASSES: Dict[str, UrgencyDisplayClass] = {
    UrgencyLevel.CRITICAL.value: UrgencyDisplayClass.SEVERE,
    UrgencyLevel.HIGH.value: UrgencyDisplayClass.ELEVATED,
    UrgencyLevel.MEDIUM.value: UrgencyDisplayClass.MODERATE,
    UrgencyLevel.LOW.value: UrgencyDisplayClass.MILD,
}

URGENCY_PRIORITY: Dict[str, int] = {
    UrgencyLevel.CRITICAL.value: 4,
    UrgencyLevel.HIGH.value: 3,
    UrgencyLevel.MEDIUM.value: 2,
    UrgencyLevel.LOW.value: 1,
}

DEFAULT_URGENCY_PRIORITY = 2


def classify_urgency(urgency: Optional[str]) -> UrgencyDisplayClass:
    """
    Map an urgency label to its display class.

    Unknown, empty or missing labels map to the neutral class.
    """
    if not isinstance(urgency, str):
        return UrgencyDisplayClass.NEUTRAL
    return URGENCY_DISPLAY_CLASSES.get(urgency, UrgencyDisplayClass.NEUTRAL)


def urgency_priority(urgency: Optional[str]) -> int:
    """Numeric urgency, higher is more urgent; unknown labels rank as Medium."""
    if not isinstance(urgency, str):
        return DEFAULT_URGENCY_PRIORITY
    return URGENCY_PRIORITY.get(urgency, DEFAULT_URGENCY_PRIORITY)


def _matches(record: EmergencyRequest, kind: FilterKind, value: str) -> bool:
    if kind is FilterKind.BLOOD_TYPE:
        return record.blood_type == value
    if kind is FilterKind.URGENCY:
        return record.urgency == value
    return value.lower() in record.location.lower()


def filter_emergencies(
    records: Sequence[EmergencyRequest],
    kind: Union[FilterKind, str],
    value: Optional[str]
) -> Sequence[EmergencyRequest]:
    """
    Narrow emergency requests by a single criterion.

    Blood type and urgency match exactly; location matches as a
    case-insensitive substring. Relative order is preserved.

    Args:
        records: Requests to filter
        kind: Field to filter on
        value: Value to match; None, empty or "All" disables the filter

    Returns:
        The input itself when the filter is disabled or the kind is unknown,
        otherwise a new list of the matching requests
    """
    if not value or value == ALL_SENTINEL:
        return records

    try:
        filter_kind = FilterKind(kind)
    except ValueError:
        return records

    return [record for record in records if _matches(record, filter_kind, value)]


def is_fulfilled(record: EmergencyRequest) -> bool:
    """A request is fulfilled once it has as many responses as units needed."""
    return record.response_count >= record.units


def hide_fulfilled(records: Sequence[EmergencyRequest]) -> List[EmergencyRequest]:
    """Drop requests that already have enough donor responses."""
    return [record for record in records if not is_fulfilled(record)]


def search_emergencies(
    records: Sequence[EmergencyRequest],
    query: Optional[str]
) -> Sequence[EmergencyRequest]:
    """
    Free-text search over hospital, location and blood type.

    A blank query returns the input unchanged.
    """
    if not query or not query.strip():
        return records

    needle = query.strip().lower()

    def haystack(record: EmergencyRequest):
        return (record.hospital or "", record.location, record.blood_type)

    return [
        record for record in records
        if any(needle in field.lower() for field in haystack(record))
    ]


def sort_by_urgency(records: Sequence[EmergencyRequest]) -> List[EmergencyRequest]:
    """Order requests most urgent first; ties keep their original order."""
    return sorted(records, key=lambda record: -urgency_priority(record.urgency))


def describe_emergency(
    record: EmergencyRequest,
    origin: Optional[Coordinates] = None
) -> Dict[str, Any]:
    """
    Serialize a request with the derived fields the client renders.

    Args:
        record: Request to describe
        origin: Viewer position used for the distance fields

    Returns:
        Client-facing dictionary
    """
    distance = distance_to(record, origin)
    data = record.to_response()
    data.update({
        "displayClass": classify_urgency(record.urgency).value,
        "urgencyPriority": urgency_priority(record.urgency),
        "isRare": is_rare(record.blood_type),
        "fulfilled": is_fulfilled(record),
        "distanceKm": distance,
        "distanceLabel": format_distance(distance)
    })
    return data


@dataclass(frozen=True)
class EmergencyFilterSet:
    """
    Every filter the emergency listing supports.

    Fields left at their defaults do not narrow the listing. Filters are
    applied in a fixed order: fulfilled requests, blood type, urgency,
    location, free-text search, distance, then sorting.
    """
    blood_type: Optional[str] = None
    urgency: Optional[str] = None
    location: Optional[str] = None
    search: Optional[str] = None
    max_distance_km: Optional[float] = None
    hide_fulfilled: bool = True
    sort: EmergencySort = EmergencySort.NONE

    def __post_init__(self):
        if self.max_distance_km is not None and self.max_distance_km <= 0:
            raise ValueError("max_distance_km must be positive")
        # Normalise plain strings so callers may pass query values directly
        object.__setattr__(self, "sort", EmergencySort(self.sort))

    def cleared(self) -> "EmergencyFilterSet":
        """Return a filter set with every filter reset."""
        return replace(
            self,
            blood_type=None,
            urgency=None,
            location=None,
            search=None,
            max_distance_km=None
        )

    def apply(
        self,
        records: Sequence[EmergencyRequest],
        origin: Optional[Coordinates] = None
    ) -> List[EmergencyRequest]:
        """
        Run the configured filters over a listing.

        Args:
            records: Requests to filter
            origin: Viewer position; required for distance filtering and sorting

        Returns:
            New list of matching requests
        """
        result: Sequence[EmergencyRequest] = records
        if self.hide_fulfilled:
            result = hide_fulfilled(result)

        result = filter_emergencies(result, FilterKind.BLOOD_TYPE, self.blood_type)
        result = filter_emergencies(result, FilterKind.URGENCY, self.urgency)
        result = filter_emergencies(result, FilterKind.LOCATION, self.location)
        result = search_emergencies(result, self.search)
        result = filter_by_distance(result, origin, self.max_distance_km)

        if self.sort is EmergencySort.URGENCY:
            return sort_by_urgency(result)

        if self.sort is EmergencySort.DISTANCE and origin is not None:
            return [record for record, _ in sort_by_distance(result, origin)]

        return list(result)
