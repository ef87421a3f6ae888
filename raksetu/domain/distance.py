# SPDX-License-Identifier: Apache-2.0

"""
Great-circle distance helpers used to rank emergencies around a donor.
"""

import math
from typing import Optional, Sequence, List, Tuple, Union

from ..models.entities import Coordinates, EmergencyRequest

EARTH_RADIUS_KM = 6371.0


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Haversine distance between two points.

    Returns:
        Distance in kilometres, rounded to one decimal place
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return round(EARTH_RADIUS_KM * c, 1)


def distance_to(record: EmergencyRequest, origin: Optional[Coordinates]) -> Optional[float]:
    """Distance from origin to a record, or None when either position is unknown."""
    if origin is None or record.coordinates is None:
        return None
    return calculate_distance(
        origin.latitude,
        origin.longitude,
        record.coordinates.latitude,
        record.coordinates.longitude
    )


def format_distance(distance: Union[float, str, None]) -> str:
    """
    Format a distance in kilometres for display.

    Values under one kilometre are shown in metres; anything that is not a
    number becomes "N/A".
    """
    if distance is None or distance in ("", "N/A", "Unknown"):
        return "N/A"

    try:
        distance_km = float(distance)
    except (TypeError, ValueError):
        return "N/A"

    if math.isnan(distance_km):
        return "N/A"

    if distance_km < 1:
        return f"{round(distance_km * 1000)}m"

    return f"{distance_km:.1f}km"


def sort_by_distance(
    records: Sequence[EmergencyRequest],
    origin: Coordinates
) -> List[Tuple[EmergencyRequest, Optional[float]]]:
    """
    Pair records with their distance and order them closest first.

    Records without coordinates sort last, keeping their relative order.
    """
    paired = [(record, distance_to(record, origin)) for record in records]
    return sorted(paired, key=lambda item: (item[1] is None, item[1] or 0.0))


def filter_by_distance(
    records: Sequence[EmergencyRequest],
    origin: Optional[Coordinates],
    max_distance_km: Optional[float]
) -> Sequence[EmergencyRequest]:
    """
    Keep records within max_distance_km of origin.

    Without a limit or an origin the input is returned unchanged; with both,
    records lacking coordinates are dropped.
    """
    if not max_distance_km or origin is None:
        return records

    kept = []
    for record in records:
        distance = distance_to(record, origin)
        if distance is not None and distance <= max_distance_km:
            kept.append(record)
    return kept
