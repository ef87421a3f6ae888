# SPDX-License-Identifier: Apache-2.0

"""
Tests for blood group compatibility and distance helpers.
"""

import pytest

from raksetu.domain.blood_types import (
    BLOOD_TYPES,
    BLOOD_TYPES_WITH_ALL,
    can_donate,
    compatible_donors,
    is_known_blood_type,
    is_rare
)
from raksetu.domain.distance import (
    calculate_distance,
    filter_by_distance,
    format_distance,
    sort_by_distance
)
from raksetu.models.entities import Coordinates


class TestBloodTypes:

    def test_selectable_groups(self):
        assert BLOOD_TYPES == ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")
        assert BLOOD_TYPES_WITH_ALL[0] == "All"

    def test_rare_groups(self):
        assert is_rare("O-")
        assert is_rare("O h")
        assert not is_rare("O+")

    def test_universal_donor_and_recipient(self):
        assert all(can_donate("O-", recipient) for recipient in BLOOD_TYPES)
        assert sorted(compatible_donors("AB+")) == sorted(BLOOD_TYPES)

    def test_incompatible_pair(self):
        assert not can_donate("A+", "O+")
        assert not can_donate("A+", "Unknown")

    def test_unknown_recipient_raises(self):
        assert not is_known_blood_type("O h")
        with pytest.raises(KeyError):
            compatible_donors("O h")


class TestDistance:

    def test_same_point_is_zero(self):
        assert calculate_distance(12.97, 77.59, 12.97, 77.59) == 0.0

    def test_known_distance(self):
        # Bengaluru to Chennai is roughly 290km in a straight line
        distance = calculate_distance(12.9716, 77.5946, 13.0827, 80.2707)
        assert 280 < distance < 300
        assert distance == round(distance, 1)

    @pytest.mark.parametrize("value,expected", [
        (0.8, "800m"),
        (0.05, "50m"),
        (12.84, "12.8km"),
        ("3.26", "3.3km"),
        (None, "N/A"),
        ("Unknown", "N/A"),
        ("far", "N/A"),
        (float("nan"), "N/A"),
    ])
    def test_format_distance(self, value, expected):
        assert format_distance(value) == expected

    def test_filter_without_origin_is_identity(self, sample_records):
        assert filter_by_distance(sample_records, None, 10) is sample_records
        assert filter_by_distance(sample_records, Coordinates(lat=0, lng=0), None) is sample_records

    def test_filter_drops_records_without_coordinates(self, sample_records):
        origin = Coordinates(lat=17.385, lng=78.4867)
        kept = filter_by_distance(sample_records, origin, 5000)
        assert [r.id for r in kept] == ["e1", "e2", "e4"]

    def test_sort_pairs_records_with_distances(self, sample_records):
        origin = Coordinates(lat=28.6, lng=77.2)
        ordered = sort_by_distance(sample_records, origin)
        assert [record.id for record, _ in ordered] == ["e2", "e1", "e4", "e3"]
        assert ordered[-1][1] is None
