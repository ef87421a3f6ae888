# SPDX-License-Identifier: Apache-2.0

"""
Blood group constants and donor compatibility.
"""

from typing import Dict, List, Tuple

from ..models.enums import BloodType

BLOOD_TYPES: Tuple[str, ...] = tuple(bt.value for bt in BloodType)

ALL_SENTINEL = "All"

BLOOD_TYPES_WITH_ALL: Tuple[str, ...] = (ALL_SENTINEL,) + BLOOD_TYPES

# "O h" is the Bombay phenotype; it is not a selectable request type but
# records imported from partner banks may carry it.
RARE_BLOOD_TYPES: Tuple[str, ...] = ("O h", "AB-", "A-", "B-", "O-")

# Recipient -> donor types that can safely give to it
BLOOD_COMPATIBILITY: Dict[str, Tuple[str, ...]] = {
    "A+": ("A+", "A-", "O+", "O-"),
    "A-": ("A-", "O-"),
    "B+": ("B+", "B-", "O+", "O-"),
    "B-": ("B-", "O-"),
    "AB+": ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"),
    "AB-": ("A-", "B-", "AB-", "O-"),
    "O+": ("O+", "O-"),
    "O-": ("O-",),
}


def is_known_blood_type(blood_type: str) -> bool:
    """Check whether a value is one of the eight selectable groups."""
    return blood_type in BLOOD_COMPATIBILITY


def is_rare(blood_type: str) -> bool:
    """Check whether a blood group is flagged as rare."""
    return blood_type in RARE_BLOOD_TYPES


def compatible_donors(recipient: str) -> List[str]:
    """
    Get the donor groups a recipient can receive from.

    Args:
        recipient: Recipient blood group

    Returns:
        Donor groups in matrix order

    Raises:
        KeyError: If the recipient group is unknown
    """
    return list(BLOOD_COMPATIBILITY[recipient])


def can_donate(donor: str, recipient: str) -> bool:
    """Check whether a donor group can give to a recipient group."""
    return donor in BLOOD_COMPATIBILITY.get(recipient, ())
