"""
Profile module for the AirGuide system.

This module defines the ProfileInput dataclass describing the child (or
adult) a report is computed for: an age group and an optional chronic
condition. Profiles are supplied with every request and never stored.
"""

from dataclasses import dataclass
from typing import Optional

AGE_GROUPS = ("infant", "toddler", "elementary_low", "elementary_high", "teen_adult")
CONDITIONS = ("none", "rhinitis", "asthma", "atopy")

DEFAULT_AGE_GROUP = "elementary_low"
DEFAULT_CONDITION = "none"

# The advice upstream calls "no condition" general
AI_CONDITION_MAP = {
    "none": "general",
    "rhinitis": "rhinitis",
    "asthma": "asthma",
    "atopy": "atopy",
}


@dataclass(frozen=True)
class ProfileInput:
    """
    User profile supplied with a report request.

    Attributes:
        age_group: One of infant, toddler, elementary_low, elementary_high,
            teen_adult. None means elementary_low.
        condition: One of none, rhinitis, asthma, atopy. None means none.
    """

    age_group: Optional[str] = None
    condition: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Optional[dict]) -> "ProfileInput":
        """Builds a profile from the caller's {ageGroup, condition} JSON object."""
        payload = payload or {}
        return cls(age_group=payload.get("ageGroup"), condition=payload.get("condition"))

    def validate(self) -> tuple[bool, Optional[str]]:
        """
        Validates the profile fields against the known enums.

        Missing fields are valid (defaults apply); only unknown values fail.

        Returns:
            A tuple containing:
            - bool: True if both fields are missing or known values
            - Optional[str]: None if valid, or a descriptive error message
        """
        if self.age_group is not None and self.age_group not in AGE_GROUPS:
            return (False, f"unknown ageGroup: {self.age_group}")

        if self.condition is not None and self.condition not in CONDITIONS:
            return (False, f"unknown condition: {self.condition}")

        return (True, None)

    def normalized(self) -> "ProfileInput":
        """Returns a copy with missing or unknown values replaced by the defaults."""
        age_group = self.age_group if self.age_group in AGE_GROUPS else DEFAULT_AGE_GROUP
        condition = self.condition if self.condition in CONDITIONS else DEFAULT_CONDITION
        return ProfileInput(age_group=age_group, condition=condition)

    def to_ai_payload(self) -> dict[str, str]:
        """Maps the profile to the advice upstream's userProfile schema."""
        profile = self.normalized()
        return {
            "ageGroup": profile.age_group,
            "condition": AI_CONDITION_MAP[profile.condition],
        }
