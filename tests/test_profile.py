"""
Tests for ProfileInput.

Tests cover:
- Validation of age group and condition values
- Defaults for missing and unknown values
- Mapping to the advice upstream schema
"""

import pytest
from airguide.profile import ProfileInput


class TestProfileInput:
    """Test suite for ProfileInput."""

    def test_valid_profile(self):
        """Known values validate."""
        assert ProfileInput("infant", "asthma").validate() == (True, None)

    def test_missing_values_are_valid(self):
        """Missing values validate; defaults apply later."""
        assert ProfileInput().validate() == (True, None)

    def test_unknown_age_group(self):
        """Unknown age group fails with a message."""
        valid, reason = ProfileInput("child_low", "none").validate()
        assert valid is False
        assert "ageGroup" in reason

    def test_unknown_condition(self):
        """Unknown condition fails with a message."""
        valid, reason = ProfileInput("infant", "normal").validate()
        assert valid is False
        assert "condition" in reason

    def test_normalized_defaults(self):
        """Missing or unknown values become elementary_low / none."""
        assert ProfileInput().normalized() == ProfileInput("elementary_low", "none")
        assert ProfileInput("child_low", "normal").normalized() == ProfileInput("elementary_low", "none")

    @pytest.mark.parametrize("condition,expected", [
        ("none", "general"),
        ("rhinitis", "rhinitis"),
        ("asthma", "asthma"),
        ("atopy", "atopy"),
        (None, "general"),
    ])
    def test_ai_condition_mapping(self, condition, expected):
        """Condition none maps to general for the advice upstream."""
        payload = ProfileInput("toddler", condition).to_ai_payload()
        assert payload == {"ageGroup": "toddler", "condition": expected}

    def test_from_dict(self):
        """Caller JSON maps onto the dataclass."""
        profile = ProfileInput.from_dict({"ageGroup": "teen_adult", "condition": "atopy"})
        assert profile == ProfileInput("teen_adult", "atopy")
        assert ProfileInput.from_dict(None) == ProfileInput()
