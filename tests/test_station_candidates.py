"""
Tests for StationCandidateGenerator component.

Tests cover:
- Equivalence classes: single names, multi-token addresses, numbered suffixes
- Ordering and de-duplication of candidates
- Hint table lookups, including injected tables
- Edge cases: empty and whitespace-only input
"""

import pytest
from airguide.station_candidates import (
    StationCandidateGenerator,
    normalize_dong_name,
    normalize_subregion_name,
)


class TestNormalizers:
    """Test suite for the name normalization helpers."""

    def test_numbered_dong_is_stripped(self):
        """Numbered dong: digits before 동 are removed."""
        assert normalize_dong_name("역삼1동") == "역삼동"
        assert normalize_dong_name("상계10동") == "상계동"

    def test_plain_dong_is_unchanged(self):
        """Plain dong names stay as they are."""
        assert normalize_dong_name("정자동") == "정자동"

    def test_subregion_ga_keeps_base(self):
        """Numbered 가: suffix and digits are removed."""
        assert normalize_subregion_name("효자동1가") == "효자동"

    def test_subregion_ri_keeps_suffix(self):
        """Numbered 리: digits are removed, 리 is kept."""
        assert normalize_subregion_name("신촌2리") == "신촌리"

    def test_subregion_applies_dong_rule(self):
        """Subregion normalization includes the dong rule."""
        assert normalize_subregion_name("역삼1동") == "역삼동"


class TestStationCandidateGenerator:
    """Test suite for StationCandidateGenerator."""

    @pytest.fixture
    def generator(self):
        """Fixture providing a generator with the default hint table."""
        return StationCandidateGenerator()

    # ==================== Equivalence Classes ====================

    def test_single_name_yields_itself(self, generator):
        """Single plain name: only the name itself."""
        assert generator.build_candidates("중구") == ["중구"]

    def test_numbered_dong_adds_stripped_form_after_first(self, generator):
        """Numbered dong: stripped form appears after the original."""
        candidates = generator.build_candidates("역삼1동")
        assert candidates[0] == "역삼1동"
        assert "역삼동" in candidates[1:]

    def test_multi_token_address(self, generator):
        """Multi-token address: full, compact, tokens and last-two combination."""
        candidates = generator.build_candidates("서울특별시 강남구 역삼1동")
        assert candidates[0] == "서울특별시 강남구 역삼1동"
        assert candidates[1] == "서울특별시강남구역삼1동"
        assert "서울특별시 강남구 역삼동" in candidates
        assert "강남구" in candidates
        assert "역삼동" in candidates
        assert "강남구 역삼1동" in candidates

    def test_token_order_follows_input(self, generator):
        """Tokens are added in input order."""
        candidates = generator.build_candidates("서울 중구")
        assert candidates == ["서울 중구", "서울중구", "서울", "중구"]

    # ==================== De-duplication ====================

    def test_whitespace_is_collapsed_and_deduplicated(self, generator):
        """Extra whitespace: collapsed before comparison, no duplicates."""
        candidates = generator.build_candidates("  서울   중구  ")
        assert candidates[0] == "서울 중구"
        assert len(candidates) == len(set(candidates))

    def test_first_occurrence_keeps_position(self, generator):
        """Duplicate variants keep the position of their first occurrence."""
        candidates = generator.build_candidates("중구 중구")
        assert candidates.count("중구") == 1
        assert candidates.index("중구 중구") == 0

    # ==================== Hint Table ====================

    def test_district_hint_appends_neighbourhoods(self, generator):
        """Known district: neighbourhood fallbacks are appended in order."""
        candidates = generator.build_candidates("분당구")
        assert candidates == ["분당구", "정자동", "수내동", "운중동"]

    def test_hint_matches_token(self, generator):
        """Hint key equal to a token triggers the fallbacks."""
        candidates = generator.build_candidates("경기도 성남시 분당구")
        assert candidates[-3:] == ["정자동", "수내동", "운중동"]

    def test_multiple_hint_keys_are_deduplicated(self, generator):
        """Several matching keys: shared neighbourhoods are added once."""
        candidates = generator.build_candidates("성남시 분당구")
        assert candidates.count("정자동") == 1
        assert candidates.count("운중동") == 1

    def test_sejong_hints(self, generator):
        """Sejong: four neighbourhood fallbacks."""
        candidates = generator.build_candidates("세종특별자치시")
        assert candidates[1:] == ["보람동", "아름동", "한솔동", "조치원읍"]

    def test_injected_hint_table(self):
        """Injected table replaces the defaults."""
        generator = StationCandidateGenerator({"해운대구": ["우동", "중동"]})
        assert generator.build_candidates("해운대구") == ["해운대구", "우동", "중동"]
        assert generator.build_candidates("분당구") == ["분당구"]

    # ==================== Edge Cases ====================

    def test_empty_input_yields_no_candidates(self, generator):
        """Empty input: nothing to try."""
        assert generator.build_candidates("") == []

    def test_whitespace_only_input_yields_no_candidates(self, generator):
        """Whitespace-only input: nothing to try."""
        assert generator.build_candidates("   ") == []
