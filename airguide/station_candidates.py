"""
Station candidate module for the AirGuide system.

Place names coming from geocoders rarely match monitoring-station names
exactly ("역삼1동" vs "역삼동", "서울특별시 강남구" vs "강남구"). This module
turns one free-form place name into an ordered list of variants to try
against the station lookup, preferred variant first.
"""

import re
from typing import Iterable, Mapping, Optional, Sequence

from .config import DEFAULT_STATION_HINTS

_NUMBERED_DONG = re.compile(r"^(.+?)\d+동$")
_NUMBERED_GA = re.compile(r"^(.+?)\d+가$")
_NUMBERED_RI = re.compile(r"^(.+?)\d+리$")
_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(value: str) -> str:
    """Trims a string and collapses internal whitespace runs to single spaces."""
    return _WHITESPACE.sub(" ", value.strip())


def normalize_dong_name(name: str) -> str:
    """Drops the digits in front of a trailing 동 ("역삼1동" -> "역삼동")."""
    return _NUMBERED_DONG.sub(r"\1동", name)


def normalize_subregion_name(name: str) -> str:
    """
    Normalizes numbered sub-region suffixes.

    "역삼1동" -> "역삼동", "효자동1가" -> "효자동", "신촌2리" -> "신촌리".
    """
    name = _NUMBERED_DONG.sub(r"\1동", name)
    name = _NUMBERED_GA.sub(r"\1", name)
    return _NUMBERED_RI.sub(r"\1리", name)


class StationCandidateGenerator:
    """
    Builds ordered, de-duplicated station name candidates.

    The hint table maps ambiguous district names to neighbourhoods that are
    known to host a station. It is injected so the table can be extended
    without touching the fetch logic.
    """

    def __init__(self, hints: Optional[Mapping[str, Sequence[str]]] = None):
        self.hints = DEFAULT_STATION_HINTS if hints is None else hints

    def build_candidates(self, raw_station: str) -> list[str]:
        """
        Generates lookup candidates for a raw place name.

        Order of generation:
        1. The cleaned name (trimmed, whitespace collapsed)
        2. The cleaned name with all whitespace removed
        3. Dong- and subregion-normalized forms of the cleaned name
        4. Every token, followed by its normalized forms
        5. For two or more tokens: last token, second-to-last token, and the
           last two tokens joined
        6. Neighbourhood hints for any matching district key

        A candidate is added only the first time its whitespace-normalized
        form is seen. Empty input yields an empty list.

        Args:
            raw_station: Place name as supplied by the user or geocoder

        Returns:
            Ordered list of unique candidates, preferred first
        """
        cleaned = collapse_whitespace(raw_station or "")
        seen: set[str] = set()
        candidates: list[str] = []

        def add(value: Optional[str]) -> None:
            if not value:
                return
            normalized = collapse_whitespace(value)
            if not normalized or normalized in seen:
                return
            seen.add(normalized)
            candidates.append(normalized)

        add(cleaned)
        add(_WHITESPACE.sub("", cleaned))
        add(normalize_dong_name(cleaned))
        add(normalize_subregion_name(cleaned))

        tokens = cleaned.split(" ") if cleaned else []
        for token in tokens:
            add(token)
            add(normalize_dong_name(token))
            add(normalize_subregion_name(token))

        if len(tokens) >= 2:
            add(tokens[-1])
            add(tokens[-2])
            add(f"{tokens[-2]} {tokens[-1]}")

        for hint in self._matching_hints(cleaned, tokens):
            add(hint)

        return candidates

    def _matching_hints(self, cleaned: str, tokens: Iterable[str]) -> list[str]:
        """Collects hint neighbourhoods for every key equal to the name or a token."""
        keys = {cleaned, *tokens}
        matched: list[str] = []
        for key, neighbourhoods in self.hints.items():
            if key in keys:
                for hint in neighbourhoods:
                    if hint not in matched:
                        matched.append(hint)
        return matched
