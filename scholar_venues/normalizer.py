"""
Normalize free-text Scholar venue citations into canonical venue labels.

A citation such as "Proceedings of the IEEE/CVF Conference on Computer
Vision and Pattern Recognition, 10012-10022, 2021" is cleaned of years,
page ranges and "proceedings of" prefixes, then matched against the
ordered rule table in venue_rules. Citations no rule recognises fall back
to a label derived from their leading phrase.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .venue_rules import (
    GENERIC_WORKSHOP,
    LOOSE_RULES,
    VENUE_RULES,
    WORKSHOP_ACRONYMS,
)

STOP_WORDS = frozenset({"the", "a", "an", "in", "on", "of", "and", "for", "with"})

_TRUNCATION = re.compile(r"(?:…|\.\.\.)$")
_COMMA_YEAR = re.compile(r"\s*,\s*\d{4}(?:\s|$)")
_TRAILING_YEAR = re.compile(r"(?:^|\s+)\d{4}\s*$")
_LEADING_YEAR = re.compile(r"^\d{4}\s+")
_VOLUME_ISSUE = re.compile(r"\s*,\s*\d+(?:\s*\(\d+\))?(?:\s|$)")
_PAGES = re.compile(r"\s*,\s*pp?\.?\s*[\d-]+", re.IGNORECASE)
_TRAILING_PAGE_RANGE = re.compile(r"\s*,\s*\d+-\d+\s*$")
_PROCEEDINGS_PREFIX = re.compile(
    r"^(?:proceedings of the |proceedings of |proceedings )", re.IGNORECASE
)
_WHITESPACE = re.compile(r"\s+")
_WORKSHOP = re.compile(r"workshop|\bws\b", re.IGNORECASE)

_FALLBACK_SPLIT = re.compile(r"[,.(]")
_FALLBACK_PREFIX = re.compile(
    r"^(?:proceedings of the |proceedings of |proceedings |proc\.?\s+|the\s+)+",
    re.IGNORECASE,
)
_FALLBACK_SUFFIX = re.compile(r"\s+(?:proceedings|proc\.?)$", re.IGNORECASE)
_FALLBACK_YEAR = re.compile(r"\s+\d{4}$")
_FALLBACK_NUMBER = re.compile(r"\s+\d+$")


@dataclass(frozen=True)
class CleanedVenue:
    """Venue text after cleaning, plus the workshop flag derived from it."""

    text: str
    is_workshop: bool

    @property
    def lower(self) -> str:
        return self.text.lower()


def clean_venue_text(raw: Optional[str]) -> Optional[CleanedVenue]:
    """Strip years, volume/page fragments and proceedings prefixes."""
    if not raw or not raw.strip():
        return None

    text = _TRUNCATION.sub("", raw.strip()).strip()

    text = _COMMA_YEAR.sub(" ", text, count=1)
    text = _TRAILING_YEAR.sub("", text)
    text = _LEADING_YEAR.sub("", text)

    text = _VOLUME_ISSUE.sub(" ", text, count=1)
    text = _PAGES.sub("", text, count=1)
    text = _TRAILING_PAGE_RANGE.sub("", text)

    text = _PROCEEDINGS_PREFIX.sub("", text)
    text = _WHITESPACE.sub(" ", text).strip()

    return CleanedVenue(text=text, is_workshop=bool(_WORKSHOP.search(text)))


def match_rules(venue: CleanedVenue) -> Optional[str]:
    """Run the rule passes in order and return the first label produced."""
    lower = venue.lower

    for rule in VENUE_RULES:
        if rule.matches(lower):
            return rule.label(venue.is_workshop)

    if venue.is_workshop:
        for pattern, label in WORKSHOP_ACRONYMS:
            if pattern.search(lower):
                return label
        return GENERIC_WORKSHOP

    for rule in LOOSE_RULES:
        if rule.matches(lower):
            return rule.base

    return None


def fallback_label(text: str) -> Optional[str]:
    """Derive an open-ended label from the leading phrase of the venue text."""
    simplified = _FALLBACK_SPLIT.split(text, maxsplit=1)[0].strip()

    simplified = _FALLBACK_PREFIX.sub("", simplified)
    simplified = _FALLBACK_SUFFIX.sub("", simplified)

    simplified = _FALLBACK_YEAR.sub("", simplified)
    simplified = _FALLBACK_NUMBER.sub("", simplified)
    simplified = simplified.strip()

    if len(simplified) < 3 or simplified.lower() in STOP_WORDS:
        return None
    return simplified


def _normalize_once(raw: Optional[str]) -> Optional[str]:
    venue = clean_venue_text(raw)
    if venue is None:
        return None
    return match_rules(venue) or fallback_label(venue.text)


def normalize_venue(raw: Optional[str]) -> Optional[str]:
    """
    Map a raw venue citation to its canonical label.

    Returns None when no usable venue can be determined. The result is
    stable under re-normalization: ``normalize_venue(label) == label`` for
    every label this function returns.

    Args:
        raw: Venue text as shown under a publication title

    Returns:
        Canonical venue label, or None if the text is unclassifiable
    """
    label = _normalize_once(raw)

    # Rule labels are already fixed points; fallback labels can still
    # shrink (e.g. "The 2020 Foo" -> "2020 Foo" -> "Foo"). Each refinement
    # yields a rule label or a shorter fallback, so this terminates.
    while label is not None:
        refined = _normalize_once(label)
        if refined == label:
            break
        label = refined

    return label


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python -m scholar_venues.normalizer <venue text>")
        sys.exit(1)

    text = " ".join(sys.argv[1:])
    print(f"Raw:       {text}")
    print(f"Canonical: {normalize_venue(text)}")
