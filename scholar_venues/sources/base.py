"""Content-source boundary shared by the HTML and browser page sources."""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Iterable, List, Optional

from scholar_venues.profile_urls import is_scholar_profile_url

logger = logging.getLogger(__name__)

# Record and affordance handles are whatever the concrete source uses
# (bs4 tags, Playwright element handles, plain objects in tests)
Record = Any
AffordanceHandle = Any

STABLE_AFFORDANCE_SELECTORS = (
    "#gsc_bpf_more",
    "button#gsc_bpf_more",
    ".gsc_pgn_pnx",
)
BUTTON_LIKE_SELECTOR = 'button, span[role="button"], div[role="button"]'
INVOCATION_ATTRIBUTE_SELECTOR = '[onclick*="gsc"], [onclick*="more"]'

STABLE_AFFORDANCE_ID = "gsc_bpf_more"
TITLE_CELL_SELECTOR = "td.gsc_a_t"
TITLE_CELL_CLASS = "gsc_a_t"
TITLE_LINK_CLASS = "gsc_a_at"
SECONDARY_TEXT_SELECTOR = ".gs_gray"
VENUE_FIELD_SELECTOR = ".gsc_a_j"


class AffordanceStrategy(Enum):
    """Ways of discovering the "show more" control, highest priority first."""

    STABLE_ID = "stable_id"
    VISIBLE_TEXT = "visible_text"
    INVOCATION_ATTRIBUTE = "invocation_attribute"


class ContentSourceError(Exception):
    """The page could not be read or driven."""


def is_reveal_text(text: str) -> bool:
    """True for button captions like "Show more" or "More"."""
    text = (text or "").lower().strip()
    return text in ("show more", "more") or "show more" in text


def has_reveal_caption(text: str, element_id: Optional[str] = None) -> bool:
    """Looser caption check applied when validating any candidate."""
    text = (text or "").lower().strip()
    return "more" in text or text == "show" or element_id == STABLE_AFFORDANCE_ID


def is_detail_view_link(href: Optional[str]) -> bool:
    """Per-publication links open a single-item citation view."""
    return bool(href) and "view_citation" in href


class ContentSource(ABC):
    """
    A publication listing that can grow when its "show more" control is used.

    Subclasses provide the page access primitives; discovery of the
    reveal control across strategies is shared here.
    """

    url: Optional[str] = None

    def is_listing_view(self) -> bool:
        """Whether the source is a Scholar profile publication list."""
        return is_scholar_profile_url(self.url)

    @abstractmethod
    def count_visible_records(self) -> int:
        """Number of publication rows currently present."""

    @abstractmethod
    def iter_records(self) -> List[Record]:
        """Snapshot of the publication rows currently present."""

    @abstractmethod
    def affordance_candidates(self, strategy: AffordanceStrategy) -> Iterable[AffordanceHandle]:
        """Possible reveal controls found by one discovery strategy."""

    @abstractmethod
    def is_affordance_actionable(self, handle: AffordanceHandle) -> bool:
        """Visible, enabled, captioned like a reveal control, not a title link."""

    @abstractmethod
    def invoke(self, handle: AffordanceHandle) -> None:
        """Activate the control without letting it navigate away."""

    @abstractmethod
    def secondary_fragments(self, record: Record) -> List[str]:
        """Texts of the row's secondary (grey) fragments, in page order."""

    @abstractmethod
    def venue_field(self, record: Record) -> Optional[str]:
        """Text of the row's dedicated venue field, if it has one."""

    def find_reveal_affordance(self) -> Optional[AffordanceHandle]:
        """
        Find the first actionable reveal control.

        Strategies are tried in priority order; the first candidate that
        validates wins and later strategies are not consulted.
        """
        for strategy in AffordanceStrategy:
            for handle in self.affordance_candidates(strategy):
                if self.is_affordance_actionable(handle):
                    logger.debug(f"Reveal control found via {strategy.value}")
                    return handle
        return None
