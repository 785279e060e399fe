"""
Scholar profile pages parsed with BeautifulSoup.

The server-rendered profile page holds the first batch of publication
rows. Its "Show more" button is emulated by requesting the next batch
(``cstart``/``pagesize`` query parameters) and appending the returned rows
to the parsed page.
"""

import logging
import time
from pathlib import Path
from typing import Iterable, List, Optional, Union

import requests
from bs4 import BeautifulSoup, Tag

from config.settings import settings
from scholar_venues.profile_urls import RECORD_SELECTOR, with_page_params
from .base import (
    BUTTON_LIKE_SELECTOR,
    INVOCATION_ATTRIBUTE_SELECTOR,
    SECONDARY_TEXT_SELECTOR,
    STABLE_AFFORDANCE_SELECTORS,
    TITLE_CELL_CLASS,
    TITLE_LINK_CLASS,
    VENUE_FIELD_SELECTOR,
    AffordanceStrategy,
    ContentSource,
    ContentSourceError,
    has_reveal_caption,
    is_detail_view_link,
    is_reveal_text,
)

logger = logging.getLogger(__name__)

LISTING_TABLE_SELECTOR = "#gsc_a_t, #gsc_a_b"
ROWS_BODY_SELECTOR = "#gsc_a_b"

# Missing profiles and rate limiting do not improve on retry
FINAL_STATUSES = (403, 404, 410, 429)
CAPTCHA_MARKERS = ("gs_captcha_f", "unusual traffic from your computer network")
BLOCKED_MESSAGE = "Blocked by Scholar (CAPTCHA page)"


def is_blocked_response(response: requests.Response) -> bool:
    """Scholar answers suspected bots with a CAPTCHA form or a /sorry/ redirect."""
    if "/sorry/" in (response.url or ""):
        return True
    text = response.text.lower()
    return any(marker in text for marker in CAPTCHA_MARKERS)


class HTMLFetcher:
    """Fetches Scholar pages over a shared session, retrying transient failures."""

    def __init__(
        self,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        self.timeout = timeout or settings.request_timeout
        self.max_retries = max_retries or settings.request_max_retries
        self.retry_delay = settings.request_retry_delay if retry_delay is None else retry_delay
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": settings.user_agent,
            "Accept": "text/html,application/xhtml+xml",
            "Accept-Language": "en-US,en;q=0.9",
        })

    def fetch(self, url: str) -> tuple[Optional[str], Optional[str]]:
        """
        Fetch one Scholar page.

        Missing profiles, rate limiting and the CAPTCHA interstitial end
        the request at once; timeouts and other failures are retried with
        a linearly growing pause.

        Returns:
            Tuple of (html, None) on success, (None, error) on failure
        """
        error = None

        for attempt in range(1, self.max_retries + 1):
            try:
                response = self.session.get(url, timeout=self.timeout)
            except requests.exceptions.Timeout:
                error = f"Timeout after {self.timeout}s"
            except requests.exceptions.RequestException as e:
                error = str(e)
            else:
                if response.status_code in FINAL_STATUSES:
                    return None, f"HTTP {response.status_code}"
                if is_blocked_response(response):
                    logger.warning(f"Scholar served a CAPTCHA page for {url}")
                    return None, BLOCKED_MESSAGE
                if response.status_code < 400:
                    return response.text, None
                error = f"HTTP {response.status_code}"

            if attempt < self.max_retries:
                logger.debug(f"Fetch attempt {attempt} for {url} failed ({error}), retrying")
                time.sleep(self.retry_delay * attempt)

        return None, error


def _is_hidden(element: Tag) -> bool:
    for node in [element, *element.parents]:
        if not isinstance(node, Tag):
            continue
        if node.has_attr("hidden"):
            return True
        style = node.get("style", "").replace(" ", "").lower()
        if "display:none" in style or "visibility:hidden" in style:
            return True
    return False


class ScholarHtmlSource(ContentSource):
    """Content source backed by a parsed Scholar profile page."""

    def __init__(
        self,
        html: str,
        url: Optional[str] = None,
        fetcher: Optional[HTMLFetcher] = None,
        page_size: Optional[int] = None,
    ):
        self.url = url
        self.fetcher = fetcher
        self.page_size = page_size or settings.scholar_page_size
        self.soup = BeautifulSoup(html, "html.parser")

    @classmethod
    def from_url(cls, url: str, fetcher: Optional[HTMLFetcher] = None) -> "ScholarHtmlSource":
        """Fetch a live profile page; "Show more" fetches further batches."""
        fetcher = fetcher or HTMLFetcher()
        html, error = fetcher.fetch(url)
        if error:
            raise ContentSourceError(f"Failed to fetch profile page: {error}")
        return cls(html, url=url, fetcher=fetcher)

    @classmethod
    def from_file(cls, path: Union[str, Path], url: Optional[str] = None) -> "ScholarHtmlSource":
        """Load a saved profile page. Without a fetcher it cannot grow."""
        html = Path(path).read_text(encoding="utf-8")
        return cls(html, url=url)

    def is_listing_view(self) -> bool:
        if self.url:
            return super().is_listing_view()
        # Saved pages have no address; recognise the publication table instead
        return self.soup.select_one(LISTING_TABLE_SELECTOR) is not None

    def count_visible_records(self) -> int:
        return len(self.soup.select(RECORD_SELECTOR))

    def iter_records(self) -> List[Tag]:
        return self.soup.select(RECORD_SELECTOR)

    def affordance_candidates(self, strategy: AffordanceStrategy) -> Iterable[Tag]:
        if self.fetcher is None or not self.url:
            return []

        if strategy is AffordanceStrategy.STABLE_ID:
            found = (self.soup.select_one(s) for s in STABLE_AFFORDANCE_SELECTORS)
            return [element for element in found if element is not None]

        if strategy is AffordanceStrategy.VISIBLE_TEXT:
            return [
                element
                for element in self.soup.select(BUTTON_LIKE_SELECTOR)
                if is_reveal_text(element.get_text(" ", strip=True))
            ]

        return self.soup.select(INVOCATION_ATTRIBUTE_SELECTOR)

    def is_affordance_actionable(self, handle: Tag) -> bool:
        if _is_hidden(handle):
            return False
        if handle.has_attr("disabled") or handle.get("aria-disabled") == "true":
            return False
        if not has_reveal_caption(handle.get_text(" ", strip=True), handle.get("id")):
            return False

        # Make sure it's not a paper title link
        return (
            handle.find_parent("td", class_=TITLE_CELL_CLASS) is None
            and TITLE_LINK_CLASS not in handle.get("class", [])
            and not is_detail_view_link(handle.get("href"))
        )

    def invoke(self, handle: Tag) -> None:
        """
        Load the next batch of rows, as the page's own button would.

        The control's href is never followed, so the listing is not
        replaced by another page.
        """
        start = self.count_visible_records()
        next_url = with_page_params(self.url, start, self.page_size)

        html, error = self.fetcher.fetch(next_url)
        if error:
            raise ContentSourceError(f"Failed to load more publications: {error}")

        batch = BeautifulSoup(html, "html.parser")
        rows = batch.select(RECORD_SELECTOR)
        self._append_rows(rows)
        logger.debug(f"Fetched {len(rows)} rows from cstart={start}")

        # The batch reports whether anything lies beyond it
        next_button = batch.select_one(STABLE_AFFORDANCE_SELECTORS[0])
        if not rows or next_button is None or next_button.has_attr("disabled"):
            handle["disabled"] = ""

    def _append_rows(self, rows: List[Tag]) -> None:
        if not rows:
            return

        body = self.soup.select_one(ROWS_BODY_SELECTOR)
        if body is None:
            existing = self.soup.select(RECORD_SELECTOR)
            if not existing:
                raise ContentSourceError("Publication table not found on page")
            body = existing[-1].parent

        for row in rows:
            body.append(row.extract())

    def secondary_fragments(self, record: Tag) -> List[str]:
        return [el.get_text().strip() for el in record.select(SECONDARY_TEXT_SELECTOR)]

    def venue_field(self, record: Tag) -> Optional[str]:
        element = record.select_one(VENUE_FIELD_SELECTOR)
        return element.get_text().strip() if element else None
