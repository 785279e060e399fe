"""Live Scholar profile pages driven through a Playwright browser."""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from playwright.sync_api import ElementHandle, Page, sync_playwright
from playwright.sync_api import Error as PlaywrightError

from config.settings import settings
from scholar_venues.profile_urls import RECORD_SELECTOR
from .base import (
    BUTTON_LIKE_SELECTOR,
    INVOCATION_ATTRIBUTE_SELECTOR,
    SECONDARY_TEXT_SELECTOR,
    STABLE_AFFORDANCE_SELECTORS,
    TITLE_CELL_SELECTOR,
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

# offsetParent is null for elements that are not laid out
_IS_LAID_OUT_JS = "el => el.offsetParent !== null"
_IN_TITLE_CELL_JS = "(el, selector) => el.closest(selector) !== null"
_SUPPRESS_NAVIGATION_JS = """el => {
    el.addEventListener("click", e => { e.preventDefault(); e.stopPropagation(); });
}"""


class BrowserSource(ContentSource):
    """Content source wrapping an open Playwright page."""

    def __init__(self, page: Page):
        self.page = page

    @property
    def url(self) -> Optional[str]:
        return self.page.url

    def count_visible_records(self) -> int:
        return self.page.locator(RECORD_SELECTOR).count()

    def iter_records(self) -> List[ElementHandle]:
        return self.page.query_selector_all(RECORD_SELECTOR)

    def affordance_candidates(self, strategy: AffordanceStrategy) -> List[ElementHandle]:
        if strategy is AffordanceStrategy.STABLE_ID:
            found = (self.page.query_selector(s) for s in STABLE_AFFORDANCE_SELECTORS)
            return [element for element in found if element is not None]

        if strategy is AffordanceStrategy.VISIBLE_TEXT:
            return [
                element
                for element in self.page.query_selector_all(BUTTON_LIKE_SELECTOR)
                if is_reveal_text(element.text_content())
            ]

        return self.page.query_selector_all(INVOCATION_ATTRIBUTE_SELECTOR)

    def is_affordance_actionable(self, handle: ElementHandle) -> bool:
        if not handle.evaluate(_IS_LAID_OUT_JS) or not handle.is_enabled():
            return False
        if not has_reveal_caption(handle.text_content(), handle.get_attribute("id")):
            return False

        classes = (handle.get_attribute("class") or "").split()
        return (
            not handle.evaluate(_IN_TITLE_CELL_JS, TITLE_CELL_SELECTOR)
            and TITLE_LINK_CLASS not in classes
            and not is_detail_view_link(handle.get_attribute("href"))
        )

    def invoke(self, handle: ElementHandle) -> None:
        tag_name = handle.evaluate("el => el.tagName")
        if tag_name == "A":
            handle.evaluate(_SUPPRESS_NAVIGATION_JS)
        handle.click()

    def secondary_fragments(self, record: ElementHandle) -> List[str]:
        try:
            return [
                (element.text_content() or "").strip()
                for element in record.query_selector_all(SECONDARY_TEXT_SELECTOR)
            ]
        except PlaywrightError as e:
            # Rows detach when the page re-renders the table
            raise ContentSourceError(f"Could not read publication row: {e}") from e

    def venue_field(self, record: ElementHandle) -> Optional[str]:
        try:
            element = record.query_selector(VENUE_FIELD_SELECTOR)
            return (element.text_content() or "").strip() if element else None
        except PlaywrightError as e:
            raise ContentSourceError(f"Could not read publication row: {e}") from e


@contextmanager
def browser_session(url: str, headless: Optional[bool] = None) -> Iterator[BrowserSource]:
    """
    Open a profile page in Chromium and yield it as a content source.

    The browser is closed when the block exits, whatever the outcome.

    Args:
        url: Scholar profile URL to open
        headless: Run without a window (default from settings)
    """
    if headless is None:
        headless = settings.browser_headless

    with sync_playwright() as p:
        browser = p.chromium.launch(headless=headless)
        try:
            context = browser.new_context(
                user_agent=settings.user_agent,
                viewport={"width": 1920, "height": 1080},
            )
            page = context.new_page()
            logger.info(f"Navigating to profile: {url}")
            page.goto(url, wait_until="domcontentloaded", timeout=settings.request_timeout * 1000)
            yield BrowserSource(page)
        finally:
            browser.close()
