"""
Venue analysis of a Scholar profile.

Loads every publication on the profile, classifies each venue citation
and reports how many publications appeared at each venue.
"""

import logging
import threading
import time
from collections import Counter
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, Field

from scholar_venues.extractor import RecordExtractor
from scholar_venues.loader import IncrementalLoader
from scholar_venues.normalizer import normalize_venue
from scholar_venues.sources.base import ContentSource, ContentSourceError, Record

logger = logging.getLogger(__name__)

ANALYZE_ACTION = "analyzeVenues"

IN_PROGRESS_MESSAGE = "Analysis already in progress - please wait"
WRONG_PAGE_MESSAGE = (
    "This page doesn't appear to be a Google Scholar profile with publications. "
    "Please navigate to a profile page like: scholar.google.com/citations?user=..."
)
NO_PUBLICATIONS_MESSAGE = (
    "No publications found on this page. Make sure you are on the 'ARTICLES' tab "
    "of a Google Scholar profile page with publications."
)
NO_VENUES_MESSAGE = (
    "No venues could be extracted from the publications. "
    "Please check if you're on the ARTICLES tab of a Scholar profile."
)


class VenueAnalysisError(Exception):
    """Base class for analysis failures reported to the caller."""


class PreconditionError(VenueAnalysisError):
    """Wrong kind of page, or no publications visible before loading."""


class ReentrancyError(VenueAnalysisError):
    """Another analysis is still running."""


class EmptyResultError(VenueAnalysisError):
    """Loading and extraction finished but no venue could be classified."""


class VenueCount(BaseModel):
    """Number of publications at one canonical venue."""

    venue: str
    count: int = Field(..., gt=0)


class AnalysisResult(BaseModel):
    """Venue counts for one profile, most frequent venue first."""

    venues: List[VenueCount] = Field(
        default_factory=list,
        description="Venues by count descending; ties keep first-seen order",
    )
    total_found: int = Field(..., description="Publications visible after loading")
    total_processed: int = Field(..., description="Publications with a classified venue")
    total_skipped: int = Field(..., description="Publications without a usable venue")
    success: bool = True

    def to_response(self) -> dict:
        """Response dictionary in the message channel's camelCase format."""
        return {
            "success": self.success,
            "venues": [venue.model_dump() for venue in self.venues],
            "totalFound": self.total_found,
            "totalProcessed": self.total_processed,
            "totalSkipped": self.total_skipped,
        }


class _RunGuard:
    """
    Process-wide "analysis in progress" flag.

    Each acquire hands out a token; release only clears the flag for the
    run holding the current token, so a run that outlived a page teardown
    cannot clear the flag of the run that started after it.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._token = 0
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def acquire(self) -> Optional[int]:
        with self._lock:
            if self._running:
                return None
            self._running = True
            self._token += 1
            return self._token

    def release(self, token: int) -> None:
        with self._lock:
            if token == self._token:
                self._running = False

    def reset(self) -> None:
        with self._lock:
            self._token += 1
            self._running = False


_run_guard = _RunGuard()


class AnalysisOrchestrator:
    """
    Runs one venue analysis: validate, load everything, extract, aggregate.

    Only one analysis may run per process at a time; see is_running and
    on_page_teardown.
    """

    def __init__(
        self,
        loader: Optional[IncrementalLoader] = None,
        normalizer: Callable[[Optional[str]], Optional[str]] = normalize_venue,
        extractor_factory: Callable[[ContentSource], RecordExtractor] = RecordExtractor,
    ):
        self.loader = loader or IncrementalLoader()
        self.normalizer = normalizer
        self.extractor_factory = extractor_factory

    @staticmethod
    def is_running() -> bool:
        """Whether an analysis is currently in progress."""
        return _run_guard.running

    @staticmethod
    def on_page_teardown() -> None:
        """Clear the in-progress flag when the analysed page goes away."""
        logger.info("Page unloading - clearing analysis state")
        _run_guard.reset()

    def run(self, source: ContentSource) -> AnalysisResult:
        """
        Analyse every publication venue on the source.

        Args:
            source: Profile listing to analyse

        Returns:
            AnalysisResult with venues sorted by count

        Raises:
            ReentrancyError: another analysis is running
            PreconditionError: not a profile listing, or no publications
            EmptyResultError: no venue could be classified
        """
        token = _run_guard.acquire()
        if token is None:
            logger.warning("Analysis already in progress - rejecting request")
            raise ReentrancyError(IN_PROGRESS_MESSAGE)

        try:
            return self._analyze(source)
        finally:
            _run_guard.release(token)

    def _analyze(self, source: ContentSource) -> AnalysisResult:
        started = time.perf_counter()

        if not source.is_listing_view():
            raise PreconditionError(WRONG_PAGE_MESSAGE)

        initial_count = source.count_visible_records()
        logger.info(f"Initial publications visible: {initial_count}")
        if initial_count == 0:
            raise PreconditionError(NO_PUBLICATIONS_MESSAGE)

        loaded_count = self.loader.load_all(source)
        if loaded_count == initial_count:
            logger.info(
                "No additional publications loaded - either all were already"
                " visible or no show more control was found"
            )
        else:
            logger.info(f"Loaded {loaded_count - initial_count} additional publications")

        records = source.iter_records()
        if len(records) != loaded_count:
            logger.warning(
                f"Count mismatch detected: expected {loaded_count}, found {len(records)}"
            )

        venues, processed, skipped = self.extract_venues(source, records)
        if not venues:
            raise EmptyResultError(NO_VENUES_MESSAGE)

        result = AnalysisResult(
            venues=[VenueCount(venue=v, count=c) for v, c in venues.most_common()],
            total_found=len(records),
            total_processed=processed,
            total_skipped=skipped,
            success=True,
        )

        logger.info(
            f"Found {len(result.venues)} unique venues from {result.total_found}"
            f" publications in {time.perf_counter() - started:.2f}s"
        )
        return result

    def extract_venues(
        self, source: ContentSource, records: List[Record]
    ) -> Tuple[Counter, int, int]:
        """
        Classify the venue of every record.

        Returns:
            Tuple of (venue counts, processed count, skipped count)
        """
        extractor = self.extractor_factory(source)
        venues: Counter = Counter()
        processed = 0
        skipped = 0

        for index, record in enumerate(records):
            try:
                raw = extractor.extract_raw(record)
            except ContentSourceError as e:
                logger.warning(f"Could not read venue of publication {index + 1}: {e}")
                raw = None

            venue = self.normalizer(raw) if raw else None

            if venue:
                venues[venue] += 1
                processed += 1
            else:
                skipped += 1

        logger.info(
            f"Extraction complete: {processed} processed, {skipped} skipped,"
            f" {len(venues)} unique"
        )
        return venues, processed, skipped


def handle_message(
    request: dict,
    source: ContentSource,
    orchestrator: Optional[AnalysisOrchestrator] = None,
) -> dict:
    """
    Answer one request from the message channel.

    Every request gets a response dictionary; failures carry a
    human-readable ``error``.

    Args:
        request: Message such as ``{"action": "analyzeVenues"}``
        source: Page the analysis should run on
        orchestrator: Optional preconfigured orchestrator

    Returns:
        Success or failure response dictionary
    """
    action = (request or {}).get("action")
    if action != ANALYZE_ACTION:
        return {"success": False, "error": f"Unknown action: {action}"}

    orchestrator = orchestrator or AnalysisOrchestrator()

    try:
        return orchestrator.run(source).to_response()
    except ReentrancyError as e:
        # In-flight rejections carry no success flag
        return {"error": str(e)}
    except VenueAnalysisError as e:
        logger.error(f"Analysis failed: {e}")
        return {"success": False, "error": str(e)}
    except Exception as e:
        logger.exception("Unexpected error during venue analysis")
        return {"success": False, "error": f"Unexpected error: {e}"}
