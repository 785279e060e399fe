"""In-memory content sources and a fake clock for driving the loader."""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from scholar_venues.sources.base import (
    AffordanceStrategy,
    ContentSource,
    ContentSourceError,
)

PROFILE_URL = "https://scholar.google.com/citations?user=x8xNLZQAAAAJ&hl=en"
SHOW_MORE = "show-more"


class FakeClock:
    """Monotonic clock whose sleep just advances time."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@dataclass
class FakeRecord:
    fragments: List[str] = field(default_factory=list)
    venue: Optional[str] = None


def record(venue: str, authors: str = "A Author, B Author") -> FakeRecord:
    """A row laid out like Scholar's: authors first, venue second."""
    return FakeRecord(fragments=[authors, venue])


class FakeSource(ContentSource):
    """
    Listing that reveals one pending batch per invoke.

    A revealed batch becomes visible after ``delay_reads`` further count
    reads. ``inert`` keeps the control present without ever growing;
    ``fail_on_invoke`` makes the n-th invoke (1-based) raise.
    """

    def __init__(
        self,
        records: Optional[List[FakeRecord]] = None,
        batches: Optional[List[List[FakeRecord]]] = None,
        url: Optional[str] = PROFILE_URL,
        delay_reads: int = 0,
        inert: bool = False,
        endless: bool = False,
        fail_on_invoke: Optional[int] = None,
    ):
        self.url = url
        self.records = list(records or [])
        self.batches = list(batches or [])
        self.delay_reads = delay_reads
        self.inert = inert
        self.endless = endless
        self.fail_on_invoke = fail_on_invoke
        self.invocations = 0
        self.count_reads = 0
        self.on_count: Optional[Callable[[], None]] = None
        self._arriving: Optional[List[FakeRecord]] = None
        self._reads_since_invoke = 0

    def count_visible_records(self) -> int:
        self.count_reads += 1
        if self.on_count:
            self.on_count()
        if self._arriving is not None:
            if self._reads_since_invoke >= self.delay_reads:
                self.records.extend(self._arriving)
                self._arriving = None
            self._reads_since_invoke += 1
        return len(self.records)

    def iter_records(self) -> List[FakeRecord]:
        return list(self.records)

    def affordance_candidates(self, strategy: AffordanceStrategy) -> List[str]:
        has_more = self.inert or self.endless or self.batches or self._arriving
        if strategy is AffordanceStrategy.STABLE_ID and has_more:
            return [SHOW_MORE]
        return []

    def is_affordance_actionable(self, handle: str) -> bool:
        return handle == SHOW_MORE

    def invoke(self, handle: str) -> None:
        self.invocations += 1
        if self.fail_on_invoke == self.invocations:
            raise ContentSourceError("connection reset")
        if self.inert:
            return
        if self.endless:
            self._arriving = [record("Endless Journal")]
        elif self.batches:
            self._arriving = self.batches.pop(0)
        self._reads_since_invoke = 0

    def secondary_fragments(self, record: FakeRecord) -> List[str]:
        return list(record.fragments)

    def venue_field(self, record: FakeRecord) -> Optional[str]:
        return record.venue
