"""Tests for incremental loading of the publication listing."""

import pytest

from scholar_venues.loader import (
    IncrementalLoader,
    LoadState,
    poll_interval,
)
from scholar_venues.sources.base import AffordanceStrategy, ContentSourceError

from fakes import SHOW_MORE, FakeClock, FakeSource, record


def make_records(*venues: str):
    return [record(venue) for venue in venues]


class TestLoadAll:
    def test_loads_every_batch(self, loader: IncrementalLoader, clock: FakeClock) -> None:
        source = FakeSource(
            records=make_records("Nature"),
            batches=[make_records("Science"), make_records("Cell")],
        )

        assert loader.load_all(source) == 3
        assert source.invocations == 2
        assert loader.progress.attempts_used == 2
        assert loader.progress.state is LoadState.DONE
        assert loader.progress.loaded == 2
        # one settle per growth, then the final settle
        assert clock.sleeps == [0.3, 0.3, 0.5]

    def test_waits_for_delayed_batch(self, loader: IncrementalLoader, clock: FakeClock) -> None:
        source = FakeSource(
            records=make_records("Nature"),
            batches=[make_records("Science")],
            delay_reads=3,
        )

        assert loader.load_all(source) == 2
        assert clock.sleeps == [0.05, 0.05, 0.05, 0.3, 0.5]

    def test_no_reveal_control(self, loader: IncrementalLoader, clock: FakeClock) -> None:
        source = FakeSource(records=make_records("Nature", "Science"))

        assert loader.load_all(source) == 2
        assert source.invocations == 0
        assert loader.progress.attempts_used == 0
        assert loader.progress.state is LoadState.DONE
        assert clock.sleeps == [0.5]

    def test_inert_control_times_out_after_one_attempt(
        self, loader: IncrementalLoader, clock: FakeClock
    ) -> None:
        source = FakeSource(records=make_records("Nature"), inert=True)

        assert loader.load_all(source) == 1
        assert source.invocations == 1
        assert loader.progress.attempts_used == 1
        assert loader.progress.state is LoadState.TIMED_OUT
        # per-attempt timeout plus one slow poll, then the final settle
        assert 10.0 < clock.now < 11.5

    def test_attempt_budget_bounds_endless_listing(self, clock: FakeClock) -> None:
        loader = IncrementalLoader(
            max_attempts=3,
            per_attempt_timeout=10.0,
            settle_delay=0.3,
            final_settle_delay=0.5,
            clock=clock,
            sleep=clock.sleep,
        )
        source = FakeSource(records=make_records("Nature"), endless=True)

        assert loader.load_all(source) == 4
        assert source.invocations == 3
        assert loader.progress.attempts_used == 3
        assert loader.progress.state is LoadState.DONE

    def test_invoke_error_keeps_loaded_rows(self, loader: IncrementalLoader) -> None:
        source = FakeSource(
            records=make_records("Nature"),
            batches=[make_records("Science"), make_records("Cell")],
            fail_on_invoke=2,
        )

        assert loader.load_all(source) == 2
        assert loader.progress.attempts_used == 2
        assert loader.progress.state is LoadState.DONE
        assert loader.progress.done

    def test_unreadable_initial_count_does_not_fail(self, loader: IncrementalLoader) -> None:
        source = FakeSource(records=make_records("Nature"), batches=[make_records("Science")])
        failures = []

        def first_read_fails():
            if not failures:
                failures.append(True)
                raise ContentSourceError("page not ready")

        source.on_count = first_read_fails

        assert loader.load_all(source) == 2
        assert loader.progress.initial_count == 0
        assert loader.progress.attempts_used == 1


class TestWaitForGrowth:
    def test_returns_grown_count(self, loader: IncrementalLoader, clock: FakeClock) -> None:
        source = FakeSource(records=make_records("Nature"), batches=[make_records("Science")])
        source.invoke(SHOW_MORE)

        assert loader.wait_for_growth(source, previous_count=1) == 2
        assert clock.sleeps == []

    def test_backs_off_then_gives_up(self, loader: IncrementalLoader, clock: FakeClock) -> None:
        source = FakeSource(records=make_records("Nature"))

        assert loader.wait_for_growth(source, previous_count=1) == 1
        assert clock.sleeps == [0.05] * 4 + [0.2] * 10 + [0.5] * 16
        assert clock.now == pytest.approx(10.2)


@pytest.mark.parametrize(
    ("misses", "expected"),
    [(0, 0.05), (4, 0.05), (5, 0.2), (14, 0.2), (15, 0.5), (100, 0.5)],
)
def test_poll_interval(misses: int, expected: float) -> None:
    assert poll_interval(misses) == expected


class LayeredSource(FakeSource):
    """Offers a different candidate under each discovery strategy."""

    def __init__(self, candidates, actionable):
        super().__init__(records=make_records("Nature"))
        self.candidates = candidates
        self.actionable = actionable
        self.consulted = []

    def affordance_candidates(self, strategy: AffordanceStrategy):
        self.consulted.append(strategy)
        return self.candidates.get(strategy, [])

    def is_affordance_actionable(self, handle) -> bool:
        return handle in self.actionable


class TestFindRevealAffordance:
    def test_first_actionable_candidate_wins(self) -> None:
        source = LayeredSource(
            candidates={
                AffordanceStrategy.STABLE_ID: ["stale-button"],
                AffordanceStrategy.VISIBLE_TEXT: ["text-button"],
                AffordanceStrategy.INVOCATION_ATTRIBUTE: ["onclick-link"],
            },
            actionable={"text-button", "onclick-link"},
        )

        assert source.find_reveal_affordance() == "text-button"
        assert source.consulted == [
            AffordanceStrategy.STABLE_ID,
            AffordanceStrategy.VISIBLE_TEXT,
        ]

    def test_stable_id_preferred(self) -> None:
        source = LayeredSource(
            candidates={
                AffordanceStrategy.STABLE_ID: ["more-button"],
                AffordanceStrategy.VISIBLE_TEXT: ["text-button"],
            },
            actionable={"more-button", "text-button"},
        )

        assert source.find_reveal_affordance() == "more-button"

    def test_nothing_actionable(self) -> None:
        source = LayeredSource(
            candidates={AffordanceStrategy.INVOCATION_ATTRIBUTE: ["title-link"]},
            actionable=set(),
        )

        assert source.find_reveal_affordance() is None
        assert len(source.consulted) == 3
