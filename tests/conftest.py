import pytest

from scholar_venues.analysis import AnalysisOrchestrator
from scholar_venues.loader import IncrementalLoader

from fakes import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def loader(clock: FakeClock) -> IncrementalLoader:
    return IncrementalLoader(
        max_attempts=200,
        per_attempt_timeout=10.0,
        settle_delay=0.3,
        final_settle_delay=0.5,
        clock=clock,
        sleep=clock.sleep,
    )


@pytest.fixture(autouse=True)
def clear_run_guard():
    AnalysisOrchestrator.on_page_teardown()
    yield
    AnalysisOrchestrator.on_page_teardown()
