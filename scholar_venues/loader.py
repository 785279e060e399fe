"""
Grow a publication listing until it stops growing.

Scholar shows the first batch of a profile's publications and reveals the
rest through a "Show more" button. The loader keeps pressing it and waits
for the row count to rise, stopping when the button disappears, a press
produces nothing within the timeout, or the attempt budget runs out.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from config.settings import settings
from scholar_venues.sources.base import ContentSource

logger = logging.getLogger(__name__)

FAST_POLL_INTERVAL = 0.05
MEDIUM_POLL_INTERVAL = 0.2
SLOW_POLL_INTERVAL = 0.5
FAST_POLL_MISSES = 5
MEDIUM_POLL_MISSES = 15


class LoadState(Enum):
    IDLE = "idle"
    PROBING = "probing"
    WAITING = "waiting"
    DONE = "done"
    TIMED_OUT = "timed_out"


@dataclass
class LoadProgress:
    """State of one load_all call."""

    initial_count: int
    previous_count: int
    attempts_used: int = 0
    state: LoadState = LoadState.IDLE

    @property
    def done(self) -> bool:
        return self.state in (LoadState.DONE, LoadState.TIMED_OUT)

    @property
    def loaded(self) -> int:
        return self.previous_count - self.initial_count


def poll_interval(misses: int) -> float:
    """Delay before the next count check after ``misses`` checks without growth."""
    if misses < FAST_POLL_MISSES:
        return FAST_POLL_INTERVAL
    if misses < MEDIUM_POLL_MISSES:
        return MEDIUM_POLL_INTERVAL
    return SLOW_POLL_INTERVAL


class IncrementalLoader:
    """
    Drives a content source's reveal control until the listing is complete.

    Timing is injectable so tests can replace real sleeps with a fake clock.
    """

    def __init__(
        self,
        max_attempts: Optional[int] = None,
        per_attempt_timeout: Optional[float] = None,
        settle_delay: Optional[float] = None,
        final_settle_delay: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_attempts = settings.max_load_attempts if max_attempts is None else max_attempts
        self.per_attempt_timeout = (
            settings.per_attempt_timeout if per_attempt_timeout is None else per_attempt_timeout
        )
        self.settle_delay = settings.settle_delay if settle_delay is None else settle_delay
        self.final_settle_delay = (
            settings.final_settle_delay if final_settle_delay is None else final_settle_delay
        )
        self.clock = clock
        self.sleep = sleep
        self.progress: Optional[LoadProgress] = None

    def load_all(self, source: ContentSource) -> int:
        """
        Reveal every record the source can show.

        Running out of content is the normal way for this to end, never an
        error. Content-source failures stop loading early and the rows
        loaded so far are kept.

        Args:
            source: Listing to grow

        Returns:
            Number of records visible once loading has finished
        """
        count = self._read_count(source, fallback=0)
        progress = LoadProgress(initial_count=count, previous_count=count)
        self.progress = progress
        logger.info(f"Starting pagination with {count} publications")

        while progress.attempts_used < self.max_attempts:
            progress.state = LoadState.PROBING
            try:
                handle = source.find_reveal_affordance()
                if handle is None:
                    logger.info(
                        f"No show more control after {progress.attempts_used} attempts"
                        " - pagination complete"
                    )
                    progress.state = LoadState.DONE
                    break

                progress.attempts_used += 1
                logger.debug(f"Attempt {progress.attempts_used}: invoking show more control")
                source.invoke(handle)

                progress.state = LoadState.WAITING
                new_count = self.wait_for_growth(source, progress.previous_count)
            except Exception as e:
                logger.warning(f"Error during pagination, keeping loaded rows: {e}")
                progress.state = LoadState.DONE
                break

            if new_count <= progress.previous_count:
                logger.info("No new publications loaded - stopping pagination")
                progress.state = LoadState.TIMED_OUT
                break

            logger.info(
                f"Loaded {new_count - progress.previous_count} new publications"
                f" (total: {new_count})"
            )
            progress.previous_count = new_count
            self.sleep(self.settle_delay)
        else:
            logger.warning(f"Stopped pagination after {self.max_attempts} attempts")
            progress.state = LoadState.DONE

        # Let straggling updates land before the final count
        self.sleep(self.final_settle_delay)
        final_count = self._read_count(source, fallback=progress.previous_count)

        logger.info(
            f"Pagination complete. Final count: {final_count} publications"
            f" after {progress.attempts_used} attempts"
        )
        return final_count

    def _read_count(self, source: ContentSource, fallback: int) -> int:
        try:
            return source.count_visible_records()
        except Exception as e:
            logger.warning(f"Could not read publication count, using {fallback}: {e}")
            return fallback

    def wait_for_growth(self, source: ContentSource, previous_count: int) -> int:
        """
        Poll the record count until it rises above ``previous_count``.

        Checks start every 50 ms and slow to 200 ms, then 500 ms, the longer
        nothing changes. Gives up after ``per_attempt_timeout`` seconds.

        Returns:
            The grown count, or the unchanged count on timeout
        """
        started = self.clock()
        misses = 0

        while True:
            current = source.count_visible_records()
            if current > previous_count:
                return current

            if self.clock() - started > self.per_attempt_timeout:
                return current

            misses += 1
            self.sleep(poll_interval(misses))
