"""
Highlight Retry Loop
=====================

The rendering surface lays pages out asynchronously, so the fragments of
the target page may be missing or incomplete when a citation is first
highlighted. A HighlightTask retries the SpanLocator against a fragment
provider with a fixed delay and a bounded number of attempts, then gives
up silently.

One task serves one citation highlight:
    - its loop never overlaps itself (a second concurrent `run` is refused)
    - `cancel()` ends it at the next wait, e.g. when the user navigates away

Usage:
    task = HighlightTask(citation.source_text, lambda: viewer.fragments(page))
    match = task.run()          # SpanMatch or None
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Sequence

from citetrail.config import CiteTrailConfig
from citetrail.locate.span_locator import FragmentLike, SpanLocator
from citetrail.schemas.match import SpanMatch
from citetrail.utils import preview

logger = logging.getLogger("citetrail.locate.retry")

FragmentProvider = Callable[[], Optional[Sequence[FragmentLike]]]


class HighlightTask:
    """
    Bounded, cancellable retry of a span lookup for one citation.

    Args:
        source_text: The citation's source text.
        fetch_fragments: Returns the page's current fragments in reading
            order, or None / an empty sequence while the page is not laid out.
        locator: SpanLocator to use (default settings if omitted).
        max_attempts: Lookups before giving up.
        retry_delay_s: Fixed delay between lookups.
        initial_delay_s: Delay before the first lookup.
    """

    def __init__(
        self,
        source_text: str,
        fetch_fragments: FragmentProvider,
        locator: Optional[SpanLocator] = None,
        max_attempts: int = 10,
        retry_delay_s: float = 0.2,
        initial_delay_s: float = 0.0,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.source_text = source_text
        self.fetch_fragments = fetch_fragments
        self.locator = locator or SpanLocator()
        self.max_attempts = max_attempts
        self.retry_delay_s = retry_delay_s
        self.initial_delay_s = initial_delay_s

        self.attempts = 0
        self._cancelled = threading.Event()
        self._in_flight = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: CiteTrailConfig,
        source_text: str,
        fetch_fragments: FragmentProvider,
    ) -> "HighlightTask":
        """Create a HighlightTask from CiteTrail config."""
        return cls(
            source_text=source_text,
            fetch_fragments=fetch_fragments,
            locator=SpanLocator.from_config(config),
            max_attempts=config.highlight.max_attempts,
            retry_delay_s=config.highlight.retry_delay_s,
            initial_delay_s=config.highlight.initial_delay_s,
        )

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop the loop; a pending wait returns immediately."""
        self._cancelled.set()

    def run(self) -> Optional[SpanMatch]:
        """
        Look the citation up until it is found, the budget is spent, or
        the task is cancelled. Each run starts with a fresh attempt budget;
        a cancelled task stays cancelled.

        Returns:
            SpanMatch, or None on give-up, cancellation, or if this task's
            loop is already running on another thread.
        """
        if not self._in_flight.acquire(blocking=False):
            logger.debug("Highlight already in flight for this citation; not starting another")
            return None

        try:
            self.attempts = 0
            if self.initial_delay_s and self._cancelled.wait(self.initial_delay_s):
                return None

            while self.attempts < self.max_attempts:
                if self._cancelled.is_set():
                    return None

                self.attempts += 1
                fragments = self.fetch_fragments()
                if fragments:
                    match = self.locator.locate(self.source_text, fragments)
                    if match is not None:
                        return match

                if self.attempts < self.max_attempts and self._cancelled.wait(self.retry_delay_s):
                    return None

            logger.debug(
                f"Gave up highlighting '{preview(self.source_text)}' "
                f"after {self.attempts} attempts"
            )
            return None
        finally:
            self._in_flight.release()
