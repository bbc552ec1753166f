"""Per-attempt progress tracking.

The scheduler reports every finished attempt to ``ProgressTracker.advance``.
The tracker counts ticks, forwards each outcome to an optional observer and
logs a line each time another tenth of the expected ticks completes.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from warpscan.models.endpoint import AttemptOutcome

logger = logging.getLogger(__name__)

ProgressObserver = Callable[[AttemptOutcome], None]


class ProgressTracker:
    """Thread-safe attempt counter with an optional observer.

    Parameters
    ----------
    total:
        Expected number of ticks (candidates x attempts per candidate).
    observer:
        Called with each attempt outcome after the counter is updated.
    """

    def __init__(self, total: int, observer: ProgressObserver | None = None) -> None:
        self._total = total
        self._observer = observer
        self._completed = 0
        self._last_decile = 0
        self._lock = threading.Lock()

    @property
    def total(self) -> int:
        return self._total

    @property
    def completed(self) -> int:
        return self._completed

    def advance(self, outcome: AttemptOutcome) -> None:
        """Record one finished attempt."""
        with self._lock:
            self._completed += 1
            completed = self._completed
            decile = completed * 10 // self._total if self._total > 0 else 10
            crossed = decile > self._last_decile
            if crossed:
                self._last_decile = decile

        if crossed:
            logger.info(
                "Progress %d/%d attempts (%d%%)",
                completed,
                self._total,
                decile * 10,
            )

        if self._observer is not None:
            self._observer(outcome)
