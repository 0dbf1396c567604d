# Path: core/recognition/progress.py
# Purpose: Aggregate stage and task progress into one monotonically increasing percentage.
# Layer: core/recognition.
# Details: Updates may arrive out of order from worker threads; would-be decreases are dropped.

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

ProgressListener = Callable[[int], None]

# Stage name -> (start, end) percentage.
STAGES: Dict[str, Tuple[int, int]] = {
    "variants": (0, 15),
    "regions": (15, 25),
    "full_image": (25, 65),
    "region_text": (65, 90),
    "aggregate": (90, 100),
}


class ProgressTracker:
    """Map per-stage fractions onto a weighted 0..100 schedule."""

    def __init__(
        self,
        listener: Optional[ProgressListener] = None,
        stages: Mapping[str, Tuple[int, int]] = STAGES,
    ) -> None:
        self._listener = listener
        self._stages = dict(stages)
        self._value = -1
        self._history: List[int] = []
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return max(self._value, 0)

    @property
    def history(self) -> List[int]:
        with self._lock:
            return list(self._history)

    def report(self, percent: float) -> int:
        """Publish ``percent`` unless it would move the reported value backwards."""

        value = int(round(min(100.0, max(0.0, percent))))
        with self._lock:
            if value <= self._value:
                return self._value
            self._value = value
            self._history.append(value)
            # Notify under the lock so listeners observe the same order.
            if self._listener is not None:
                try:
                    self._listener(value)
                except Exception as exc:  # noqa: BLE001 - a broken listener must not fail recognition
                    logger.warning("Progress listener raised: %s", exc)
        return value

    def advance(self, stage: str, fraction: float) -> int:
        start, end = self._stages[stage]
        fraction = min(1.0, max(0.0, fraction))
        return self.report(start + (end - start) * fraction)

    def stage_callback(self, stage: str) -> Callable[[float], None]:
        return lambda fraction: self.advance(stage, fraction)

    def complete(self) -> int:
        return self.report(100)


__all__ = ["ProgressListener", "ProgressTracker", "STAGES"]
