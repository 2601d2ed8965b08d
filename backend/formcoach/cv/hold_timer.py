"""Accrual clock for isometric holds (plank)."""

from dataclasses import dataclass
from typing import Optional

import logging

logger = logging.getLogger(__name__)


@dataclass
class HoldTimerState:
    accumulated_ms: float = 0.0
    running: bool = False
    segment_started_at: Optional[float] = None


class HoldTimer:
    """
    Counts time spent in correct posture.

    Time accrues only while running. Any incorrect, unreadable or missing
    frame closes the open segment and folds it into accumulated_ms; the
    next correct frame opens a new segment.
    """

    def __init__(self):
        self.state = HoldTimerState()

    @property
    def running(self) -> bool:
        return self.state.running

    def tick(self, is_correct: bool, now_ms: float) -> Optional[int]:
        """
        Advance the timer by one frame.

        Returns:
            Elapsed whole seconds to report, or None when nothing changed
            (an incorrect frame while already paused).
        """
        if is_correct:
            if not self.state.running:
                self.state.running = True
                self.state.segment_started_at = now_ms
                logger.debug(f"Hold segment started at {now_ms:.0f}ms")
            return self.elapsed_seconds(now_ms)

        if self.state.running:
            return self.pause(now_ms)
        return None

    def pause(self, now_ms: float) -> Optional[int]:
        """Close the open segment. Returns elapsed seconds, or None if not running."""
        if not self.state.running:
            return None

        segment = max(0.0, now_ms - self.state.segment_started_at)
        self.state.accumulated_ms += segment
        self.state.running = False
        self.state.segment_started_at = None
        logger.debug(f"Hold paused after {segment:.0f}ms, total {self.state.accumulated_ms:.0f}ms")
        return self.elapsed_seconds(now_ms)

    def elapsed_ms(self, now_ms: float) -> float:
        total = self.state.accumulated_ms
        if self.state.running:
            total += max(0.0, now_ms - self.state.segment_started_at)
        return total

    def elapsed_seconds(self, now_ms: float) -> int:
        return int(self.elapsed_ms(now_ms) // 1000)

    def reset(self):
        self.state = HoldTimerState()
