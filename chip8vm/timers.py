"""
Delay and sound timers.

Both count down at 60Hz of wall-clock time, independent of how often
the interpreter runs. The host feeds elapsed time through ``tick()``;
once at least 1/60s has accumulated a single decrement step fires and
the accumulator restarts from zero (any excess is dropped, so a long
stall costs at most one step).

While the sound timer is non-zero every fired step raises the tone
signal, not just the step that reaches zero.
"""

import logging
from typing import Optional, Callable

from .constants import TIMER_INTERVAL

logger = logging.getLogger(__name__)


class Timers:
    """The two 8-bit countdown registers and their 60Hz gate"""

    def __init__(self, on_tone: Optional[Callable[[], None]] = None):
        self.on_tone = on_tone
        self.reset()

    def reset(self):
        self.delay = 0
        self.sound = 0
        self._accumulated = 0.0
        self.ticks = 0

    @property
    def sounding(self) -> bool:
        return self.sound > 0

    def tick(self, elapsed: float) -> bool:
        """Account for ``elapsed`` seconds; returns True if a step fired"""
        if elapsed > 0:
            self._accumulated += elapsed
        if self._accumulated < TIMER_INTERVAL:
            return False

        self._accumulated = 0.0
        self.ticks += 1

        if self.delay > 0:
            self.delay -= 1

        if self.sound > 0:
            logger.debug("tone (sound timer %d)", self.sound)
            if self.on_tone:
                self.on_tone()
            self.sound -= 1

        return True
