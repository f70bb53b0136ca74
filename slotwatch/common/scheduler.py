"""
Inter-cycle pacing for the appointment watcher

Decides how long to wait between poll cycles and how many cycles may run.
"""
import logging

logger = logging.getLogger(__name__)


class AdaptiveScheduler:
    """
    Picks the delay before the next poll cycle.

    Polls faster once any facility has shown a date, backs off while
    everything looks fully booked.
    """

    def __init__(self, active_ms: int = 30_000, idle_ms: int = 120_000):
        self.active_ms = active_ms
        self.idle_ms = idle_ms

    def next_delay(self, any_found: bool) -> int:
        """Delay in milliseconds for the next cycle"""
        delay = self.active_ms if any_found else self.idle_ms
        logger.debug(f"Next delay {delay}ms (availability found: {any_found})")
        return delay


class RetryBudget:
    """
    Bounds the total number of poll cycles.
    """

    def __init__(self, max_tries: int = 250):
        self.max_tries = max_tries
        self.remaining = max(0, max_tries)

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0

    def consume(self) -> bool:
        """Spend one cycle; False once nothing is left"""
        if self.exhausted:
            return False
        self.remaining -= 1
        return True
