"""
The poll loop: log in, scan every facility, alert, wait, repeat.

Each cycle runs through Idle -> LoggingIn -> Scanning -> Scheduling ->
Sleeping and back to Idle, until the retry budget is spent. All mutable
loop state lives in the ``PollCycle`` value handed from one step to the
next.
"""
import asyncio
import logging
from typing import Awaitable, Callable
from playwright.async_api import Page

from .scanner import AvailabilityScanner
from .session import Session
from ..common.models import FacilityRange, NotificationThreshold, PollCycle
from ..common.notifications import NotificationManager
from ..common.scheduler import AdaptiveScheduler, RetryBudget

logger = logging.getLogger(__name__)

PageFactory = Callable[[], Awaitable[Page]]


class PollLoop:
    """Drives repeated availability scans under one session"""

    def __init__(
        self,
        session: Session,
        scanner: AvailabilityScanner,
        notifications: NotificationManager,
        facilities: FacilityRange,
        threshold: NotificationThreshold,
        scheduler: AdaptiveScheduler,
        budget: RetryBudget,
        initial_delay_ms: int = 30_000,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.session = session
        self.scanner = scanner
        self.notifications = notifications
        self.facilities = facilities
        self.threshold = threshold
        self.scheduler = scheduler
        self.budget = budget
        self.initial_delay_ms = initial_delay_ms
        self.sleep = sleep

    def initial_state(self) -> PollCycle:
        return PollCycle(remaining_tries=self.budget.remaining, delay_ms=self.initial_delay_ms)

    async def run_cycle(self, page: Page, state: PollCycle) -> PollCycle:
        """
        One pass over every facility.

        Raises LoginError if the session cannot be re-established; scan
        problems for individual facilities never escape.
        """
        await self.session.ensure_logged_in(page)

        results = []
        notified = []
        for facility_id in self.facilities.ids():
            result = await self.scanner.scan(page, facility_id)
            results.append(result)

            slot = result.slot
            if slot is not None and self.threshold.is_beaten_by(slot.date):
                await self.notifications.notify_earlier_date(slot)
                notified.append(slot)

        any_found = any(r.slot is not None for r in results)
        delay_ms = self.scheduler.next_delay(any_found)

        state = state.model_copy(update={
            "any_found": any_found,
            "delay_ms": delay_ms,
            "results": results,
            "notified": notified,
        })

        found = [slot.facility_id for slot in state.slots]
        logger.info(
            f"Cycle {state.cycle} done: {len(found)}/{len(results)} facilities with dates "
            f"{found}, {len(notified)} alert(s), next delay {delay_ms / 1000:.0f}s"
        )
        return state

    async def run(self, new_page: PageFactory) -> PollCycle:
        """
        Poll until the budget runs out.

        A fresh page is opened for every cycle and closed when the cycle
        ends, whether it succeeded or not. Returns the last cycle state.
        """
        state = self.initial_state()

        while True:
            logger.info(f"Starting cycle with {self.budget.remaining} tries left")
            if not self.budget.consume():
                logger.info(f"Reached max tries ({self.budget.max_tries})")
                return state

            state = state.next_cycle(self.budget.remaining)
            page = await new_page()
            try:
                state = await self.run_cycle(page, state)
                await self.sleep(state.delay_ms / 1000)
            finally:
                await page.close()
