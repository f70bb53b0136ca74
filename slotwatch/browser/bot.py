"""
Browser-owning entry point for the appointment watcher

Starts Playwright, wires the session, scanner, notifications and poll loop
together from the configuration, and tears everything down afterwards.
"""
import logging
from typing import Optional

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
)

from .poller import PollLoop
from .scanner import AvailabilityScanner
from .session import Session
from .urls import SitePages
from ..common.config import Config
from ..common.models import PollCycle
from ..common.notifications import NotificationManager
from ..common.scheduler import AdaptiveScheduler, RetryBudget

logger = logging.getLogger(__name__)


class SlotWatchBot:
    """
    Watches the appointment site for dates earlier than the threshold.

    Use as an async context manager so the browser is always released:

        async with SlotWatchBot(config) as bot:
            await bot.run()
    """

    def __init__(self, config: Config):
        self.config = config
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None

        site = config.site
        polling = config.polling

        self.pages = SitePages(site.country_code, site.schedule_id, base_url=site.base_url)
        self.session = Session(config.credentials, self.pages)
        self.scanner = AvailabilityScanner(
            self.pages,
            self.session,
            pause_ms=polling.facility_pause_ms,
        )
        self.notifications = NotificationManager(config.notifications)
        self.poller = PollLoop(
            session=self.session,
            scanner=self.scanner,
            notifications=self.notifications,
            facilities=site.facility_range,
            threshold=polling.threshold,
            scheduler=AdaptiveScheduler(
                active_ms=polling.active_delay_ms,
                idle_ms=polling.idle_delay_ms,
            ),
            budget=RetryBudget(polling.max_tries),
            initial_delay_ms=polling.initial_delay_ms,
        )

    async def start(self):
        """Start the browser"""
        logger.info("Starting browser...")

        self.playwright = await async_playwright().start()

        try:
            self.browser = await self.playwright.chromium.launch(
                headless=self.config.browser.headless,
                slow_mo=self.config.browser.slow_mo,
            )

            self.context = await self.browser.new_context(
                user_agent=self.config.browser.user_agent,
                viewport={"width": 1920, "height": 1080},
                locale="en-US",
            )
            self.context.set_default_navigation_timeout(self.config.browser.navigation_timeout_ms)
        except Exception:
            # __aexit__ won't run when __aenter__ fails
            await self.stop()
            raise

        logger.info("Browser started")

    async def stop(self):
        """Stop the browser"""
        if self.context:
            await self.context.close()
        if self.browser:
            await self.browser.close()
        if self.playwright:
            await self.playwright.stop()
        await self.notifications.close()
        logger.info("Browser stopped")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, *args):
        await self.stop()

    async def new_page(self) -> Page:
        if self.context is None:
            raise RuntimeError("Browser is not started")
        return await self.context.new_page()

    async def run(self) -> PollCycle:
        """Poll until the retry budget is spent"""
        polling = self.config.polling
        logger.info(
            f"Watching facilities {self.config.site.first_facility_id}-"
            f"{self.config.site.last_facility_id} for dates before "
            f"{polling.threshold_date.isoformat()} ({polling.max_tries} cycles max)"
        )
        return await self.poller.run(self.new_page)

    async def check_once(self) -> PollCycle:
        """Run a single cycle without waiting afterwards"""
        page = await self.new_page()
        try:
            return await self.poller.run_cycle(page, self.poller.initial_state())
        finally:
            await page.close()
