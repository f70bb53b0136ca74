"""
Per-facility availability scanning
"""
import asyncio
import logging
from typing import Awaitable, Callable
from playwright.async_api import Page, Error as PlaywrightError

from .session import Session
from .urls import SitePages
from ..common.models import ScanResult, ScanStatus, parse_schedule_body

logger = logging.getLogger(__name__)

JSON_HEADERS = {
    "Accept": "application/json, text/javascript, */*; q=0.01",
    "X-Requested-With": "XMLHttpRequest",
}


class AvailabilityScanner:
    """
    Fetches the appointment days feed of a facility and reports what it offers.

    Never raises for a single facility: network trouble becomes FETCH_FAILED
    and an unauthenticated body becomes UNAUTHENTICATED (or MALFORMED) after
    invalidating the session.
    """

    def __init__(
        self,
        pages: SitePages,
        session: Session,
        pause_ms: int = 3_000,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.pages = pages
        self.session = session
        self.pause_ms = pause_ms
        self.sleep = sleep

    async def scan(self, page: Page, facility_id: int) -> ScanResult:
        logger.info(f"Checking for schedules at facility {facility_id}")

        try:
            await page.set_extra_http_headers(JSON_HEADERS)
            await page.goto(self.pages.appointment_days(facility_id))
            body = await page.inner_text("body")
        except PlaywrightError as e:
            logger.warning(f"Fetching schedule for facility {facility_id} failed: {e}")
            return ScanResult(
                facility_id=facility_id,
                status=ScanStatus.FETCH_FAILED,
                error=str(e),
            )

        parsed = parse_schedule_body(body)
        result = ScanResult(
            facility_id=facility_id,
            status=parsed.status,
            dates=parsed.dates,
            error=parsed.detail,
        )

        if result.requires_login:
            logger.warning(
                f"Unable to parse schedule for facility {facility_id} ({parsed.detail}), "
                f"probably not logged in"
            )
            logger.debug(f"Response body: {body[:500]}")
            self.session.invalidate()
            return result

        if result.earliest:
            logger.info(f"Facility {facility_id}: earliest date {result.earliest.isoformat()}")
        else:
            logger.info(f"Facility {facility_id}: no dates offered")

        # Don't hammer the endpoint
        await self.sleep(self.pause_ms / 1000)
        return result
