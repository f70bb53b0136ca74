"""
Tests for facility scanning (slotwatch/browser/scanner.py)
"""
import json
import pytest
from datetime import date
from unittest.mock import AsyncMock, MagicMock

from playwright.async_api import Error as PlaywrightError

from slotwatch.browser.scanner import AvailabilityScanner, JSON_HEADERS
from slotwatch.browser.urls import SitePages
from slotwatch.common.models import ScanStatus


@pytest.fixture()
def session():
    return MagicMock()


@pytest.fixture()
def sleep():
    return AsyncMock()


@pytest.fixture()
def scanner(session, sleep):
    return AvailabilityScanner(SitePages("en-ca", "123456"), session, pause_ms=3_000, sleep=sleep)


class TestAvailabilityScanner:
    @pytest.mark.asyncio
    async def test_requests_json_feed(self, scanner, make_page):
        page = make_page("[]")

        await scanner.scan(page, 94)

        page.set_extra_http_headers.assert_called_once_with(JSON_HEADERS)
        page.goto.assert_called_once_with(
            "https://ais.usvisa-info.com/en-ca/niv/schedule/123456"
            "/appointment/days/94.json?appointments%5Bexpedite%5D=false"
        )
        assert JSON_HEADERS["X-Requested-With"] == "XMLHttpRequest"

    @pytest.mark.asyncio
    async def test_returns_earliest_date(self, scanner, session, sleep, make_page):
        body = json.dumps([
            {"date": "2024-09-10", "business_day": True},
            {"date": "2024-05-20", "business_day": True},
            {"date": "2024-07-01", "business_day": True},
        ])

        result = await scanner.scan(make_page(body), 94)

        assert result.status == ScanStatus.SLOTS
        assert result.earliest == date(2024, 5, 20)
        assert result.slot.facility_id == 94
        session.invalidate.assert_not_called()
        sleep.assert_called_once_with(3.0)

    @pytest.mark.asyncio
    async def test_empty_feed(self, scanner, session, sleep, make_page):
        result = await scanner.scan(make_page("[]"), 94)

        assert result.status == ScanStatus.EMPTY
        assert result.slot is None
        session.invalidate.assert_not_called()
        sleep.assert_called_once()

    @pytest.mark.asyncio
    async def test_login_page_invalidates_session(self, scanner, session, sleep, make_page):
        result = await scanner.scan(make_page("Sign In\nEmail\nPassword"), 94)

        assert result.status == ScanStatus.UNAUTHENTICATED
        assert result.slot is None
        session.invalidate.assert_called_once()
        sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_malformed_records_invalidate_session(self, scanner, session, make_page):
        result = await scanner.scan(make_page('[{"when": "tomorrow"}]'), 94)

        assert result.status == ScanStatus.MALFORMED
        session.invalidate.assert_called_once()

    @pytest.mark.asyncio
    async def test_network_failure_is_not_fatal(self, scanner, session, sleep, make_page):
        page = make_page()
        page.goto = AsyncMock(side_effect=PlaywrightError("net::ERR_CONNECTION_RESET"))

        result = await scanner.scan(page, 94)

        assert result.status == ScanStatus.FETCH_FAILED
        assert "ERR_CONNECTION_RESET" in result.error
        assert result.slot is None
        session.invalidate.assert_not_called()
        sleep.assert_not_called()
