from unittest.mock import AsyncMock, MagicMock

import pytest

from slotwatch.common.config import (
    Config,
    CredentialsConfig,
    SiteConfig,
    PollingConfig,
)


@pytest.fixture()
def config():
    return Config(
        credentials=CredentialsConfig(email="test@example.com", password="secret"),
        site=SiteConfig(
            country_code="en-ca",
            schedule_id="123456",
            first_facility_id=89,
            last_facility_id=95,
        ),
        polling=PollingConfig(
            max_tries=3,
            notify_on_date_before="2024-06-01",
            facility_pause_ms=0,
        ),
    )


@pytest.fixture()
def make_page():
    """Build a Playwright page double whose body text is ``body``"""
    def _make(body: str = "[]"):
        page = AsyncMock()
        page.inner_text = AsyncMock(return_value=body)
        page.expect_navigation = MagicMock()
        return page
    return _make
