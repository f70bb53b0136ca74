"""
Login state for the appointment site

The site expires sessions silently; the scanner calls ``invalidate`` when a
response no longer looks authenticated and the next cycle logs in again.
"""
import logging
from datetime import datetime
from typing import Optional
from playwright.async_api import Page, Error as PlaywrightError

from .urls import SitePages
from ..common.config import CredentialsConfig
from ..common.models import SessionStatus

logger = logging.getLogger(__name__)

SIGN_IN_FORM = "form#sign_in_form"
EMAIL_INPUT = 'input[name="user[email]"]'
PASSWORD_INPUT = 'input[name="user[password]"]'
POLICY_CHECKBOX = 'input[name="policy_confirmed"]'
SUBMIT_BUTTON = 'input[name="commit"]'


class LoginError(Exception):
    """Raised when the sign-in flow cannot be completed"""
    pass


class Session:
    """
    Tracks whether the browser context is authenticated.
    """

    def __init__(self, credentials: CredentialsConfig, pages: SitePages):
        self.credentials = credentials
        self.pages = pages
        self.status = SessionStatus.LOGGED_OUT
        self.login_count = 0
        self.last_login: Optional[datetime] = None

    @property
    def logged_in(self) -> bool:
        return self.status == SessionStatus.LOGGED_IN

    async def ensure_logged_in(self, page: Page):
        """Log in unless already logged in"""
        if self.logged_in:
            return

        if self.last_login is not None:
            logger.info(
                f"Re-authenticating (login #{self.login_count + 1}, "
                f"previous at {self.last_login:%H:%M:%S})"
            )

        await self._login(page)
        self.status = SessionStatus.LOGGED_IN
        self.login_count += 1
        self.last_login = datetime.now()
        logger.info("Login successful")

    def invalidate(self):
        """Forget the current login"""
        if self.logged_in:
            logger.info("Session marked as logged out")
        self.status = SessionStatus.LOGGED_OUT

    async def _login(self, page: Page):
        logger.info(f"Logging in as {self.credentials.email}...")

        try:
            await page.goto(self.pages.login())

            form = await page.query_selector(SIGN_IN_FORM)
            if form is None:
                raise LoginError(f"Sign-in form not found at {self.pages.login()}")

            fields = {}
            for name, selector in (
                ("email", EMAIL_INPUT),
                ("password", PASSWORD_INPUT),
                ("policy", POLICY_CHECKBOX),
                ("submit", SUBMIT_BUTTON),
            ):
                fields[name] = await form.query_selector(selector)

            missing = [name for name, element in fields.items() if element is None]
            if missing:
                raise LoginError(f"Sign-in form is missing fields: {', '.join(missing)}")

            await fields["email"].type(self.credentials.email)
            await fields["password"].type(self.credentials.password)
            await fields["policy"].click()

            async with page.expect_navigation():
                await fields["submit"].click()

        except PlaywrightError as e:
            raise LoginError(f"Login failed: {e}") from e
