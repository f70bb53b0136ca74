"""
Browser automation module (Playwright)
"""
from .bot import SlotWatchBot
from .poller import PollLoop
from .scanner import AvailabilityScanner
from .session import Session, LoginError
from .urls import SitePages

__all__ = [
    "SlotWatchBot",
    "PollLoop",
    "AvailabilityScanner",
    "Session",
    "LoginError",
    "SitePages",
]
