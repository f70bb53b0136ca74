"""
Visa Appointment Slot Watcher

Polls the appointment-days feed of every facility in a configured range
through a logged-in browser session and alerts when a date earlier than
the configured threshold shows up.

1. Browser collaborators (slotwatch.browser)
   - Playwright drives the sign-in form and fetches the JSON feed
   - Session expiry is detected from the response body and repaired
     on the next cycle

2. Common (slotwatch.common)
   - Configuration, models, notifications, pacing
"""
from .common.config import Config, load_config

__version__ = "1.0.0"

__all__ = [
    "Config",
    "load_config",
]
