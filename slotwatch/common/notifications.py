"""
Notification services for the appointment watcher
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List
import httpx

from .models import NotificationPayload, AppointmentSlot
from .config import NotificationsConfig

logger = logging.getLogger(__name__)

MAILGUN_API = "https://api.mailgun.net/v3"


class NotificationProvider(ABC):
    """Base class for notification providers"""

    @abstractmethod
    async def send(self, payload: NotificationPayload) -> bool:
        """Send notification, return True if successful"""
        pass

    async def close(self):
        pass


class MailgunEmailNotifier(NotificationProvider):
    """Mailgun email notifications"""

    def __init__(
        self,
        api_key: str,
        domain: str,
        to_addresses: List[str],
        from_address: str = "No reply <noreply@visa-schedule-check>"
    ):
        self.api_key = api_key
        self.domain = domain
        self.to_addresses = to_addresses
        self.from_address = from_address
        self.client = httpx.AsyncClient()

    async def send(self, payload: NotificationPayload) -> bool:
        try:
            response = await self.client.post(
                f"{MAILGUN_API}/{self.domain}/messages",
                auth=("api", self.api_key),
                data={
                    "from": self.from_address,
                    "to": self.to_addresses,
                    "subject": payload.title,
                    "text": payload.message,
                }
            )
            success = response.status_code == 200
            if not success:
                logger.error(f"Email send failed: {response.status_code} - {response.text}")
            return success
        except Exception as e:
            logger.error(f"Email send error: {e}")
            return False

    async def close(self):
        await self.client.aclose()


class WebhookNotifier(NotificationProvider):
    """Generic webhook notifications (Slack, Discord, etc.)"""

    def __init__(self, webhook_url: str):
        self.webhook_url = webhook_url
        self.client = httpx.AsyncClient()

    async def send(self, payload: NotificationPayload) -> bool:
        try:
            # Format for Slack-compatible webhooks
            response = await self.client.post(
                self.webhook_url,
                json={
                    "text": payload.title,
                    "blocks": [
                        {
                            "type": "header",
                            "text": {"type": "plain_text", "text": payload.title}
                        },
                        {
                            "type": "section",
                            "text": {"type": "mrkdwn", "text": payload.message}
                        },
                    ]
                }
            )
            return response.status_code == 200
        except Exception as e:
            logger.error(f"Webhook send error: {e}")
            return False

    async def close(self):
        await self.client.aclose()


class ConsoleNotifier(NotificationProvider):
    """Console output, always enabled"""

    async def send(self, payload: NotificationPayload) -> bool:
        print("\n" + "=" * 60)
        print(f"📢 {payload.title}")
        print("-" * 60)
        print(payload.message)
        print("=" * 60 + "\n")
        return True


class NotificationManager:
    """Manages multiple notification providers"""

    def __init__(self, config: NotificationsConfig):
        self.providers: list[NotificationProvider] = []

        # Always add console notifier
        self.providers.append(ConsoleNotifier())

        email = config.email
        if email.enabled and email.api_key and email.domain and email.addresses:
            self.providers.append(MailgunEmailNotifier(
                api_key=email.api_key,
                domain=email.domain,
                to_addresses=email.addresses,
                from_address=email.from_address
            ))
            logger.info("Email notifications enabled")
        elif email.enabled:
            logger.warning("Email notifications enabled but missing API key, domain or addresses")

        if config.webhook.enabled and config.webhook.url:
            self.providers.append(WebhookNotifier(config.webhook.url))
            logger.info("Webhook notifications enabled")
        elif config.webhook.enabled:
            logger.warning("Webhook notifications enabled but missing URL")

    async def notify_earlier_date(self, slot: AppointmentSlot) -> int:
        """Alert that a facility offers a date before the threshold"""
        formatted = slot.date.strftime("%d-%m-%Y")
        logger.info(f"Sending notification for {formatted} at facility {slot.facility_id}")
        return await self.send(
            subject=f"We found an earlier date {formatted} (facility {slot.facility_id})",
            body=f"Hurry and schedule for {formatted} before it is taken. (facility {slot.facility_id})",
        )

    async def send(self, subject: str, body: str) -> int:
        """Send through all providers, return how many succeeded"""
        payload = NotificationPayload(title=subject, message=body)
        results = await asyncio.gather(
            *[p.send(payload) for p in self.providers],
            return_exceptions=True
        )

        success_count = sum(1 for r in results if r is True)
        logger.info(f"Notifications sent: {success_count}/{len(self.providers)} successful")
        return success_count

    async def close(self):
        for provider in self.providers:
            await provider.close()
