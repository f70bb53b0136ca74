"""
Configuration management for the appointment watcher
"""
import os
import yaml
from pathlib import Path
from datetime import date
from typing import Optional, List
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator
from dateutil import parser as date_parser

from .models import FacilityRange, NotificationThreshold


class CredentialsConfig(BaseModel):
    email: str
    password: str


class SiteConfig(BaseModel):
    base_url: str = "https://ais.usvisa-info.com"
    country_code: str
    schedule_id: str
    first_facility_id: int
    last_facility_id: int

    @model_validator(mode="after")
    def check_facility_order(self) -> "SiteConfig":
        if self.first_facility_id > self.last_facility_id:
            raise ValueError(
                f"first_facility_id ({self.first_facility_id}) must not exceed "
                f"last_facility_id ({self.last_facility_id})"
            )
        return self

    @property
    def facility_range(self) -> FacilityRange:
        return FacilityRange(first_id=self.first_facility_id, last_id=self.last_facility_id)


class PollingConfig(BaseModel):
    max_tries: int = Field(default=250, ge=0)
    notify_on_date_before: str
    initial_delay_ms: int = Field(default=30_000, gt=0)
    idle_delay_ms: int = Field(default=120_000, gt=0)
    active_delay_ms: int = Field(default=30_000, gt=0)
    facility_pause_ms: int = Field(default=3_000, ge=0)

    @field_validator("notify_on_date_before")
    @classmethod
    def check_threshold_date(cls, value: str) -> str:
        try:
            date_parser.parse(value)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"notify_on_date_before is not a date: {value!r}") from e
        return value

    @property
    def threshold_date(self) -> date:
        return date_parser.parse(self.notify_on_date_before).date()

    @property
    def threshold(self) -> NotificationThreshold:
        return NotificationThreshold(before=self.threshold_date)


class EmailConfig(BaseModel):
    enabled: bool = False
    api_key: Optional[str] = None
    domain: Optional[str] = None
    addresses: List[str] = Field(default_factory=list)
    from_address: str = "No reply <noreply@visa-schedule-check>"


class WebhookConfig(BaseModel):
    enabled: bool = False
    url: Optional[str] = None


class NotificationsConfig(BaseModel):
    email: EmailConfig = Field(default_factory=EmailConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)


class BrowserConfig(BaseModel):
    headless: bool = True
    slow_mo: int = 0
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    navigation_timeout_ms: int = 30_000


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[str] = None


class Config(BaseModel):
    """Main configuration class"""
    credentials: CredentialsConfig
    site: SiteConfig
    polling: PollingConfig
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file"""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls(**data)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables"""
        env = os.environ

        def _optional(name: str, default: int):
            # Left as strings so pydantic reports bad values per field
            return env.get(name) or default

        addresses = [a.strip() for a in env.get("NOTIFY_EMAILS", "").split(",") if a.strip()]
        webhook_url = env.get("WEBHOOK_URL")

        return cls(
            credentials=CredentialsConfig(
                email=env["EMAIL"],
                password=env["PASSWORD"]
            ),
            site=SiteConfig(
                base_url=env.get("SITE_BASE_URL", "https://ais.usvisa-info.com"),
                country_code=env["COUNTRY_CODE"],
                schedule_id=env["SCHEDULE_ID"],
                first_facility_id=env["FIRST_FACILITY_ID"],
                last_facility_id=env["LAST_FACILITY_ID"],
            ),
            polling=PollingConfig(
                max_tries=_optional("MAX_NUMBER_OF_POLL", 250),
                notify_on_date_before=env["NOTIFY_ON_DATE_BEFORE"],
                initial_delay_ms=_optional("NEXT_SCHEDULE_POLL", 30_000),
                idle_delay_ms=_optional("IDLE_SCHEDULE_POLL", 120_000),
                active_delay_ms=_optional("ACTIVE_SCHEDULE_POLL", 30_000),
            ),
            notifications=NotificationsConfig(
                email=EmailConfig(
                    enabled=bool(addresses and env.get("MAILGUN_API_KEY")),
                    api_key=env.get("MAILGUN_API_KEY"),
                    domain=env.get("MAILGUN_DOMAIN"),
                    addresses=addresses,
                ),
                webhook=WebhookConfig(enabled=bool(webhook_url), url=webhook_url),
            ),
            browser=BrowserConfig(
                headless=env.get("IS_PROD", "false").lower() in ("1", "true", "yes"),
            ),
        )

    def to_yaml(self, path: str | Path):
        """Save configuration to YAML file"""
        path = Path(path)
        with open(path, 'w') as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from file or environment"""
    if path:
        return Config.from_yaml(path)

    # Try default locations
    default_paths = [
        Path("config/config.yaml"),
        Path("config.yaml"),
        Path.home() / ".slotwatch" / "config.yaml",
    ]

    for p in default_paths:
        if p.exists():
            return Config.from_yaml(p)

    # Fall back to environment variables, seeded from .env when present
    load_dotenv(find_dotenv(usecwd=True), override=False)
    try:
        return Config.from_env()
    except KeyError as e:
        raise RuntimeError(
            f"No config file found and missing environment variable: {e}. "
            f"Create config/config.yaml or set the variables in .env."
        )
