"""
Common utilities for the appointment watcher
"""
from .config import Config, load_config
from .models import (
    SessionStatus,
    ScanStatus,
    FacilityRange,
    NotificationThreshold,
    AppointmentSlot,
    ParsedSchedule,
    ScanResult,
    PollCycle,
    NotificationPayload,
    parse_schedule_body,
)
from .notifications import NotificationManager
from .scheduler import AdaptiveScheduler, RetryBudget

__all__ = [
    "Config",
    "load_config",
    "SessionStatus",
    "ScanStatus",
    "FacilityRange",
    "NotificationThreshold",
    "AppointmentSlot",
    "ParsedSchedule",
    "ScanResult",
    "PollCycle",
    "NotificationPayload",
    "parse_schedule_body",
    "NotificationManager",
    "AdaptiveScheduler",
    "RetryBudget",
]
