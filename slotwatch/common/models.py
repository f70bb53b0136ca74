"""
Data models for the appointment watcher
"""
import json
from datetime import date
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, model_validator
from dateutil import parser as date_parser
from enum import Enum


class SessionStatus(str, Enum):
    LOGGED_OUT = "logged_out"
    LOGGED_IN = "logged_in"


class ScanStatus(str, Enum):
    SLOTS = "slots"
    EMPTY = "empty"
    UNAUTHENTICATED = "unauthenticated"
    MALFORMED = "malformed"
    FETCH_FAILED = "fetch_failed"


class FacilityRange(BaseModel):
    """Inclusive range of facility ids scanned every cycle"""
    model_config = ConfigDict(frozen=True)

    first_id: int
    last_id: int

    @model_validator(mode="after")
    def check_order(self) -> "FacilityRange":
        if self.first_id > self.last_id:
            raise ValueError("first_id must not exceed last_id")
        return self

    def ids(self) -> List[int]:
        return list(range(self.first_id, self.last_id + 1))

    def __len__(self) -> int:
        return self.last_id - self.first_id + 1


class NotificationThreshold(BaseModel):
    """Cutoff date; anything strictly earlier is worth an alert"""
    model_config = ConfigDict(frozen=True)

    before: date

    def is_beaten_by(self, candidate: Optional[date]) -> bool:
        return candidate is not None and candidate < self.before


class AppointmentSlot(BaseModel):
    """Earliest date offered by one facility"""
    facility_id: int
    date: date


class ParsedSchedule(BaseModel):
    """Interpretation of a schedule-days response body"""
    status: ScanStatus
    dates: List[date] = Field(default_factory=list)
    detail: Optional[str] = None


def parse_schedule_body(text: str) -> ParsedSchedule:
    """
    Interpret the body returned by the appointment days endpoint.

    Only a JSON list counts as an authenticated answer. Anything else
    (the HTML sign-in page, an error object) means the session is gone.
    """
    try:
        body = json.loads(text)
    except (TypeError, ValueError):
        return ParsedSchedule(
            status=ScanStatus.UNAUTHENTICATED,
            detail="body is not JSON",
        )

    if not isinstance(body, list):
        return ParsedSchedule(
            status=ScanStatus.UNAUTHENTICATED,
            detail=f"expected a list, got {type(body).__name__}",
        )

    if not body:
        return ParsedSchedule(status=ScanStatus.EMPTY)

    dates = []
    for record in body:
        raw = record.get("date") if isinstance(record, dict) else None
        if not isinstance(raw, str):
            return ParsedSchedule(
                status=ScanStatus.MALFORMED,
                detail=f"record without a date: {record!r}",
            )
        try:
            dates.append(date_parser.isoparse(raw).date())
        except ValueError:
            return ParsedSchedule(
                status=ScanStatus.MALFORMED,
                detail=f"unparseable date: {raw!r}",
            )

    return ParsedSchedule(status=ScanStatus.SLOTS, dates=dates)


class ScanResult(BaseModel):
    """Outcome of scanning a single facility"""
    facility_id: int
    status: ScanStatus
    dates: List[date] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def earliest(self) -> Optional[date]:
        if self.status != ScanStatus.SLOTS or not self.dates:
            return None
        return min(self.dates)

    @property
    def slot(self) -> Optional[AppointmentSlot]:
        earliest = self.earliest
        if earliest is None:
            return None
        return AppointmentSlot(facility_id=self.facility_id, date=earliest)

    @property
    def requires_login(self) -> bool:
        return self.status in (ScanStatus.UNAUTHENTICATED, ScanStatus.MALFORMED)


class PollCycle(BaseModel):
    """State threaded through one pass of the poll loop"""
    cycle: int = 0
    remaining_tries: int = Field(ge=0)
    delay_ms: int
    any_found: bool = False
    results: List[ScanResult] = Field(default_factory=list)
    notified: List[AppointmentSlot] = Field(default_factory=list)

    def next_cycle(self, remaining_tries: int) -> "PollCycle":
        """Start a new cycle, carrying over only the delay"""
        return PollCycle(
            cycle=self.cycle + 1,
            remaining_tries=remaining_tries,
            delay_ms=self.delay_ms,
        )

    @property
    def slots(self) -> List[AppointmentSlot]:
        return [r.slot for r in self.results if r.slot is not None]


class NotificationPayload(BaseModel):
    """Notification content"""
    title: str
    message: str
