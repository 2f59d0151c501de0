"""Base models shared across domains."""

from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-day window; an open side is ``None``."""

    start: date | None = None
    end: date | None = None

    def contains(self, value: date | datetime) -> bool:
        """Return whether ``value`` (compared by calendar day) falls inside."""
        day = value.date() if isinstance(value, datetime) else value
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


@dataclass
class Event:
    """Standard event envelope for streaming."""

    event_id: str
    event_type: str  # entity.action (e.g., installment.settled)
    event_time: datetime
    source: str  # Service/system that generated
    subject: str  # Entity ID affected
    data: dict
    metadata: dict = field(default_factory=dict)
