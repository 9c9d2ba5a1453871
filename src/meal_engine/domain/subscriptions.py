"""Domain models for meal subscriptions."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


class SubscriptionStatus(Enum):
    """Lifecycle states of a subscription."""

    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"


class ScheduleType(Enum):
    """Delivery patterns a subscription can follow."""

    EVERY_DAY = "EVERY_DAY"
    EVERY_OTHER_DAY = "EVERY_OTHER_DAY"
    CUSTOM = "CUSTOM"

    @classmethod
    def normalize(cls, raw: str | None) -> "ScheduleType":
        """Map stored or legacy pattern names onto a supported type."""
        if not raw:
            return cls.EVERY_DAY
        try:
            return cls(raw.strip().upper())
        except ValueError:
            # WEEKDAYS and unknown values fall back to the daily pattern
            return cls.EVERY_DAY


@dataclass(frozen=True)
class Subscription:
    """A purchased commitment of N meal-days for one employee."""

    id: UUID
    company_id: UUID
    project_id: UUID
    employee_id: UUID
    start_date: date
    end_date: date
    total_days: int
    total_price: Decimal
    combo_type: str
    price: Decimal
    schedule_type: ScheduleType
    status: SubscriptionStatus
    created_at: datetime
    updated_at: datetime
    paused_at: datetime | None = None
    paused_days_count: int = 0
    original_end_date: date | None = None
    frozen_days_count: int = 0
    custom_dates: tuple[date, ...] = field(default_factory=tuple)
    version: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status is SubscriptionStatus.COMPLETED

    def is_expired(self, today: date) -> bool:
        """Return True once the window has ended before the given local date."""
        return self.end_date < today
