"""Weekly freeze quota per employee."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol
from uuid import UUID, uuid4

from meal_engine.domain.orders import FreezeRecord, Order
from meal_engine.services.calendar import iso_week

DEFAULT_WEEKLY_LIMIT = 2


class FreezeRepository(Protocol):
    """Persistence interface for freeze history."""

    def count_freezes(self, employee_id: UUID, week_year: int, week_number: int) -> int:
        """Return how many freezes the employee used in an ISO week."""

    def has_freeze_records(self, order_id: UUID) -> bool:
        """Return True when any freeze was ever recorded against the order."""


@dataclass(frozen=True)
class QuotaDecision:
    """Outcome of a quota check for one ISO week."""

    allowed: bool
    used: int
    remaining: int
    limit: int
    week_year: int
    week_number: int

    @property
    def next_ordinal(self) -> int:
        return self.used + 1


@dataclass
class FreezeQuotaTracker:
    """Approves freezes while an employee is under the weekly limit.

    Records are numbered 1..limit within a week and storage keeps
    (employee, week-year, week-number, ordinal) unique, so two requests that
    both saw the same count cannot both commit.
    """

    repository: FreezeRepository
    weekly_limit: int = DEFAULT_WEEKLY_LIMIT

    def can_freeze(
        self, employee_id: UUID, proposed_date: date, pending: int = 0
    ) -> QuotaDecision:
        """Check the quota for the ISO week of ``proposed_date``.

        ``pending`` counts freezes of the same week already staged in the
        current unit of work.
        """
        week_year, week_number = iso_week(proposed_date)
        used = self.repository.count_freezes(employee_id, week_year, week_number)
        return self.evaluate(used + pending, week_year, week_number)

    def evaluate(self, used: int, week_year: int, week_number: int) -> QuotaDecision:
        return QuotaDecision(
            allowed=used < self.weekly_limit,
            used=used,
            remaining=max(0, self.weekly_limit - used),
            limit=self.weekly_limit,
            week_year=week_year,
            week_number=week_number,
        )

    def record(
        self, order: Order, decision: QuotaDecision, frozen_at: datetime
    ) -> FreezeRecord:
        """Build the audit record consuming the next slot of the week."""
        return FreezeRecord(
            id=uuid4(),
            employee_id=order.employee_id,
            order_id=order.id,
            frozen_at=frozen_at,
            original_date=order.order_date,
            week_year=decision.week_year,
            week_number=decision.week_number,
            ordinal=decision.next_ordinal,
        )
