"""Domain models for daily orders and freeze history."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


class OrderStatus(Enum):
    """Lifecycle states of a daily order."""

    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    FROZEN = "FROZEN"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


TERMINAL_ORDER_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})


@dataclass(frozen=True)
class Order:
    """One scheduled meal delivery for one employee on one local date."""

    id: UUID
    company_id: UUID
    project_id: UUID
    subscription_id: UUID
    employee_id: UUID
    order_date: date
    combo_type: str
    price: Decimal
    status: OrderStatus
    created_at: datetime
    updated_at: datetime
    frozen_at: datetime | None = None
    frozen_reason: str | None = None
    replacement_date: date | None = None
    version: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_ORDER_STATUSES


@dataclass(frozen=True)
class FreezeRecord:
    """Immutable audit entry of one freeze event."""

    id: UUID
    employee_id: UUID
    order_id: UUID
    frozen_at: datetime
    original_date: date
    week_year: int
    week_number: int
    ordinal: int
