"""Request and result values of subscription operations."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID

from meal_engine.domain.errors import Failure
from meal_engine.domain.orders import Order
from meal_engine.domain.subscriptions import ScheduleType, Subscription


@dataclass(frozen=True)
class SubscriptionRequest:
    """Definition of subscriptions to create for a set of employees.

    Either ``end_date`` or ``total_days`` bounds the window.
    """

    employee_ids: tuple[UUID, ...]
    combo_type: str
    start_date: date
    end_date: date | None = None
    total_days: int | None = None
    schedule_type: ScheduleType = ScheduleType.EVERY_DAY
    custom_dates: tuple[date, ...] = ()


@dataclass(frozen=True)
class ComboChange:
    subscription: Subscription
    updated_orders: int


@dataclass(frozen=True)
class BulkComboChange:
    updated_subscriptions: int
    updated_orders: int
    skipped_employee_ids: tuple[UUID, ...] = ()


@dataclass(frozen=True)
class FreezeResult:
    order: Order
    replacement_order: Order
    subscription: Subscription


@dataclass(frozen=True)
class UnfreezeResult:
    order: Order
    subscription: Subscription
    removed_order: Order


@dataclass(frozen=True)
class FreezePeriodResult:
    """Orders frozen by one period request and why the rest were left alone."""

    subscription: Subscription
    frozen_orders: tuple[Order, ...]
    replacement_orders: tuple[Order, ...]
    skipped: tuple[tuple[date, Failure], ...] = ()


@dataclass(frozen=True)
class FreezeInfo:
    """Weekly freeze usage of an employee."""

    employee_id: UUID
    used_this_week: int
    remaining: int
    weekly_limit: int
    week_start: date
    week_end: date
    subscription: Subscription | None = None
    frozen_orders: tuple[Order, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SettlementReport:
    """Totals of one settlement sweep across projects."""

    projects: int = 0
    completed_orders: int = 0
    completed_subscriptions: int = 0
    deducted: Decimal = Decimal("0")
    failed_projects: tuple[UUID, ...] = ()
