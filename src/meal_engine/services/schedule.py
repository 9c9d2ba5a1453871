"""Expansion of subscriptions into concrete daily orders."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from uuid import uuid4

from meal_engine.domain.errors import IntegrityViolation
from meal_engine.domain.orders import Order, OrderStatus
from meal_engine.domain.subscriptions import ScheduleType, Subscription

SATURDAY = 5


@dataclass(frozen=True)
class ScheduleGenerator:
    """Turns subscription windows into order rows.

    Every calendar day counts unless ``skip_weekends`` is enabled.
    """

    skip_weekends: bool = False

    def plan_dates(
        self,
        start: date,
        total_days: int,
        schedule_type: ScheduleType,
        custom_dates: tuple[date, ...] = (),
    ) -> list[date]:
        """Return the delivery dates of a new subscription in order."""
        if schedule_type is ScheduleType.CUSTOM:
            return sorted({day for day in custom_dates if day >= start})[:total_days]
        step_every_other = schedule_type is ScheduleType.EVERY_OTHER_DAY
        dates: list[date] = []
        skip_next = False
        current = start
        while len(dates) < total_days:
            if self._is_delivery_day(current):
                if not (step_every_other and skip_next):
                    dates.append(current)
                skip_next = not skip_next
            current += timedelta(days=1)
        return dates

    def tail_dates(self, after: date, count: int) -> list[date]:
        """Return ``count`` consecutive delivery dates following ``after``."""
        dates: list[date] = []
        current = after
        while len(dates) < count:
            current += timedelta(days=1)
            if self._is_delivery_day(current):
                dates.append(current)
        return dates

    def build_orders(
        self, subscription: Subscription, dates: list[date], now: datetime
    ) -> list[Order]:
        return [
            Order(
                id=uuid4(),
                company_id=subscription.company_id,
                project_id=subscription.project_id,
                subscription_id=subscription.id,
                employee_id=subscription.employee_id,
                order_date=day,
                combo_type=subscription.combo_type,
                price=subscription.price,
                status=OrderStatus.ACTIVE,
                created_at=now,
                updated_at=now,
            )
            for day in dates
        ]

    def missing_dates(self, expected: list[date], orders: list[Order]) -> list[date]:
        """Return expected dates that have no non-cancelled order yet."""
        scheduled = {
            order.order_date
            for order in orders
            if order.status is not OrderStatus.CANCELLED
        }
        return [day for day in expected if day not in scheduled]

    def extend(
        self,
        subscription: Subscription,
        orders: list[Order],
        delta: int,
        now: datetime,
    ) -> list[Order]:
        """Return ``delta`` new orders appended after the last scheduled date."""
        if delta <= 0:
            return []
        last = max(
            (
                order.order_date
                for order in orders
                if order.status is not OrderStatus.CANCELLED
            ),
            default=subscription.start_date - timedelta(days=1),
        )
        return self.build_orders(subscription, self.tail_dates(last, delta), now)

    def shrink_tail(self, orders: list[Order], after: date, today: date) -> Order:
        """Return the unconsumed tail order that a shrink must remove.

        The tail is the latest non-cancelled order. It has to be Active, in
        the future relative to ``today`` and later than ``after``; anything
        else means the stored window no longer matches the freeze history.
        """
        candidates = [
            order for order in orders if order.status is not OrderStatus.CANCELLED
        ]
        if not candidates:
            raise IntegrityViolation("Subscription has no orders to shrink")
        tail = max(candidates, key=lambda order: order.order_date)
        if tail.status is not OrderStatus.ACTIVE or tail.order_date < today:
            raise IntegrityViolation(
                f"Tail order {tail.id} on {tail.order_date} is already "
                f"{tail.status.value.lower()} and cannot be removed"
            )
        if tail.order_date <= after:
            raise IntegrityViolation(
                f"Tail order {tail.id} on {tail.order_date} is not a replacement day"
            )
        return tail

    def _is_delivery_day(self, day: date) -> bool:
        return not (self.skip_weekends and day.weekday() >= SATURDAY)

