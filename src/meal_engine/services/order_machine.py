"""State machine for a single daily order.

Transitions are pure: they take the order, a calendar snapshot and whatever
decision the caller already made, and return either the next order value or a
``Failure`` describing the violated precondition.
"""

from dataclasses import replace
from datetime import date, datetime

from meal_engine.domain.errors import ErrorKind, Failure, invalid_transition
from meal_engine.domain.orders import Order, OrderStatus
from meal_engine.services.calendar import CalendarSnapshot
from meal_engine.services.freeze_quota import QuotaDecision

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.ACTIVE: frozenset(
        {
            OrderStatus.PAUSED,
            OrderStatus.FROZEN,
            OrderStatus.CANCELLED,
            OrderStatus.COMPLETED,
        }
    ),
    OrderStatus.PAUSED: frozenset({OrderStatus.ACTIVE}),
    OrderStatus.FROZEN: frozenset({OrderStatus.ACTIVE}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def allowed_transitions(current: OrderStatus) -> frozenset[OrderStatus]:
    return ALLOWED_TRANSITIONS.get(current, frozenset())


def check_changeable_date(
    order_date: date, calendar: CalendarSnapshot
) -> Failure | None:
    """Reject changes to past orders and to today's order after the cutoff."""
    if calendar.is_past(order_date):
        return Failure(
            ErrorKind.PAST_DATE, f"Order for {order_date.isoformat()} is in the past"
        )
    if order_date == calendar.today and calendar.is_cutoff_passed:
        return Failure(
            ErrorKind.CUTOFF_PASSED,
            "Cutoff time "
            f"{calendar.cutoff_time.strftime('%H:%M')} has passed for today's order",
        )
    return None


def cancel(order: Order, calendar: CalendarSnapshot) -> Order | Failure:
    """Cancel an active order for today or a future day."""
    if order.status is OrderStatus.CANCELLED:
        return invalid_transition("Order is already cancelled")
    if not can_transition(order.status, OrderStatus.CANCELLED):
        return _reject(order, OrderStatus.CANCELLED, "cancelled")
    failure = check_changeable_date(order.order_date, calendar)
    if failure:
        return failure
    return replace(order, status=OrderStatus.CANCELLED, updated_at=calendar.now_utc)


def freeze(
    order: Order,
    calendar: CalendarSnapshot,
    quota: QuotaDecision,
    replacement_date: date,
    reason: str | None = None,
) -> Order | Failure:
    """Freeze an active order, deferring its day to ``replacement_date``."""
    if order.status is OrderStatus.FROZEN:
        return invalid_transition("Order is already frozen")
    if not can_transition(order.status, OrderStatus.FROZEN):
        return _reject(order, OrderStatus.FROZEN, "frozen")
    failure = check_changeable_date(order.order_date, calendar)
    if failure:
        return failure
    if not quota.allowed:
        return Failure(
            ErrorKind.QUOTA_EXCEEDED,
            f"Freeze limit reached ({quota.limit} per week) for week "
            f"{quota.week_number} of {quota.week_year}",
        )
    return replace(
        order,
        status=OrderStatus.FROZEN,
        frozen_at=calendar.now_utc,
        frozen_reason=reason,
        replacement_date=replacement_date,
        updated_at=calendar.now_utc,
    )


def unfreeze(order: Order, calendar: CalendarSnapshot) -> Order | Failure:
    """Return a frozen order for today or a future day to Active."""
    if order.status is not OrderStatus.FROZEN:
        return invalid_transition(
            "Only frozen orders can be unfrozen "
            f"(order is {order.status.value.lower()})"
        )
    failure = check_changeable_date(order.order_date, calendar)
    if failure:
        return failure
    return replace(
        order,
        status=OrderStatus.ACTIVE,
        frozen_at=None,
        frozen_reason=None,
        replacement_date=None,
        updated_at=calendar.now_utc,
    )


def pause(order: Order, now: datetime) -> Order:
    """Pause an order as part of a subscription pause; other states are kept."""
    if order.status is not OrderStatus.ACTIVE:
        return order
    return replace(order, status=OrderStatus.PAUSED, updated_at=now)


def resume(order: Order, now: datetime) -> Order:
    """Reactivate an order paused by its subscription; other states are kept."""
    if order.status is not OrderStatus.PAUSED:
        return order
    return replace(order, status=OrderStatus.ACTIVE, updated_at=now)


def complete(order: Order, calendar: CalendarSnapshot) -> Order | Failure:
    """Mark an active order as delivered once its day is settled."""
    if not can_transition(order.status, OrderStatus.COMPLETED):
        return _reject(order, OrderStatus.COMPLETED, "completed")
    if not calendar.is_locked(order.order_date):
        return invalid_transition(
            f"Order for {order.order_date.isoformat()} cannot be completed yet"
        )
    return replace(order, status=OrderStatus.COMPLETED, updated_at=calendar.now_utc)


def _reject(order: Order, target: OrderStatus, verb: str) -> Failure:
    allowed = sorted(status.value for status in allowed_transitions(order.status))
    hint = ", ".join(allowed) if allowed else "none, the status is final"
    return invalid_transition(
        f"Order in status {order.status.value} cannot be {verb} "
        f"(allowed transitions: {hint})"
    )
