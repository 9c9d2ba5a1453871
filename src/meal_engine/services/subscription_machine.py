"""State machine for the subscription aggregate."""

from dataclasses import replace
from datetime import date, datetime, timedelta
from decimal import Decimal

from meal_engine.domain.errors import Failure, IntegrityViolation, invalid_transition
from meal_engine.domain.subscriptions import Subscription, SubscriptionStatus
from meal_engine.services.calendar import CalendarSnapshot

ONE_DAY = timedelta(days=1)


def expected_end_date(subscription: Subscription) -> date:
    """Window end implied by the day counters of a daily subscription."""
    return subscription.start_date + timedelta(
        days=subscription.total_days
        - 1
        + subscription.frozen_days_count
        + subscription.paused_days_count
    )


def pause(
    subscription: Subscription, calendar: CalendarSnapshot
) -> Subscription | Failure:
    if subscription.status is SubscriptionStatus.COMPLETED:
        return invalid_transition("Subscription is completed")
    if subscription.status is SubscriptionStatus.PAUSED or subscription.paused_at:
        return invalid_transition("Subscription is already paused")
    if subscription.is_expired(calendar.today):
        return invalid_transition(
            f"Subscription ended on {subscription.end_date.isoformat()}"
        )
    return replace(
        subscription,
        status=SubscriptionStatus.PAUSED,
        paused_at=calendar.now_utc,
        updated_at=calendar.now_utc,
    )


def paused_elapsed_days(subscription: Subscription, calendar: CalendarSnapshot) -> int:
    """Whole local days the pause kept from being delivered.

    Days locked by the cutoff are not touched by a pause or a resume: a pause
    taken after the cutoff starts on the next day, and a resume after the
    cutoff leaves today paused.
    """
    if subscription.paused_at is None:
        return 0
    first_paused = calendar.local_date_of(subscription.paused_at)
    if calendar.is_after_cutoff(subscription.paused_at):
        first_paused += ONE_DAY
    first_delivered = calendar.today
    if calendar.is_cutoff_passed:
        first_delivered += ONE_DAY
    return max(0, (first_delivered - first_paused).days)


def resume(
    subscription: Subscription, calendar: CalendarSnapshot
) -> Subscription | Failure:
    """Reactivate a paused subscription and push its end by the paused days."""
    if subscription.status is not SubscriptionStatus.PAUSED:
        return invalid_transition("Subscription is not paused")
    if subscription.is_expired(calendar.today):
        return invalid_transition(
            f"Subscription ended on {subscription.end_date.isoformat()}"
        )
    elapsed = paused_elapsed_days(subscription, calendar)
    return replace(
        subscription,
        status=SubscriptionStatus.ACTIVE,
        paused_at=None,
        paused_days_count=subscription.paused_days_count + elapsed,
        end_date=subscription.end_date + timedelta(days=elapsed),
        updated_at=calendar.now_utc,
    )


def extend_by_frozen_order(subscription: Subscription, now: datetime) -> Subscription:
    return replace(
        subscription,
        original_end_date=subscription.original_end_date or subscription.end_date,
        frozen_days_count=subscription.frozen_days_count + 1,
        end_date=subscription.end_date + ONE_DAY,
        updated_at=now,
    )


def shrink_by_unfrozen_order(subscription: Subscription, now: datetime) -> Subscription:
    if subscription.frozen_days_count <= 0:
        raise IntegrityViolation(
            f"Subscription {subscription.id} has no frozen days to give back"
        )
    frozen_days = subscription.frozen_days_count - 1
    return replace(
        subscription,
        original_end_date=subscription.original_end_date if frozen_days else None,
        frozen_days_count=frozen_days,
        end_date=subscription.end_date - ONE_DAY,
        updated_at=now,
    )


def extend(
    subscription: Subscription, days: int, new_end_date: date, now: datetime
) -> Subscription | Failure:
    """Grow the contracted day count explicitly."""
    if subscription.is_terminal:
        return invalid_transition("Subscription is completed")
    return replace(
        subscription,
        total_days=subscription.total_days + days,
        total_price=subscription.total_price + subscription.price * days,
        end_date=max(subscription.end_date, new_end_date),
        updated_at=now,
    )


def change_combo(
    subscription: Subscription,
    combo_type: str,
    price: Decimal,
    future_orders: int,
    now: datetime,
) -> Subscription | Failure:
    """Switch the combo and reprice the remaining orders.

    The total is recomputed from the remaining order count instead of scaling
    the previous total, so repeated switches do not accumulate rounding.
    """
    if subscription.is_terminal:
        return invalid_transition("Subscription is completed")
    total_price = subscription.total_price
    if future_orders > 0:
        total_price = price * future_orders
    return replace(
        subscription,
        combo_type=combo_type,
        price=price,
        total_price=total_price,
        updated_at=now,
    )


def cancel(subscription: Subscription, now: datetime) -> Subscription | Failure:
    if subscription.is_terminal:
        return invalid_transition("Subscription is already completed")
    return replace(
        subscription,
        status=SubscriptionStatus.COMPLETED,
        paused_at=None,
        updated_at=now,
    )


def complete_if_ended(
    subscription: Subscription, calendar: CalendarSnapshot
) -> Subscription | None:
    """Return the completed subscription once an open window is over.

    Paused subscriptions can no longer be resumed past their end date, so they
    are closed here as well.
    """
    if subscription.is_terminal:
        return None
    if not subscription.is_expired(calendar.today):
        return None
    return replace(
        subscription,
        status=SubscriptionStatus.COMPLETED,
        paused_at=None,
        updated_at=calendar.now_utc,
    )
