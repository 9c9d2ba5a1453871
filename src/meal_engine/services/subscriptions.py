"""Subscription and order operations committed as single units of work."""

import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Protocol, TypeVar
from uuid import UUID, uuid4

from meal_engine.domain.changes import ChangeSet
from meal_engine.domain.errors import (
    ErrorKind,
    Failure,
    IntegrityViolation,
    invalid_transition,
    not_found,
    validation,
)
from meal_engine.domain.orders import Order, OrderStatus
from meal_engine.domain.outcomes import (
    BulkComboChange,
    ComboChange,
    FreezeInfo,
    FreezePeriodResult,
    FreezeResult,
    SubscriptionRequest,
    UnfreezeResult,
)
from meal_engine.domain.subscriptions import (
    ScheduleType,
    Subscription,
    SubscriptionStatus,
)
from meal_engine.domain.tenants import Employee, TenantConfig, TenantDefaults
from meal_engine.services import order_machine, subscription_machine
from meal_engine.services.calendar import (
    CalendarSnapshot,
    iso_week,
    snapshot,
    week_bounds,
)
from meal_engine.services.commits import DEFAULT_MAX_ATTEMPTS, commit_with_retry
from meal_engine.services.freeze_quota import FreezeQuotaTracker, FreezeRepository
from meal_engine.services.pricing import ComboPricing
from meal_engine.services.schedule import ScheduleGenerator

logger = logging.getLogger(__name__)

DEFAULT_MIN_SUBSCRIPTION_DAYS = 5
CHANGEABLE_ORDER_STATUSES = frozenset(
    {OrderStatus.ACTIVE, OrderStatus.PAUSED, OrderStatus.FROZEN}
)

T = TypeVar("T")


class SubscriptionRepository(FreezeRepository, Protocol):
    """Persistence interface for subscriptions, orders and freeze history."""

    def get_subscription(
        self, company_id: UUID, subscription_id: UUID
    ) -> Subscription | None:
        """Return a subscription owned by the company."""

    def get_current_subscription(
        self, company_id: UUID, employee_id: UUID
    ) -> Subscription | None:
        """Return the employee's latest subscription that is not completed."""

    def list_subscription_orders(self, subscription_id: UUID) -> list[Order]:
        """Return every order of a subscription ordered by date."""

    def get_order(self, company_id: UUID, order_id: UUID) -> Order | None:
        """Return an order owned by the company."""

    def list_employee_orders(
        self, employee_id: UUID, start: date, end: date
    ) -> list[Order]:
        """Return an employee's orders dated within ``start``..``end``."""

    def get_employee(self, company_id: UUID, employee_id: UUID) -> Employee | None:
        """Return a roster entry owned by the company."""

    def get_tenant_config(
        self, company_id: UUID, project_id: UUID | None = None
    ) -> TenantConfig | None:
        """Return budget and calendar settings of a company or project."""

    def apply(self, changes: ChangeSet) -> None:
        """Commit a change set atomically."""


@dataclass
class SubscriptionService:
    """Lifecycle operations on subscriptions and their daily orders.

    Every public operation reads the clock once, evaluates the transition
    against fresh reads and commits one change set. Conflicting commits are
    rebuilt and retried.
    """

    repository: SubscriptionRepository
    pricing: ComboPricing
    clock: Callable[[], datetime]
    defaults: TenantDefaults = field(default_factory=TenantDefaults)
    schedule: ScheduleGenerator = field(default_factory=ScheduleGenerator)
    weekly_freeze_limit: int = 2
    min_subscription_days: int = DEFAULT_MIN_SUBSCRIPTION_DAYS
    max_commit_attempts: int = DEFAULT_MAX_ATTEMPTS

    def __post_init__(self) -> None:
        self.quota = FreezeQuotaTracker(self.repository, self.weekly_freeze_limit)

    # creation

    def create_subscriptions(
        self, company_id: UUID, request: SubscriptionRequest
    ) -> list[Subscription] | Failure:
        """Create one subscription with its daily orders per employee."""
        price = self.pricing.price_for(request.combo_type)
        if price is None:
            return _unknown_combo(request.combo_type, self.pricing)
        if not request.employee_ids:
            return validation("At least one employee is required")
        if len(set(request.employee_ids)) != len(request.employee_ids):
            return validation("Employee ids must be unique")
        dates = self._plan(request)
        if isinstance(dates, Failure):
            return dates
        now = self.clock()

        def attempt() -> list[Subscription] | Failure:
            changes = ChangeSet()
            created: list[Subscription] = []
            for employee_id in request.employee_ids:
                employee = self.repository.get_employee(company_id, employee_id)
                if employee is None:
                    return not_found(f"Employee {employee_id} not found")
                calendar = self._calendar(company_id, employee.project_id, now)
                if calendar.is_past(request.start_date):
                    return Failure(
                        ErrorKind.PAST_DATE,
                        f"Start date {request.start_date.isoformat()} is in the past",
                    )
                if self.repository.get_current_subscription(company_id, employee_id):
                    return invalid_transition(
                        f"Employee {employee_id} already has an active subscription"
                    )
                taken = self.repository.list_employee_orders(
                    employee_id, dates[0], dates[-1]
                )
                free = self.schedule.missing_dates(dates, taken)
                if len(free) != len(dates):
                    clash = sorted(set(dates) - set(free))[0]
                    return invalid_transition(
                        f"Employee {employee_id} already has an order on "
                        f"{clash.isoformat()}"
                    )
                subscription = Subscription(
                    id=uuid4(),
                    company_id=company_id,
                    project_id=employee.project_id,
                    employee_id=employee_id,
                    start_date=dates[0],
                    end_date=dates[-1],
                    total_days=len(dates),
                    total_price=price * len(dates),
                    combo_type=request.combo_type.strip(),
                    price=price,
                    schedule_type=request.schedule_type,
                    status=SubscriptionStatus.ACTIVE,
                    created_at=now,
                    updated_at=now,
                    custom_dates=tuple(request.custom_dates),
                )
                changes.save_subscription(subscription)
                for order in self.schedule.build_orders(subscription, dates, now):
                    changes.save_order(order)
                created.append(subscription)
            self.repository.apply(changes)
            return created

        result = self._commit(attempt, "create subscriptions")
        if not isinstance(result, Failure):
            for subscription in result:
                logger.info(
                    "Created subscription %s for employee %s: %s..%s (%s days)",
                    subscription.id,
                    subscription.employee_id,
                    subscription.start_date,
                    subscription.end_date,
                    subscription.total_days,
                )
        return result

    # subscription lifecycle

    def pause_subscription(
        self, company_id: UUID, subscription_id: UUID
    ) -> Subscription | Failure:
        """Pause a subscription and every order that can still change."""
        now = self.clock()

        def attempt() -> Subscription | Failure:
            subscription = self.repository.get_subscription(company_id, subscription_id)
            if subscription is None:
                return _subscription_not_found(subscription_id)
            calendar = self._calendar(company_id, subscription.project_id, now)
            paused = subscription_machine.pause(subscription, calendar)
            if isinstance(paused, Failure):
                return paused
            changes = ChangeSet(subscriptions=[paused])
            for order in self.repository.list_subscription_orders(subscription.id):
                if calendar.is_locked(order.order_date):
                    continue
                updated = order_machine.pause(order, calendar.now_utc)
                if updated is not order:
                    changes.save_order(updated)
            self.repository.apply(changes)
            return paused

        result = self._commit(attempt, "pause subscription")
        if not isinstance(result, Failure):
            logger.info("Paused subscription %s", result.id)
        return result

    def resume_subscription(
        self, company_id: UUID, subscription_id: UUID
    ) -> Subscription | Failure:
        """Resume a paused subscription, pushing its window by the paused days."""
        now = self.clock()

        def attempt() -> Subscription | Failure:
            subscription = self.repository.get_subscription(company_id, subscription_id)
            if subscription is None:
                return _subscription_not_found(subscription_id)
            calendar = self._calendar(company_id, subscription.project_id, now)
            resumed = subscription_machine.resume(subscription, calendar)
            if isinstance(resumed, Failure):
                return resumed
            elapsed = resumed.paused_days_count - subscription.paused_days_count
            orders = self.repository.list_subscription_orders(subscription.id)
            changes = ChangeSet(subscriptions=[resumed])
            for order in orders:
                if calendar.is_locked(order.order_date):
                    continue
                updated = order_machine.resume(order, calendar.now_utc)
                if updated is not order:
                    changes.save_order(updated)
            tail = self.schedule.extend(resumed, orders, elapsed, calendar.now_utc)
            for order in tail:
                changes.save_order(order)
            self.repository.apply(changes)
            return resumed

        result = self._commit(attempt, "resume subscription")
        if not isinstance(result, Failure):
            logger.info(
                "Resumed subscription %s, window now ends %s (%s paused days)",
                result.id,
                result.end_date,
                result.paused_days_count,
            )
        return result

    def cancel_subscription(
        self, company_id: UUID, subscription_id: UUID
    ) -> Subscription | Failure:
        """Complete a subscription and cancel every order that can still change.

        Paused orders are resumed and frozen orders unfrozen on the way to
        Cancelled, so none of them keeps its day reserved.
        """
        now = self.clock()

        def attempt() -> Subscription | Failure:
            subscription = self.repository.get_subscription(company_id, subscription_id)
            if subscription is None:
                return _subscription_not_found(subscription_id)
            calendar = self._calendar(company_id, subscription.project_id, now)
            cancelled = subscription_machine.cancel(subscription, calendar.now_utc)
            if isinstance(cancelled, Failure):
                return cancelled
            changes = ChangeSet(subscriptions=[cancelled])
            for order in self.repository.list_subscription_orders(subscription.id):
                if order.status not in CHANGEABLE_ORDER_STATUSES:
                    continue
                if calendar.is_locked(order.order_date):
                    continue
                if order.status is OrderStatus.PAUSED:
                    order = order_machine.resume(order, calendar.now_utc)
                elif order.status is OrderStatus.FROZEN:
                    unfrozen = order_machine.unfreeze(order, calendar)
                    if isinstance(unfrozen, Failure):
                        return unfrozen
                    order = unfrozen
                updated = order_machine.cancel(order, calendar)
                if isinstance(updated, Failure):
                    return updated
                changes.save_order(updated)
            self.repository.apply(changes)
            return cancelled

        result = self._commit(attempt, "cancel subscription")
        if not isinstance(result, Failure):
            logger.info("Cancelled subscription %s", result.id)
        return result

    def extend_subscription(
        self, company_id: UUID, subscription_id: UUID, days: int
    ) -> Subscription | Failure:
        """Add contracted days to the end of a subscription."""
        if days <= 0:
            return validation("Extension must add at least one day")
        now = self.clock()

        def attempt() -> Subscription | Failure:
            subscription = self.repository.get_subscription(company_id, subscription_id)
            if subscription is None:
                return _subscription_not_found(subscription_id)
            orders = self.repository.list_subscription_orders(subscription.id)
            added = self.schedule.extend(subscription, orders, days, now)
            new_end = max(order.order_date for order in added)
            extended = subscription_machine.extend(subscription, days, new_end, now)
            if isinstance(extended, Failure):
                return extended
            changes = ChangeSet(subscriptions=[extended], orders=list(added))
            self.repository.apply(changes)
            return extended

        result = self._commit(attempt, "extend subscription")
        if not isinstance(result, Failure):
            logger.info(
                "Extended subscription %s by %s days to %s",
                result.id,
                days,
                result.end_date,
            )
        return result

    # combo changes

    def change_combo(
        self, company_id: UUID, subscription_id: UUID, combo_type: str
    ) -> ComboChange | Failure:
        """Switch a subscription and its remaining orders to another combo."""
        price = self.pricing.price_for(combo_type)
        if price is None:
            return _unknown_combo(combo_type, self.pricing)
        now = self.clock()

        def attempt() -> ComboChange | Failure:
            subscription = self.repository.get_subscription(company_id, subscription_id)
            if subscription is None:
                return _subscription_not_found(subscription_id)
            changes = ChangeSet()
            change = self._stage_combo(
                changes, subscription, combo_type.strip(), price, now
            )
            if isinstance(change, Failure):
                return change
            self.repository.apply(changes)
            return change

        result = self._commit(attempt, "change combo")
        if not isinstance(result, Failure):
            logger.info(
                "Subscription %s switched to %s (%s orders repriced)",
                result.subscription.id,
                result.subscription.combo_type,
                result.updated_orders,
            )
        return result

    def change_employee_combo(
        self, company_id: UUID, employee_id: UUID, combo_type: str
    ) -> ComboChange | Failure:
        """Switch the current subscription of an employee to another combo."""
        subscription = self.repository.get_current_subscription(company_id, employee_id)
        if subscription is None:
            return not_found(f"Employee {employee_id} has no active subscription")
        return self.change_combo(company_id, subscription.id, combo_type)

    def bulk_update_combo(
        self, company_id: UUID, employee_ids: list[UUID], combo_type: str
    ) -> BulkComboChange | Failure:
        """Switch the current subscriptions of many employees together.

        Employees without a current subscription are skipped and reported.
        """
        price = self.pricing.price_for(combo_type)
        if price is None:
            return _unknown_combo(combo_type, self.pricing)
        if not employee_ids:
            return validation("At least one employee is required")
        now = self.clock()

        def attempt() -> BulkComboChange | Failure:
            changes = ChangeSet()
            updated_orders = 0
            updated_subscriptions = 0
            skipped: list[UUID] = []
            for employee_id in dict.fromkeys(employee_ids):
                subscription = self.repository.get_current_subscription(
                    company_id, employee_id
                )
                if subscription is None:
                    skipped.append(employee_id)
                    continue
                change = self._stage_combo(
                    changes, subscription, combo_type.strip(), price, now
                )
                if isinstance(change, Failure):
                    return change
                updated_subscriptions += 1
                updated_orders += change.updated_orders
            if not changes.is_empty():
                self.repository.apply(changes)
            return BulkComboChange(
                updated_subscriptions=updated_subscriptions,
                updated_orders=updated_orders,
                skipped_employee_ids=tuple(skipped),
            )

        result = self._commit(attempt, "bulk combo update")
        if not isinstance(result, Failure):
            logger.info(
                "Bulk combo update to %s: %s subscriptions, %s orders, %s skipped",
                combo_type,
                result.updated_subscriptions,
                result.updated_orders,
                len(result.skipped_employee_ids),
            )
        return result

    # order lifecycle

    def cancel_order(self, company_id: UUID, order_id: UUID) -> Order | Failure:
        now = self.clock()

        def attempt() -> Order | Failure:
            order = self.repository.get_order(company_id, order_id)
            if order is None:
                return _order_not_found(order_id)
            calendar = self._calendar(company_id, order.project_id, now)
            cancelled = order_machine.cancel(order, calendar)
            if isinstance(cancelled, Failure):
                return cancelled
            self.repository.apply(ChangeSet(orders=[cancelled]))
            return cancelled

        result = self._commit(attempt, "cancel order")
        if not isinstance(result, Failure):
            logger.info("Cancelled order %s on %s", result.id, result.order_date)
        return result

    def freeze_order(
        self, company_id: UUID, order_id: UUID, reason: str | None = None
    ) -> FreezeResult | Failure:
        """Freeze one order and append its replacement day to the window."""
        now = self.clock()

        def attempt() -> FreezeResult | Failure:
            order = self.repository.get_order(company_id, order_id)
            if order is None:
                return _order_not_found(order_id)
            subscription = self._owning_subscription(company_id, order)
            calendar = self._calendar(company_id, order.project_id, now)
            inactive = _require_active(subscription)
            if inactive:
                return inactive
            orders = self.repository.list_subscription_orders(subscription.id)
            changes = ChangeSet()
            staged = self._stage_freeze(
                changes, subscription, order, orders, calendar, reason, Counter()
            )
            if isinstance(staged, Failure):
                return staged
            self.repository.apply(changes)
            return staged

        result = self._commit(attempt, "freeze order")
        if not isinstance(result, Failure):
            logger.info(
                "Froze order %s on %s, replacement %s, subscription %s ends %s",
                result.order.id,
                result.order.order_date,
                result.replacement_order.order_date,
                result.subscription.id,
                result.subscription.end_date,
            )
        return result

    def unfreeze_order(
        self, company_id: UUID, order_id: UUID
    ) -> UnfreezeResult | Failure:
        """Reactivate a frozen order and drop the replacement day it added."""
        now = self.clock()

        def attempt() -> UnfreezeResult | Failure:
            order = self.repository.get_order(company_id, order_id)
            if order is None:
                return _order_not_found(order_id)
            subscription = self._owning_subscription(company_id, order)
            calendar = self._calendar(company_id, order.project_id, now)
            inactive = _require_active(subscription, "unfrozen")
            if inactive:
                return inactive
            unfrozen = order_machine.unfreeze(order, calendar)
            if isinstance(unfrozen, Failure):
                return unfrozen
            orders = self.repository.list_subscription_orders(subscription.id)
            tail = self.schedule.shrink_tail(orders, order.order_date, calendar.today)
            shrunk = subscription_machine.shrink_by_unfrozen_order(
                subscription, calendar.now_utc
            )
            changes = ChangeSet(subscriptions=[shrunk], orders=[unfrozen])
            if self.repository.has_freeze_records(tail.id):
                # freeze history keeps referencing the row
                tail = replace(
                    tail, status=OrderStatus.CANCELLED, updated_at=calendar.now_utc
                )
                changes.save_order(tail)
            else:
                changes.delete_order(tail)
            self.repository.apply(changes)
            return UnfreezeResult(
                order=unfrozen, subscription=shrunk, removed_order=tail
            )

        result = self._commit(attempt, "unfreeze order")
        if not isinstance(result, Failure):
            logger.info(
                "Unfroze order %s on %s, removed %s, subscription %s ends %s",
                result.order.id,
                result.order.order_date,
                result.removed_order.order_date,
                result.subscription.id,
                result.subscription.end_date,
            )
        return result

    def freeze_period(
        self,
        company_id: UUID,
        employee_id: UUID,
        start: date,
        end: date,
        reason: str | None = None,
    ) -> FreezePeriodResult | Failure:
        """Freeze an employee's active orders between two dates.

        Orders are frozen in date order until the weekly quota refuses one;
        orders that cannot change any more are skipped. All freezes of the
        period commit together.
        """
        if end < start:
            return validation("End date must not be before start date")
        now = self.clock()

        def attempt() -> FreezePeriodResult | Failure:
            subscription = self.repository.get_current_subscription(
                company_id, employee_id
            )
            if subscription is None:
                return not_found(f"Employee {employee_id} has no active subscription")
            inactive = _require_active(subscription)
            if inactive:
                return inactive
            calendar = self._calendar(company_id, subscription.project_id, now)
            orders = self.repository.list_subscription_orders(subscription.id)
            candidates = sorted(
                (
                    order
                    for order in orders
                    if order.status is OrderStatus.ACTIVE
                    and start <= order.order_date <= end
                ),
                key=lambda order: order.order_date,
            )
            changes = ChangeSet()
            pending: Counter[tuple[int, int]] = Counter()
            frozen: list[Order] = []
            replacements: list[Order] = []
            skipped: list[tuple[date, Failure]] = []
            current = subscription
            for order in candidates:
                staged = self._stage_freeze(
                    changes, current, order, orders, calendar, reason, pending
                )
                if isinstance(staged, Failure):
                    skipped.append((order.order_date, staged))
                    if staged.kind is ErrorKind.QUOTA_EXCEEDED:
                        break
                    continue
                current = staged.subscription
                frozen.append(staged.order)
                replacements.append(staged.replacement_order)
                orders = [*orders, staged.replacement_order]
            if not frozen:
                if skipped:
                    return skipped[0][1]
                return validation(
                    f"No active orders between {start.isoformat()} "
                    f"and {end.isoformat()}"
                )
            self.repository.apply(changes)
            return FreezePeriodResult(
                subscription=current,
                frozen_orders=tuple(frozen),
                replacement_orders=tuple(replacements),
                skipped=tuple(skipped),
            )

        result = self._commit(attempt, "freeze period")
        if not isinstance(result, Failure):
            logger.info(
                "Froze %s orders of employee %s between %s and %s",
                len(result.frozen_orders),
                employee_id,
                start,
                end,
            )
        return result

    def get_freeze_info(
        self, company_id: UUID, employee_id: UUID
    ) -> FreezeInfo | Failure:
        """Report the employee's freeze usage for the current ISO week."""
        employee = self.repository.get_employee(company_id, employee_id)
        if employee is None:
            return not_found(f"Employee {employee_id} not found")
        calendar = self._calendar(company_id, employee.project_id, self.clock())
        decision = self.quota.can_freeze(employee_id, calendar.today)
        week_start, week_end = week_bounds(calendar.today)
        subscription = self.repository.get_current_subscription(company_id, employee_id)
        frozen: tuple[Order, ...] = ()
        if subscription is not None:
            frozen = tuple(
                order
                for order in self.repository.list_subscription_orders(subscription.id)
                if order.status is OrderStatus.FROZEN
            )
        return FreezeInfo(
            employee_id=employee_id,
            used_this_week=decision.used,
            remaining=decision.remaining,
            weekly_limit=decision.limit,
            week_start=week_start,
            week_end=week_end,
            subscription=subscription,
            frozen_orders=frozen,
        )

    # helpers

    def _commit(self, attempt: Callable[[], T], operation: str) -> T:
        return commit_with_retry(
            attempt, operation, max_attempts=self.max_commit_attempts
        )

    def _calendar(
        self, company_id: UUID, project_id: UUID | None, now: datetime
    ) -> CalendarSnapshot:
        tenant = self.repository.get_tenant_config(company_id, project_id)
        if tenant is None:
            return snapshot(now, self.defaults.timezone, self.defaults.cutoff_time)
        return snapshot(now, tenant.timezone, tenant.cutoff_time)

    def _plan(self, request: SubscriptionRequest) -> list[date] | Failure:
        if request.schedule_type is ScheduleType.CUSTOM and not request.custom_dates:
            return validation("Custom schedules need at least one date")
        if request.end_date is not None:
            if request.end_date < request.start_date:
                return validation("End date must not be before start date")
            span = (request.end_date - request.start_date).days + 1
            dates = [
                day
                for day in self.schedule.plan_dates(
                    request.start_date,
                    span,
                    request.schedule_type,
                    request.custom_dates,
                )
                if day <= request.end_date
            ]
        elif request.total_days is not None:
            dates = self.schedule.plan_dates(
                request.start_date,
                request.total_days,
                request.schedule_type,
                request.custom_dates,
            )
        else:
            return validation("Either an end date or a day count is required")
        if len(dates) < self.min_subscription_days:
            return validation(
                f"A subscription needs at least {self.min_subscription_days} days"
            )
        return dates

    def _owning_subscription(self, company_id: UUID, order: Order) -> Subscription:
        subscription = self.repository.get_subscription(
            company_id, order.subscription_id
        )
        if subscription is None:
            raise IntegrityViolation(
                f"Order {order.id} references missing subscription "
                f"{order.subscription_id}"
            )
        return subscription

    def _stage_freeze(
        self,
        changes: ChangeSet,
        subscription: Subscription,
        order: Order,
        orders: list[Order],
        calendar: CalendarSnapshot,
        reason: str | None,
        pending: Counter[tuple[int, int]],
    ) -> FreezeResult | Failure:
        week = iso_week(order.order_date)
        decision = self.quota.can_freeze(
            order.employee_id, order.order_date, pending=pending[week]
        )
        last = max(
            (o.order_date for o in orders if o.status is not OrderStatus.CANCELLED),
            default=order.order_date,
        )
        replacement_date = self.schedule.tail_dates(last, 1)[0]
        frozen = order_machine.freeze(
            order, calendar, decision, replacement_date, reason
        )
        if isinstance(frozen, Failure):
            return frozen
        replacement = self.schedule.build_orders(
            subscription, [replacement_date], calendar.now_utc
        )[0]
        extended = subscription_machine.extend_by_frozen_order(
            subscription, calendar.now_utc
        )
        pending[week] += 1
        changes.save_order(frozen)
        changes.save_order(replacement)
        changes.save_subscription(extended)
        changes.freeze_records.append(
            self.quota.record(order, decision, calendar.now_utc)
        )
        return FreezeResult(
            order=frozen, replacement_order=replacement, subscription=extended
        )

    def _stage_combo(
        self,
        changes: ChangeSet,
        subscription: Subscription,
        combo_type: str,
        price: Decimal,
        now: datetime,
    ) -> ComboChange | Failure:
        calendar = self._calendar(subscription.company_id, subscription.project_id, now)
        remaining = [
            order
            for order in self.repository.list_subscription_orders(subscription.id)
            if order.status in CHANGEABLE_ORDER_STATUSES
            and not calendar.is_locked(order.order_date)
        ]
        changed = subscription_machine.change_combo(
            subscription, combo_type, price, len(remaining), calendar.now_utc
        )
        if isinstance(changed, Failure):
            return changed
        changes.save_subscription(changed)
        for order in remaining:
            changes.save_order(
                replace(
                    order,
                    combo_type=combo_type,
                    price=price,
                    updated_at=calendar.now_utc,
                )
            )
        return ComboChange(subscription=changed, updated_orders=len(remaining))


def _require_active(subscription: Subscription, verb: str = "frozen") -> Failure | None:
    if subscription.status is SubscriptionStatus.ACTIVE:
        return None
    return invalid_transition(
        f"Subscription is {subscription.status.value.lower()}, "
        f"orders cannot be {verb}"
    )


def _unknown_combo(combo_type: str, pricing: ComboPricing) -> Failure:
    return validation(
        f"Unknown combo type {combo_type!r}; expected one of "
        f"{', '.join(pricing.combos())}"
    )


def _subscription_not_found(subscription_id: UUID) -> Failure:
    return not_found(f"Subscription {subscription_id} not found")


def _order_not_found(order_id: UUID) -> Failure:
    return not_found(f"Order {order_id} not found")
