"""Daily settlement of delivered orders."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from meal_engine.domain.changes import ChangeSet
from meal_engine.domain.errors import (
    CommitRetriesExhausted,
    Failure,
    IntegrityViolation,
)
from meal_engine.domain.ledger import LedgerEntry, TransactionType
from meal_engine.domain.orders import Order
from meal_engine.domain.outcomes import SettlementReport
from meal_engine.domain.subscriptions import Subscription
from meal_engine.domain.tenants import TenantConfig
from meal_engine.services import order_machine, subscription_machine
from meal_engine.services.calendar import snapshot
from meal_engine.services.commits import DEFAULT_MAX_ATTEMPTS, commit_with_retry
from meal_engine.services.ledger import next_entry

logger = logging.getLogger(__name__)


class SettlementRepository(Protocol):
    """Persistence interface for the settlement sweep."""

    def list_project_tenants(self) -> list[TenantConfig]:
        """Return the settings of every project account."""

    def list_open_orders(self, project_id: UUID, through: date) -> list[Order]:
        """Return active orders of a project dated on or before ``through``."""

    def list_open_subscriptions(self, project_id: UUID) -> list[Subscription]:
        """Return the active and paused subscriptions of a project."""

    def get_last_entry(self, account_id: UUID) -> LedgerEntry | None:
        """Return the latest ledger entry of an account."""

    def apply(self, changes: ChangeSet) -> None:
        """Commit a change set atomically."""


@dataclass(frozen=True)
class ProjectSettlement:
    completed_orders: int
    completed_subscriptions: int
    deducted: Decimal


@dataclass
class SettlementService:
    """Completes orders whose day is locked and charges them to the project.

    Today's orders settle once the project's cutoff has passed; earlier
    orders settle on the next sweep. Subscriptions whose window has ended
    are completed in the same commit.
    """

    repository: SettlementRepository
    clock: Callable[[], datetime]
    max_commit_attempts: int = DEFAULT_MAX_ATTEMPTS

    def run(self) -> SettlementReport:
        now = self.clock()
        projects = completed_orders = completed_subscriptions = 0
        deducted = Decimal("0")
        failed: list[UUID] = []
        for tenant in self.repository.list_project_tenants():
            try:
                result = commit_with_retry(
                    lambda tenant=tenant: self._settle(tenant, now),
                    f"settlement of project {tenant.account_id}",
                    max_attempts=self.max_commit_attempts,
                )
            except (CommitRetriesExhausted, IntegrityViolation):
                logger.exception(
                    "Settlement of project %s failed, continuing with the rest",
                    tenant.account_id,
                )
                failed.append(tenant.account_id)
                continue
            projects += 1
            completed_orders += result.completed_orders
            completed_subscriptions += result.completed_subscriptions
            deducted += result.deducted
        report = SettlementReport(
            projects=projects,
            completed_orders=completed_orders,
            completed_subscriptions=completed_subscriptions,
            deducted=deducted,
            failed_projects=tuple(failed),
        )
        logger.info(
            "Settlement finished: %s projects, %s orders, %s subscriptions, "
            "%s charged, %s failed",
            report.projects,
            report.completed_orders,
            report.completed_subscriptions,
            report.deducted,
            len(report.failed_projects),
        )
        return report

    def _settle(self, tenant: TenantConfig, now: datetime) -> ProjectSettlement:
        calendar = snapshot(now, tenant.timezone, tenant.cutoff_time)
        through = calendar.today if calendar.is_cutoff_passed else calendar.yesterday
        changes = ChangeSet()
        last_entry = self.repository.get_last_entry(tenant.account_id)
        deducted = Decimal("0")
        orders = sorted(
            self.repository.list_open_orders(tenant.account_id, through),
            key=lambda order: (order.order_date, str(order.id)),
        )
        for order in orders:
            completed = order_machine.complete(order, calendar)
            if isinstance(completed, Failure):
                logger.debug("Order %s not settled: %s", order.id, completed.message)
                continue
            changes.save_order(completed)
            last_entry = next_entry(
                last_entry,
                company_id=tenant.company_id,
                account_id=tenant.account_id,
                account_type=tenant.account_type,
                transaction_type=TransactionType.LUNCH_DEDUCTION,
                amount=order.price,
                created_at=calendar.now_utc,
                description=f"{order.combo_type} on {order.order_date.isoformat()}",
                order_id=order.id,
            )
            changes.ledger_entries.append(last_entry)
            deducted += order.price
        finished = 0
        for subscription in self.repository.list_open_subscriptions(
            tenant.account_id
        ):
            ended = subscription_machine.complete_if_ended(subscription, calendar)
            if ended is not None:
                changes.save_subscription(ended)
                finished += 1
        if not changes.is_empty():
            self.repository.apply(changes)
            logger.info(
                "Settled project %s through %s: %s orders, %s subscriptions",
                tenant.account_id,
                through,
                len(changes.orders),
                finished,
            )
        return ProjectSettlement(
            completed_orders=len(changes.orders),
            completed_subscriptions=finished,
            deducted=deducted,
        )
