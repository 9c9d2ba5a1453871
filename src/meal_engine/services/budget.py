"""Budget consumption and forecast figures for the dashboard."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Protocol
from uuid import UUID

from meal_engine.domain.dashboard import (
    BudgetMetrics,
    DashboardSummary,
    OrderStatistics,
)
from meal_engine.domain.errors import Failure, not_found
from meal_engine.domain.orders import Order, OrderStatus
from meal_engine.domain.tenants import TenantConfig
from meal_engine.services.calendar import CalendarSnapshot, format_cutoff, snapshot

logger = logging.getLogger(__name__)

LOW_BUDGET_THRESHOLD = Decimal("0.20")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


class AccountRepository(Protocol):
    """Persistence interface for tenant accounts and their orders."""

    def get_tenant_config(
        self, company_id: UUID, project_id: UUID | None = None
    ) -> TenantConfig | None:
        """Return budget and calendar settings of a company or project."""

    def list_account_orders(
        self, company_id: UUID, project_id: UUID | None = None
    ) -> list[Order]:
        """Return every order of a company, or of one of its projects."""


def calculate_budget_metrics(
    budget: Decimal,
    overdraft_limit: Decimal,
    forecast: Decimal,
    currency_code: str,
    threshold: Decimal = LOW_BUDGET_THRESHOLD,
) -> BudgetMetrics:
    """Compute consumption, availability and the low-budget warning."""
    available = budget + overdraft_limit
    denominator = budget if budget > 0 else available
    consumption = (
        _round(forecast / denominator * HUNDRED, 1) if denominator > 0 else ZERO
    )
    is_low = budget <= 0 or (available > 0 and budget / available < threshold)

    warning: str | None = None
    if budget < 0:
        warning = (
            f"Budget is negative: {budget:,.0f} {currency_code}. Overdraft in use."
        )
    elif budget == 0:
        warning = "Budget exhausted. Please top up the account."
    elif is_low:
        remaining = _round(budget / available * HUNDRED, 0) if available > 0 else ZERO
        warning = (
            f"Low remaining budget: {budget:,.0f} {currency_code} ({remaining}%)"
        )

    return BudgetMetrics(
        consumption_percent=consumption,
        available_budget=available,
        is_low_budget=is_low,
        low_budget_warning=warning,
    )


def calculate_order_statistics(
    orders: list[Order], calendar: CalendarSnapshot
) -> OrderStatistics:
    """Aggregate live order state into counts and the spending forecast."""
    active = [order for order in orders if order.status is OrderStatus.ACTIVE]
    today_orders = sum(1 for order in orders if order.order_date == calendar.today)
    yesterday_orders = sum(
        1 for order in orders if order.order_date == calendar.yesterday
    )
    change = today_orders - yesterday_orders
    change_percent = (
        _round(Decimal(change) / Decimal(yesterday_orders) * HUNDRED, 1)
        if yesterday_orders > 0
        else ZERO
    )
    return OrderStatistics(
        total_orders=len(orders),
        active_orders=len(active),
        paused_orders=_count(orders, OrderStatus.PAUSED),
        frozen_orders=_count(orders, OrderStatus.FROZEN),
        forecast=sum((order.price for order in active), ZERO),
        today_orders=today_orders,
        yesterday_orders=yesterday_orders,
        orders_change=change,
        orders_change_percent=change_percent,
    )


@dataclass
class DashboardService:
    """Read-side aggregation of budget and order figures."""

    repository: AccountRepository
    clock: Callable[[], datetime]
    low_budget_threshold: Decimal = LOW_BUDGET_THRESHOLD

    def get_dashboard(
        self, company_id: UUID, project_id: UUID | None = None
    ) -> DashboardSummary | Failure:
        """Return the dashboard for a company or one of its projects."""
        tenant = self.repository.get_tenant_config(company_id, project_id)
        if tenant is None:
            return not_found("Project not found" if project_id else "Company not found")
        calendar = snapshot(self.clock(), tenant.timezone, tenant.cutoff_time)
        orders = self.repository.list_account_orders(company_id, project_id)
        statistics = calculate_order_statistics(orders, calendar)
        metrics = calculate_budget_metrics(
            tenant.budget,
            tenant.overdraft_limit,
            statistics.forecast,
            tenant.currency_code,
            self.low_budget_threshold,
        )
        logger.debug(
            "Dashboard for account %s: forecast=%s orders=%s",
            tenant.account_id,
            statistics.forecast,
            statistics.total_orders,
        )
        return DashboardSummary(
            account_id=tenant.account_id,
            total_budget=tenant.budget,
            overdraft_limit=tenant.overdraft_limit,
            currency_code=tenant.currency_code,
            statistics=statistics,
            budget=metrics,
            cutoff_time=format_cutoff(tenant.cutoff_time),
            is_cutoff_passed=calendar.is_cutoff_passed,
            timezone=calendar.timezone,
        )


def _count(orders: list[Order], status: OrderStatus) -> int:
    return sum(1 for order in orders if order.status is status)


def _round(value: Decimal, places: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_EVEN)
