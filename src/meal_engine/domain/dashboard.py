"""Domain models for the budget dashboard."""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class BudgetMetrics:
    """Budget consumption figures for an account."""

    consumption_percent: Decimal
    available_budget: Decimal
    is_low_budget: bool
    low_budget_warning: str | None


@dataclass(frozen=True)
class OrderStatistics:
    """Order counts and forecast for an account."""

    total_orders: int
    active_orders: int
    paused_orders: int
    frozen_orders: int
    forecast: Decimal
    today_orders: int
    yesterday_orders: int
    orders_change: int
    orders_change_percent: Decimal


@dataclass(frozen=True)
class DashboardSummary:
    """Everything the dashboard shows for one account."""

    account_id: UUID
    total_budget: Decimal
    overdraft_limit: Decimal
    currency_code: str
    statistics: OrderStatistics
    budget: BudgetMetrics
    cutoff_time: str
    is_cutoff_passed: bool
    timezone: str
