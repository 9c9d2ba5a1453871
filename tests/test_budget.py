"""Tests for dashboard budget figures."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from meal_engine.domain.dashboard import DashboardSummary
from meal_engine.domain.errors import ErrorKind, Failure
from meal_engine.services.budget import calculate_budget_metrics
from tests.conftest import COMPANY_ID, PROJECT_ID, make_tenant, subscribe


def test_negative_budget_uses_overdraft() -> None:
    metrics = calculate_budget_metrics(
        Decimal("-50"), Decimal("200"), Decimal("0"), "TJS"
    )

    assert metrics.available_budget == Decimal("150")
    assert metrics.is_low_budget
    assert metrics.low_budget_warning == (
        "Budget is negative: -50 TJS. Overdraft in use."
    )


def test_exhausted_budget() -> None:
    metrics = calculate_budget_metrics(
        Decimal("0"), Decimal("100"), Decimal("0"), "TJS"
    )

    assert metrics.is_low_budget
    assert metrics.low_budget_warning == "Budget exhausted. Please top up the account."


def test_low_budget_share_of_available() -> None:
    metrics = calculate_budget_metrics(
        Decimal("30"), Decimal("200"), Decimal("0"), "TJS"
    )

    assert metrics.is_low_budget
    assert metrics.low_budget_warning == "Low remaining budget: 30 TJS (13%)"


def test_healthy_budget_has_no_warning() -> None:
    metrics = calculate_budget_metrics(
        Decimal("1000"), Decimal("0"), Decimal("250"), "TJS"
    )

    assert not metrics.is_low_budget
    assert metrics.low_budget_warning is None
    assert metrics.consumption_percent == Decimal("25.0")


@pytest.mark.parametrize(
    ("budget", "overdraft", "forecast", "expected"),
    [
        ("-50", "200", "75", "50.0"),
        ("0", "0", "75", "0"),
        ("3000", "0", "1000", "33.3"),
    ],
)
def test_consumption_percent(budget, overdraft, forecast, expected) -> None:
    metrics = calculate_budget_metrics(
        Decimal(budget), Decimal(overdraft), Decimal(forecast), "TJS"
    )

    assert metrics.consumption_percent == Decimal(expected)


def test_dashboard_for_project(
    dashboard_service, subscription_service, repository, clock
) -> None:
    subscribe(subscription_service, date(2024, 12, 1), total_days=5)
    clock.set_local(date(2024, 12, 2), 11, 0)

    summary = dashboard_service.get_dashboard(COMPANY_ID, PROJECT_ID)

    assert isinstance(summary, DashboardSummary)
    assert summary.account_id == PROJECT_ID
    assert summary.statistics.total_orders == 5
    assert summary.statistics.active_orders == 5
    assert summary.statistics.forecast == Decimal("125")
    assert summary.statistics.today_orders == 1
    assert summary.statistics.yesterday_orders == 1
    assert summary.statistics.orders_change_percent == Decimal("0.0")
    assert summary.budget.consumption_percent == Decimal("12.5")
    assert summary.cutoff_time == "10:30"
    assert summary.is_cutoff_passed
    assert summary.timezone == "Asia/Dushanbe"


def test_dashboard_reports_overdraft_scenario(dashboard_service, repository) -> None:
    repository.projects[PROJECT_ID] = make_tenant(
        budget=Decimal("-50"), overdraft_limit=Decimal("200")
    )

    summary = dashboard_service.get_dashboard(COMPANY_ID, PROJECT_ID)

    assert summary.budget.available_budget == Decimal("150")
    assert summary.budget.low_budget_warning == (
        "Budget is negative: -50 TJS. Overdraft in use."
    )


def test_dashboard_for_company(dashboard_service) -> None:
    summary = dashboard_service.get_dashboard(COMPANY_ID)

    assert summary.account_id == COMPANY_ID
    assert summary.total_budget == Decimal("5000")


def test_dashboard_unknown_project(dashboard_service) -> None:
    result = dashboard_service.get_dashboard(COMPANY_ID, uuid4())

    assert isinstance(result, Failure)
    assert result.kind is ErrorKind.NOT_FOUND
    assert result.message == "Project not found"
