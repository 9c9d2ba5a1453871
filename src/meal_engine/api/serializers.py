"""JSON shapes of domain values returned by the API."""

from meal_engine.domain.dashboard import DashboardSummary
from meal_engine.domain.ledger import LedgerEntry, LedgerVerification
from meal_engine.domain.orders import Order
from meal_engine.domain.outcomes import FreezeInfo, SettlementReport
from meal_engine.domain.subscriptions import Subscription


def serialize_subscription(subscription: Subscription) -> dict[str, object]:
    return {
        "id": str(subscription.id),
        "employee_id": str(subscription.employee_id),
        "project_id": str(subscription.project_id),
        "start_date": subscription.start_date.isoformat(),
        "end_date": subscription.end_date.isoformat(),
        "total_days": subscription.total_days,
        "total_price": subscription.total_price,
        "combo_type": subscription.combo_type,
        "price": subscription.price,
        "schedule_type": subscription.schedule_type.value,
        "status": subscription.status.value,
        "paused_at": subscription.paused_at.isoformat()
        if subscription.paused_at
        else None,
        "paused_days_count": subscription.paused_days_count,
        "original_end_date": subscription.original_end_date.isoformat()
        if subscription.original_end_date
        else None,
        "frozen_days_count": subscription.frozen_days_count,
    }


def serialize_order(order: Order) -> dict[str, object]:
    return {
        "id": str(order.id),
        "subscription_id": str(order.subscription_id),
        "employee_id": str(order.employee_id),
        "order_date": order.order_date.isoformat(),
        "combo_type": order.combo_type,
        "price": order.price,
        "status": order.status.value,
        "frozen_at": order.frozen_at.isoformat() if order.frozen_at else None,
        "frozen_reason": order.frozen_reason,
        "replacement_date": order.replacement_date.isoformat()
        if order.replacement_date
        else None,
    }


def serialize_freeze_info(info: FreezeInfo) -> dict[str, object]:
    subscription = info.subscription
    return {
        "employee_id": str(info.employee_id),
        "used_this_week": info.used_this_week,
        "remaining": info.remaining,
        "weekly_limit": info.weekly_limit,
        "week_start": info.week_start.isoformat(),
        "week_end": info.week_end.isoformat(),
        "subscription": serialize_subscription(subscription) if subscription else None,
        "frozen_orders": [serialize_order(order) for order in info.frozen_orders],
    }


def serialize_dashboard(summary: DashboardSummary) -> dict[str, object]:
    statistics = summary.statistics
    budget = summary.budget
    return {
        "account_id": str(summary.account_id),
        "total_budget": summary.total_budget,
        "overdraft_limit": summary.overdraft_limit,
        "currency_code": summary.currency_code,
        "forecast": statistics.forecast,
        "total_orders": statistics.total_orders,
        "active_orders": statistics.active_orders,
        "paused_orders": statistics.paused_orders,
        "frozen_orders": statistics.frozen_orders,
        "today_orders": statistics.today_orders,
        "yesterday_orders": statistics.yesterday_orders,
        "orders_change": statistics.orders_change,
        "orders_change_percent": statistics.orders_change_percent,
        "budget_consumption_percent": budget.consumption_percent,
        "available_budget": budget.available_budget,
        "is_low_budget": budget.is_low_budget,
        "low_budget_warning": budget.low_budget_warning,
        "cutoff_time": summary.cutoff_time,
        "is_cutoff_passed": summary.is_cutoff_passed,
        "timezone": summary.timezone,
    }


def serialize_ledger_entry(entry: LedgerEntry) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "account_id": str(entry.account_id),
        "account_type": entry.account_type.value,
        "sequence": entry.sequence,
        "type": entry.type.value,
        "amount": entry.amount,
        "balance_after": entry.balance_after,
        "created_at": entry.created_at.isoformat(),
        "description": entry.description,
        "order_id": str(entry.order_id) if entry.order_id else None,
        "invoice_id": str(entry.invoice_id) if entry.invoice_id else None,
    }


def serialize_verification(result: LedgerVerification) -> dict[str, object]:
    return {
        "account_id": str(result.account_id),
        "is_valid": result.is_valid,
        "entries_checked": result.entries_checked,
        "balance": result.balance,
        "first_broken_entry_id": str(result.first_broken_entry_id)
        if result.first_broken_entry_id
        else None,
    }


def serialize_settlement(report: SettlementReport) -> dict[str, object]:
    return {
        "projects": report.projects,
        "completed_orders": report.completed_orders,
        "completed_subscriptions": report.completed_subscriptions,
        "deducted": report.deducted,
        "failed_projects": [str(project_id) for project_id in report.failed_projects],
    }
