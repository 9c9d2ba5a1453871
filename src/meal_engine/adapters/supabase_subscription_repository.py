"""Supabase-backed subscription, order and freeze repository."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from meal_engine.adapters.rows import (
    OPEN_SUBSCRIPTION_STATUSES,
    ORDER_COLUMNS,
    SUBSCRIPTION_COLUMNS,
    parse_order,
    parse_subscription,
)
from meal_engine.adapters.supabase_change_set import apply_change_set
from meal_engine.adapters.supabase_tenant_repository import SupabaseTenantRepository
from meal_engine.domain.changes import ChangeSet
from meal_engine.domain.orders import Order
from meal_engine.domain.subscriptions import Subscription
from meal_engine.domain.tenants import Employee
from meal_engine.services.subscriptions import SubscriptionRepository


@dataclass
class SupabaseSubscriptionRepository(SupabaseTenantRepository, SubscriptionRepository):
    """Supabase implementation for the subscription lifecycle."""

    def get_subscription(
        self, company_id: UUID, subscription_id: UUID
    ) -> Subscription | None:
        response = (
            self.client.table("subscriptions")
            .select(SUBSCRIPTION_COLUMNS)
            .eq("id", str(subscription_id))
            .eq("company_id", str(company_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_subscription(response.data[0])

    def get_current_subscription(
        self, company_id: UUID, employee_id: UUID
    ) -> Subscription | None:
        response = (
            self.client.table("subscriptions")
            .select(SUBSCRIPTION_COLUMNS)
            .eq("company_id", str(company_id))
            .eq("employee_id", str(employee_id))
            .in_("status", OPEN_SUBSCRIPTION_STATUSES)
            .order("start_date", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_subscription(response.data[0])

    def list_subscription_orders(self, subscription_id: UUID) -> list[Order]:
        response = (
            self.client.table("orders")
            .select(ORDER_COLUMNS)
            .eq("subscription_id", str(subscription_id))
            .order("order_date", desc=False)
            .execute()
        )
        return [parse_order(row) for row in response.data or []]

    def get_order(self, company_id: UUID, order_id: UUID) -> Order | None:
        response = (
            self.client.table("orders")
            .select(ORDER_COLUMNS)
            .eq("id", str(order_id))
            .eq("company_id", str(company_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_order(response.data[0])

    def list_employee_orders(
        self, employee_id: UUID, start: date, end: date
    ) -> list[Order]:
        response = (
            self.client.table("orders")
            .select(ORDER_COLUMNS)
            .eq("employee_id", str(employee_id))
            .gte("order_date", start.isoformat())
            .lte("order_date", end.isoformat())
            .order("order_date", desc=False)
            .execute()
        )
        return [parse_order(row) for row in response.data or []]

    def get_employee(self, company_id: UUID, employee_id: UUID) -> Employee | None:
        response = (
            self.client.table("employees")
            .select("id, company_id, project_id, full_name")
            .eq("id", str(employee_id))
            .eq("company_id", str(company_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return Employee(
            id=UUID(str(row["id"])),
            company_id=UUID(str(row["company_id"])),
            project_id=UUID(str(row["project_id"])),
            full_name=str(row.get("full_name") or ""),
        )

    def count_freezes(self, employee_id: UUID, week_year: int, week_number: int) -> int:
        response = (
            self.client.table("freeze_records")
            .select("id")
            .eq("employee_id", str(employee_id))
            .eq("week_year", week_year)
            .eq("week_number", week_number)
            .execute()
        )
        return len(response.data or [])

    def has_freeze_records(self, order_id: UUID) -> bool:
        response = (
            self.client.table("freeze_records")
            .select("id")
            .eq("order_id", str(order_id))
            .limit(1)
            .execute()
        )
        return bool(response.data)

    def apply(self, changes: ChangeSet) -> None:
        apply_change_set(self.client, changes)
