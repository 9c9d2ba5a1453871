"""Supabase-backed repository for account orders, ledger and settlement."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from meal_engine.adapters.rows import (
    LEDGER_COLUMNS,
    OPEN_SUBSCRIPTION_STATUSES,
    ORDER_COLUMNS,
    SUBSCRIPTION_COLUMNS,
    parse_ledger_entry,
    parse_order,
    parse_subscription,
)
from meal_engine.adapters.supabase_change_set import apply_change_set
from meal_engine.adapters.supabase_tenant_repository import SupabaseTenantRepository
from meal_engine.domain.changes import ChangeSet
from meal_engine.domain.ledger import LedgerEntry
from meal_engine.domain.orders import Order, OrderStatus
from meal_engine.domain.subscriptions import Subscription
from meal_engine.services.budget import AccountRepository
from meal_engine.services.ledger import LedgerRepository
from meal_engine.services.settlement import SettlementRepository


@dataclass
class SupabaseAccountRepository(
    SupabaseTenantRepository,
    AccountRepository,
    LedgerRepository,
    SettlementRepository,
):
    """Supabase implementation for account-level reads and ledger writes."""

    def list_account_orders(
        self, company_id: UUID, project_id: UUID | None = None
    ) -> list[Order]:
        query = (
            self.client.table("orders")
            .select(ORDER_COLUMNS)
            .eq("company_id", str(company_id))
        )
        if project_id is not None:
            query = query.eq("project_id", str(project_id))
        response = query.order("order_date", desc=False).execute()
        return [parse_order(row) for row in response.data or []]

    def list_open_orders(self, project_id: UUID, through: date) -> list[Order]:
        response = (
            self.client.table("orders")
            .select(ORDER_COLUMNS)
            .eq("project_id", str(project_id))
            .eq("status", OrderStatus.ACTIVE.value)
            .lte("order_date", through.isoformat())
            .order("order_date", desc=False)
            .execute()
        )
        return [parse_order(row) for row in response.data or []]

    def list_open_subscriptions(self, project_id: UUID) -> list[Subscription]:
        response = (
            self.client.table("subscriptions")
            .select(SUBSCRIPTION_COLUMNS)
            .eq("project_id", str(project_id))
            .in_("status", OPEN_SUBSCRIPTION_STATUSES)
            .execute()
        )
        return [parse_subscription(row) for row in response.data or []]

    def get_last_entry(self, account_id: UUID) -> LedgerEntry | None:
        response = (
            self.client.table("ledger_entries")
            .select(LEDGER_COLUMNS)
            .eq("account_id", str(account_id))
            .order("sequence", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_ledger_entry(response.data[0])

    def list_entries(
        self, account_id: UUID, limit: int | None = None
    ) -> list[LedgerEntry]:
        query = (
            self.client.table("ledger_entries")
            .select(LEDGER_COLUMNS)
            .eq("account_id", str(account_id))
        )
        if limit is None:
            response = query.order("sequence", desc=False).execute()
            return [parse_ledger_entry(row) for row in response.data or []]
        response = query.order("sequence", desc=True).limit(limit).execute()
        return [parse_ledger_entry(row) for row in reversed(response.data or [])]

    def apply(self, changes: ChangeSet) -> None:
        apply_change_set(self.client, changes)
