"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_engine.adapters.supabase_account_repository import SupabaseAccountRepository
from meal_engine.adapters.supabase_subscription_repository import (
    SupabaseSubscriptionRepository,
)
from meal_engine.config import Settings, build_pricing, build_tenant_defaults
from meal_engine.scheduler import SchedulerManager
from meal_engine.services.budget import DashboardService
from meal_engine.services.calendar import utc_now
from meal_engine.services.ledger import LedgerService
from meal_engine.services.schedule import ScheduleGenerator
from meal_engine.services.settlement import SettlementService
from meal_engine.services.subscriptions import SubscriptionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    subscription_service: SubscriptionService
    dashboard_service: DashboardService
    ledger_service: LedgerService
    settlement_service: SettlementService
    scheduler: SchedulerManager | None
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    defaults = build_tenant_defaults(resolved_settings)
    subscription_repository = SupabaseSubscriptionRepository(supabase_client, defaults)
    account_repository = SupabaseAccountRepository(supabase_client, defaults)
    subscription_service = SubscriptionService(
        repository=subscription_repository,
        pricing=build_pricing(resolved_settings),
        clock=utc_now,
        defaults=defaults,
        schedule=ScheduleGenerator(
            skip_weekends=resolved_settings.schedule_skip_weekends
        ),
        weekly_freeze_limit=resolved_settings.weekly_freeze_limit,
        min_subscription_days=resolved_settings.min_subscription_days,
        max_commit_attempts=resolved_settings.max_commit_attempts,
    )
    dashboard_service = DashboardService(
        repository=account_repository,
        clock=utc_now,
        low_budget_threshold=resolved_settings.low_budget_threshold,
    )
    ledger_service = LedgerService(
        repository=account_repository,
        clock=utc_now,
        max_commit_attempts=resolved_settings.max_commit_attempts,
    )
    settlement_service = SettlementService(
        repository=account_repository,
        clock=utc_now,
        max_commit_attempts=resolved_settings.max_commit_attempts,
    )
    scheduler: SchedulerManager | None = None
    if resolved_settings.settlement_job_enabled:
        scheduler = SchedulerManager()
        scheduler.initialize(
            settlement_service, resolved_settings.settlement_interval_minutes
        )

    async def close_resources() -> None:
        if scheduler is not None:
            scheduler.shutdown(wait=False)

    return AppContainer(
        settings=resolved_settings,
        subscription_service=subscription_service,
        dashboard_service=dashboard_service,
        ledger_service=ledger_service,
        settlement_service=settlement_service,
        scheduler=scheduler,
        close_resources=close_resources,
    )
