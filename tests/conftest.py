"""Shared test fixtures."""

from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, time
from decimal import Decimal
from uuid import UUID
from zoneinfo import ZoneInfo

import pytest

from meal_engine.config import DEFAULT_COMBO_PRICES, Settings
from meal_engine.containers import AppContainer
from meal_engine.domain.changes import ChangeSet
from meal_engine.domain.errors import ConcurrencyConflict
from meal_engine.domain.ledger import AccountType, LedgerEntry
from meal_engine.domain.orders import FreezeRecord, Order, OrderStatus
from meal_engine.domain.outcomes import SubscriptionRequest
from meal_engine.domain.subscriptions import Subscription, SubscriptionStatus
from meal_engine.domain.tenants import Employee, TenantConfig, TenantDefaults
from meal_engine.services.budget import AccountRepository, DashboardService
from meal_engine.services.ledger import LedgerRepository, LedgerService
from meal_engine.services.pricing import ComboPricing
from meal_engine.services.settlement import SettlementRepository, SettlementService
from meal_engine.services.subscriptions import (
    SubscriptionRepository,
    SubscriptionService,
)

DUSHANBE = ZoneInfo("Asia/Dushanbe")
COMPANY_ID = UUID("00000000-0000-0000-0000-00000000c001")
PROJECT_ID = UUID("00000000-0000-0000-0000-00000000b001")
EMPLOYEE_ID = UUID("00000000-0000-0000-0000-00000000e001")
OTHER_EMPLOYEE_ID = UUID("00000000-0000-0000-0000-00000000e002")


def local_time(
    day: date, hour: int = 8, minute: int = 0, second: int = 0
) -> datetime:
    """Return the UTC instant of a Dushanbe wall-clock time."""
    local = datetime.combine(day, time(hour, minute, second), tzinfo=DUSHANBE)
    return local.astimezone(UTC)


@dataclass
class FakeClock:
    now: datetime

    def __call__(self) -> datetime:
        return self.now

    def set_local(self, day: date, hour: int = 8, minute: int = 0) -> None:
        self.now = local_time(day, hour, minute)


@dataclass
class InMemoryRepository(
    SubscriptionRepository,
    AccountRepository,
    LedgerRepository,
    SettlementRepository,
):
    """Single store behind every repository interface.

    ``apply`` performs the same checks as the database: entity versions, one
    open subscription per employee, one live order per employee and day,
    unique freeze slots, unique ledger sequences and freeze records keeping
    their orders. Nothing is written when a check fails.
    """

    companies: dict[UUID, TenantConfig] = field(default_factory=dict)
    projects: dict[UUID, TenantConfig] = field(default_factory=dict)
    employees: dict[UUID, Employee] = field(default_factory=dict)
    subscriptions: dict[UUID, Subscription] = field(default_factory=dict)
    orders: dict[UUID, Order] = field(default_factory=dict)
    freeze_records: list[FreezeRecord] = field(default_factory=list)
    ledger_entries: list[LedgerEntry] = field(default_factory=list)
    conflicts_to_raise: int = 0
    stale_freeze_counts: list[int] = field(default_factory=list)
    stale_subscription_reads: int = 0
    apply_calls: int = 0

    def get_tenant_config(
        self, company_id: UUID, project_id: UUID | None = None
    ) -> TenantConfig | None:
        if project_id is None:
            return self.companies.get(company_id)
        project = self.projects.get(project_id)
        if project is None or project.company_id != company_id:
            return None
        return project

    def list_project_tenants(self) -> list[TenantConfig]:
        return list(self.projects.values())

    def get_employee(self, company_id: UUID, employee_id: UUID) -> Employee | None:
        employee = self.employees.get(employee_id)
        if employee is None or employee.company_id != company_id:
            return None
        return employee

    def get_subscription(
        self, company_id: UUID, subscription_id: UUID
    ) -> Subscription | None:
        subscription = self.subscriptions.get(subscription_id)
        if subscription is None or subscription.company_id != company_id:
            return None
        return subscription

    def get_current_subscription(
        self, company_id: UUID, employee_id: UUID
    ) -> Subscription | None:
        if self.stale_subscription_reads > 0:
            self.stale_subscription_reads -= 1
            return None
        candidates = [
            item
            for item in self.subscriptions.values()
            if item.company_id == company_id
            and item.employee_id == employee_id
            and item.status is not SubscriptionStatus.COMPLETED
        ]
        return max(candidates, key=lambda item: item.start_date, default=None)

    def list_open_subscriptions(self, project_id: UUID) -> list[Subscription]:
        return [
            item
            for item in self.subscriptions.values()
            if item.project_id == project_id
            and item.status is not SubscriptionStatus.COMPLETED
        ]

    def get_order(self, company_id: UUID, order_id: UUID) -> Order | None:
        order = self.orders.get(order_id)
        if order is None or order.company_id != company_id:
            return None
        return order

    def list_subscription_orders(self, subscription_id: UUID) -> list[Order]:
        return sorted(
            (o for o in self.orders.values() if o.subscription_id == subscription_id),
            key=lambda order: order.order_date,
        )

    def list_employee_orders(
        self, employee_id: UUID, start: date, end: date
    ) -> list[Order]:
        return sorted(
            (
                o
                for o in self.orders.values()
                if o.employee_id == employee_id and start <= o.order_date <= end
            ),
            key=lambda order: order.order_date,
        )

    def list_account_orders(
        self, company_id: UUID, project_id: UUID | None = None
    ) -> list[Order]:
        return [
            o
            for o in self.orders.values()
            if o.company_id == company_id
            and (project_id is None or o.project_id == project_id)
        ]

    def list_open_orders(self, project_id: UUID, through: date) -> list[Order]:
        return [
            o
            for o in self.orders.values()
            if o.project_id == project_id
            and o.status is OrderStatus.ACTIVE
            and o.order_date <= through
        ]

    def count_freezes(self, employee_id: UUID, week_year: int, week_number: int) -> int:
        if self.stale_freeze_counts:
            return self.stale_freeze_counts.pop(0)
        return sum(
            1
            for record in self.freeze_records
            if record.employee_id == employee_id
            and record.week_year == week_year
            and record.week_number == week_number
        )

    def has_freeze_records(self, order_id: UUID) -> bool:
        return any(record.order_id == order_id for record in self.freeze_records)

    def get_last_entry(self, account_id: UUID) -> LedgerEntry | None:
        entries = self.list_entries(account_id)
        return entries[-1] if entries else None

    def list_entries(
        self, account_id: UUID, limit: int | None = None
    ) -> list[LedgerEntry]:
        entries = sorted(
            (e for e in self.ledger_entries if e.account_id == account_id),
            key=lambda entry: entry.sequence,
        )
        return entries[-limit:] if limit else entries

    def apply(self, changes: ChangeSet) -> None:
        self.apply_calls += 1
        if self.conflicts_to_raise > 0:
            self.conflicts_to_raise -= 1
            raise ConcurrencyConflict("simulated concurrent update")
        for subscription in changes.subscriptions:
            _check_version(self.subscriptions.get(subscription.id), subscription)
        for order in [*changes.orders, *changes.deleted_orders]:
            _check_version(self.orders.get(order.id), order)

        referenced = {record.order_id for record in self.freeze_records}
        for order in changes.deleted_orders:
            if order.id in referenced:
                raise ValueError(f"order {order.id} is referenced by freeze records")

        subscriptions = {
            **self.subscriptions,
            **{item.id: item for item in changes.subscriptions},
        }
        open_per_employee = Counter(
            item.employee_id
            for item in subscriptions.values()
            if item.status is not SubscriptionStatus.COMPLETED
        )
        if any(count > 1 for count in open_per_employee.values()):
            raise ConcurrencyConflict("employee already has an open subscription")

        orders = dict(self.orders)
        for order in changes.deleted_orders:
            del orders[order.id]
        for order in changes.orders:
            orders[order.id] = replace(order, version=order.version + 1)
        live_days = Counter(
            (o.employee_id, o.order_date)
            for o in orders.values()
            if o.status is not OrderStatus.CANCELLED
        )
        if any(count > 1 for count in live_days.values()):
            raise ConcurrencyConflict("duplicate order for employee and day")
        slots = Counter(
            (r.employee_id, r.week_year, r.week_number, r.ordinal)
            for r in [*self.freeze_records, *changes.freeze_records]
        )
        if any(count > 1 for count in slots.values()):
            raise ConcurrencyConflict("freeze slot already taken")
        sequences = Counter(
            (e.account_id, e.sequence)
            for e in [*self.ledger_entries, *changes.ledger_entries]
        )
        if any(count > 1 for count in sequences.values()):
            raise ConcurrencyConflict("ledger sequence already taken")

        self.orders = orders
        for subscription in changes.subscriptions:
            self.subscriptions[subscription.id] = replace(
                subscription, version=subscription.version + 1
            )
        self.freeze_records.extend(changes.freeze_records)
        self.ledger_entries.extend(changes.ledger_entries)

    def orders_by_date(self, subscription_id: UUID) -> dict[date, Order]:
        return {
            order.order_date: order
            for order in self.list_subscription_orders(subscription_id)
        }


def _check_version(stored, incoming) -> None:  # type: ignore[no-untyped-def]
    stored_version = stored.version if stored else 0
    if stored_version != incoming.version:
        raise ConcurrencyConflict(f"{incoming.id} changed concurrently")


def make_tenant(
    account_id: UUID = PROJECT_ID,
    account_type: AccountType = AccountType.PROJECT,
    budget: Decimal = Decimal("1000"),
    overdraft_limit: Decimal = Decimal("0"),
    timezone: str = "Asia/Dushanbe",
    cutoff_time: time = time(10, 30),
) -> TenantConfig:
    return TenantConfig(
        account_id=account_id,
        account_type=account_type,
        company_id=COMPANY_ID,
        budget=budget,
        overdraft_limit=overdraft_limit,
        currency_code="TJS",
        timezone=timezone,
        cutoff_time=cutoff_time,
    )


def seed(repository: InMemoryRepository) -> InMemoryRepository:
    repository.companies[COMPANY_ID] = make_tenant(
        COMPANY_ID, AccountType.COMPANY, budget=Decimal("5000")
    )
    repository.projects[PROJECT_ID] = make_tenant()
    for employee_id in (EMPLOYEE_ID, OTHER_EMPLOYEE_ID):
        repository.employees[employee_id] = Employee(
            id=employee_id, company_id=COMPANY_ID, project_id=PROJECT_ID
        )
    return repository


def subscribe(
    service: SubscriptionService,
    start: date,
    total_days: int = 10,
    employee_id: UUID = EMPLOYEE_ID,
    combo_type: str = "Combo 25",
) -> Subscription:
    created = service.create_subscriptions(
        COMPANY_ID,
        SubscriptionRequest(
            employee_ids=(employee_id,),
            combo_type=combo_type,
            start_date=start,
            total_days=total_days,
        ),
    )
    assert isinstance(created, list)
    return created[0]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        admin_token="admin-token",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(local_time(date(2024, 12, 1)))


@pytest.fixture
def repository() -> InMemoryRepository:
    return seed(InMemoryRepository())


@pytest.fixture
def pricing() -> ComboPricing:
    return ComboPricing.from_mapping(DEFAULT_COMBO_PRICES)


@pytest.fixture
def subscription_service(
    repository: InMemoryRepository, clock: FakeClock, pricing: ComboPricing
) -> SubscriptionService:
    return SubscriptionService(
        repository=repository,
        pricing=pricing,
        clock=clock,
        defaults=TenantDefaults(),
    )


@pytest.fixture
def ledger_service(repository: InMemoryRepository, clock: FakeClock) -> LedgerService:
    return LedgerService(repository=repository, clock=clock)


@pytest.fixture
def settlement_service(
    repository: InMemoryRepository, clock: FakeClock
) -> SettlementService:
    return SettlementService(repository=repository, clock=clock)


@pytest.fixture
def dashboard_service(
    repository: InMemoryRepository, clock: FakeClock
) -> DashboardService:
    return DashboardService(repository=repository, clock=clock)


@pytest.fixture
def container(
    settings: Settings,
    subscription_service: SubscriptionService,
    dashboard_service: DashboardService,
    ledger_service: LedgerService,
    settlement_service: SettlementService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        subscription_service=subscription_service,
        dashboard_service=dashboard_service,
        ledger_service=ledger_service,
        settlement_service=settlement_service,
        scheduler=None,
        close_resources=close_resources,
    )
