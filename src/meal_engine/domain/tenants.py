"""Domain models supplied by tenant configuration and the roster."""

from dataclasses import dataclass
from datetime import time
from decimal import Decimal
from uuid import UUID

from meal_engine.domain.ledger import AccountType


@dataclass(frozen=True)
class Employee:
    """Roster entry for an employee."""

    id: UUID
    company_id: UUID
    project_id: UUID
    full_name: str = ""


@dataclass(frozen=True)
class TenantConfig:
    """Budget and calendar settings of a company or project."""

    account_id: UUID
    account_type: AccountType
    company_id: UUID
    budget: Decimal
    overdraft_limit: Decimal
    currency_code: str
    timezone: str
    cutoff_time: time


@dataclass(frozen=True)
class TenantDefaults:
    """Fallbacks for tenants that leave calendar or currency settings empty."""

    timezone: str = "Asia/Dushanbe"
    cutoff_time: time = time(10, 30)
    currency_code: str = "TJS"
