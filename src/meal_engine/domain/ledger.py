"""Domain models for the account ledger."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


class AccountType(Enum):
    """Owners of a balance."""

    COMPANY = "COMPANY"
    PROJECT = "PROJECT"


class TransactionType(Enum):
    """Kinds of balance-affecting events."""

    DEPOSIT = "DEPOSIT"
    LUNCH_DEDUCTION = "LUNCH_DEDUCTION"
    GUEST_ORDER = "GUEST_ORDER"
    CLIENT_APP_ORDER = "CLIENT_APP_ORDER"
    REFUND = "REFUND"

    @property
    def is_credit(self) -> bool:
        return self in {TransactionType.DEPOSIT, TransactionType.REFUND}


@dataclass(frozen=True)
class LedgerEntry:
    """Append-only record of one balance change with its running balance."""

    id: UUID
    company_id: UUID
    account_id: UUID
    account_type: AccountType
    sequence: int
    type: TransactionType
    amount: Decimal
    balance_after: Decimal
    created_at: datetime
    description: str | None = None
    order_id: UUID | None = None
    invoice_id: UUID | None = None


@dataclass(frozen=True)
class LedgerVerification:
    """Result of replaying an account's ledger."""

    account_id: UUID
    is_valid: bool
    entries_checked: int
    balance: Decimal
    first_broken_entry_id: UUID | None = None
