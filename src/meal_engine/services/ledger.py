"""Append-only ledger with a verifiable running balance."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Protocol
from uuid import UUID, uuid4

from meal_engine.domain.changes import ChangeSet
from meal_engine.domain.errors import Failure, not_found, validation
from meal_engine.domain.ledger import (
    AccountType,
    LedgerEntry,
    LedgerVerification,
    TransactionType,
)
from meal_engine.domain.tenants import TenantConfig
from meal_engine.services.commits import DEFAULT_MAX_ATTEMPTS, commit_with_retry

logger = logging.getLogger(__name__)
integrity_logger = logging.getLogger("meal_engine.integrity")

INITIAL_BALANCE = Decimal("0")


class LedgerRepository(Protocol):
    """Persistence interface for ledger entries."""

    def get_last_entry(self, account_id: UUID) -> LedgerEntry | None:
        """Return the entry with the highest sequence for an account."""

    def list_entries(
        self, account_id: UUID, limit: int | None = None
    ) -> list[LedgerEntry]:
        """Return entries in sequence order, the newest ``limit`` when given."""

    def get_tenant_config(
        self, company_id: UUID, project_id: UUID | None = None
    ) -> TenantConfig | None:
        """Return the company, or one of its projects, as a ledger account."""

    def apply(self, changes: ChangeSet) -> None:
        """Commit a change set atomically."""


def signed_amount(transaction_type: TransactionType, amount: Decimal) -> Decimal:
    """Return the amount with the sign implied by the transaction type."""
    magnitude = abs(amount)
    return magnitude if transaction_type.is_credit else -magnitude


def next_entry(
    previous: LedgerEntry | None,
    *,
    company_id: UUID,
    account_id: UUID,
    account_type: AccountType,
    transaction_type: TransactionType,
    amount: Decimal,
    created_at: datetime,
    description: str | None = None,
    order_id: UUID | None = None,
    invoice_id: UUID | None = None,
) -> LedgerEntry:
    """Build the entry following ``previous`` on the same account.

    The running balance always comes from the preceding entry, never from a
    cached account balance.
    """
    balance = previous.balance_after if previous else INITIAL_BALANCE
    sequence = previous.sequence + 1 if previous else 1
    signed = signed_amount(transaction_type, amount)
    return LedgerEntry(
        id=uuid4(),
        company_id=company_id,
        account_id=account_id,
        account_type=account_type,
        sequence=sequence,
        type=transaction_type,
        amount=signed,
        balance_after=balance + signed,
        created_at=created_at,
        description=description,
        order_id=order_id,
        invoice_id=invoice_id,
    )


def verify_chain(account_id: UUID, entries: list[LedgerEntry]) -> LedgerVerification:
    """Replay entries in sequence order and report the first broken link."""
    balance = INITIAL_BALANCE
    checked = 0
    for entry in sorted(entries, key=lambda item: item.sequence):
        checked += 1
        balance += entry.amount
        if entry.balance_after != balance or entry.sequence != checked:
            return LedgerVerification(
                account_id=account_id,
                is_valid=False,
                entries_checked=checked,
                balance=entry.balance_after,
                first_broken_entry_id=entry.id,
            )
    return LedgerVerification(
        account_id=account_id,
        is_valid=True,
        entries_checked=checked,
        balance=balance,
    )


@dataclass
class LedgerService:
    """Records balance-affecting events for company and project accounts.

    An account is the company itself (``account_id == company_id``) or one
    of its projects.
    """

    repository: LedgerRepository
    clock: Callable[[], datetime]
    max_commit_attempts: int = DEFAULT_MAX_ATTEMPTS

    def record(
        self,
        company_id: UUID,
        account_id: UUID,
        transaction_type: TransactionType,
        amount: Decimal,
        description: str | None = None,
        order_id: UUID | None = None,
        invoice_id: UUID | None = None,
    ) -> LedgerEntry | Failure:
        """Append one entry; ``amount`` is a magnitude, the type sets the sign."""
        if amount <= 0:
            return validation("Amount must be greater than zero")
        account = self._find_account(company_id, account_id)
        if account is None:
            return _account_not_found(account_id)
        now = self.clock()

        def attempt() -> LedgerEntry:
            entry = next_entry(
                self.repository.get_last_entry(account_id),
                company_id=company_id,
                account_id=account_id,
                account_type=account.account_type,
                transaction_type=transaction_type,
                amount=amount,
                created_at=now,
                description=description,
                order_id=order_id,
                invoice_id=invoice_id,
            )
            self.repository.apply(ChangeSet(ledger_entries=[entry]))
            return entry

        entry = commit_with_retry(
            attempt, "ledger append", max_attempts=self.max_commit_attempts
        )
        logger.info(
            "Ledger %s on account %s: %s, balance %s",
            transaction_type.value,
            account_id,
            entry.amount,
            entry.balance_after,
        )
        return entry

    def deposit(
        self,
        company_id: UUID,
        account_id: UUID,
        amount: Decimal,
        description: str | None = None,
        invoice_id: UUID | None = None,
    ) -> LedgerEntry | Failure:
        return self.record(
            company_id,
            account_id,
            TransactionType.DEPOSIT,
            amount,
            description=description,
            invoice_id=invoice_id,
        )

    def refund(
        self,
        company_id: UUID,
        account_id: UUID,
        amount: Decimal,
        description: str | None = None,
        order_id: UUID | None = None,
    ) -> LedgerEntry | Failure:
        return self.record(
            company_id,
            account_id,
            TransactionType.REFUND,
            amount,
            description=description,
            order_id=order_id,
        )

    def charge_guest_order(
        self,
        company_id: UUID,
        account_id: UUID,
        amount: Decimal,
        description: str | None = None,
        order_id: UUID | None = None,
    ) -> LedgerEntry | Failure:
        return self.record(
            company_id,
            account_id,
            TransactionType.GUEST_ORDER,
            amount,
            description=description,
            order_id=order_id,
        )

    def balance(self, company_id: UUID, account_id: UUID) -> Decimal | Failure:
        if self._find_account(company_id, account_id) is None:
            return _account_not_found(account_id)
        last = self.repository.get_last_entry(account_id)
        return last.balance_after if last else INITIAL_BALANCE

    def list_entries(
        self, company_id: UUID, account_id: UUID, limit: int = 50
    ) -> list[LedgerEntry] | Failure:
        if self._find_account(company_id, account_id) is None:
            return _account_not_found(account_id)
        return self.repository.list_entries(account_id, limit=limit)

    def verify(
        self, company_id: UUID, account_id: UUID
    ) -> LedgerVerification | Failure:
        """Check the running-balance chain of an account."""
        if self._find_account(company_id, account_id) is None:
            return _account_not_found(account_id)
        result = verify_chain(account_id, self.repository.list_entries(account_id))
        if not result.is_valid:
            integrity_logger.critical(
                "Ledger chain broken on account %s at entry %s",
                account_id,
                result.first_broken_entry_id,
            )
        return result

    def _find_account(self, company_id: UUID, account_id: UUID) -> TenantConfig | None:
        if account_id == company_id:
            return self.repository.get_tenant_config(company_id)
        return self.repository.get_tenant_config(company_id, account_id)


def _account_not_found(account_id: UUID) -> Failure:
    return not_found(f"Account {account_id} not found")
