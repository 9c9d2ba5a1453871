"""Tests for the append-only ledger."""

import logging
from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

from meal_engine.domain.errors import ErrorKind, Failure
from meal_engine.domain.ledger import AccountType, LedgerEntry, TransactionType
from meal_engine.services.ledger import next_entry, signed_amount, verify_chain
from tests.conftest import COMPANY_ID, PROJECT_ID

NOW = datetime(2024, 12, 1, 3, 0, tzinfo=UTC)


def _chain(*steps: tuple[TransactionType, str]) -> list[LedgerEntry]:
    entries: list[LedgerEntry] = []
    previous = None
    for transaction_type, amount in steps:
        previous = next_entry(
            previous,
            company_id=COMPANY_ID,
            account_id=PROJECT_ID,
            account_type=AccountType.PROJECT,
            transaction_type=transaction_type,
            amount=Decimal(amount),
            created_at=NOW,
        )
        entries.append(previous)
    return entries


def test_signed_amount_follows_transaction_type() -> None:
    assert signed_amount(TransactionType.DEPOSIT, Decimal("10")) == Decimal("10")
    assert signed_amount(TransactionType.REFUND, Decimal("-10")) == Decimal("10")
    assert signed_amount(TransactionType.LUNCH_DEDUCTION, Decimal("25")) == Decimal(
        "-25"
    )
    assert signed_amount(TransactionType.CLIENT_APP_ORDER, Decimal("7")) == Decimal(
        "-7"
    )


def test_next_entry_chains_sequence_and_balance() -> None:
    entries = _chain(
        (TransactionType.DEPOSIT, "100"),
        (TransactionType.LUNCH_DEDUCTION, "25"),
        (TransactionType.LUNCH_DEDUCTION, "35"),
    )

    assert [entry.sequence for entry in entries] == [1, 2, 3]
    assert [entry.balance_after for entry in entries] == [
        Decimal("100"),
        Decimal("75"),
        Decimal("40"),
    ]


def test_verify_chain_accepts_consistent_history() -> None:
    entries = _chain((TransactionType.DEPOSIT, "50"), (TransactionType.REFUND, "5"))

    result = verify_chain(PROJECT_ID, entries)

    assert result.is_valid
    assert result.entries_checked == 2
    assert result.balance == Decimal("55")


def test_verify_chain_reports_first_broken_entry() -> None:
    entries = _chain(
        (TransactionType.DEPOSIT, "50"),
        (TransactionType.LUNCH_DEDUCTION, "25"),
        (TransactionType.LUNCH_DEDUCTION, "25"),
    )
    entries[1] = replace(entries[1], balance_after=Decimal("30"))

    result = verify_chain(PROJECT_ID, entries)

    assert not result.is_valid
    assert result.first_broken_entry_id == entries[1].id
    assert result.entries_checked == 2


def test_verify_chain_of_empty_account() -> None:
    result = verify_chain(PROJECT_ID, [])

    assert result.is_valid
    assert result.balance == Decimal("0")


def test_record_appends_to_project_account(ledger_service, repository) -> None:
    deposit = ledger_service.deposit(
        COMPANY_ID, PROJECT_ID, Decimal("1000"), "Invoice paid"
    )
    guest = ledger_service.charge_guest_order(COMPANY_ID, PROJECT_ID, Decimal("200"))
    refund = ledger_service.refund(COMPANY_ID, PROJECT_ID, Decimal("50"))

    assert isinstance(deposit, LedgerEntry)
    assert deposit.account_type is AccountType.PROJECT
    assert deposit.description == "Invoice paid"
    assert guest.amount == Decimal("-200")
    assert refund.balance_after == Decimal("850")
    assert [entry.sequence for entry in repository.ledger_entries] == [1, 2, 3]
    assert ledger_service.balance(COMPANY_ID, PROJECT_ID) == Decimal("850")


def test_company_account_is_addressed_by_company_id(ledger_service) -> None:
    entry = ledger_service.deposit(COMPANY_ID, COMPANY_ID, Decimal("300"))

    assert entry.account_type is AccountType.COMPANY
    assert ledger_service.balance(COMPANY_ID, PROJECT_ID) == Decimal("0")


def test_record_rejects_non_positive_amount(ledger_service, repository) -> None:
    result = ledger_service.deposit(COMPANY_ID, PROJECT_ID, Decimal("0"))

    assert isinstance(result, Failure)
    assert result.kind is ErrorKind.VALIDATION
    assert repository.ledger_entries == []


def test_unknown_account_is_not_found(ledger_service) -> None:
    stranger = uuid4()

    recorded = ledger_service.deposit(COMPANY_ID, stranger, Decimal("10"))
    balance = ledger_service.balance(COMPANY_ID, stranger)
    foreign = ledger_service.list_entries(uuid4(), PROJECT_ID)

    for result in (recorded, balance, foreign):
        assert isinstance(result, Failure)
        assert result.kind is ErrorKind.NOT_FOUND


def test_list_entries_returns_newest_page(ledger_service) -> None:
    for amount in ("10", "20", "30"):
        ledger_service.deposit(COMPANY_ID, PROJECT_ID, Decimal(amount))

    entries = ledger_service.list_entries(COMPANY_ID, PROJECT_ID, limit=2)

    assert [entry.sequence for entry in entries] == [2, 3]


def test_record_retries_on_sequence_conflict(ledger_service, repository) -> None:
    ledger_service.deposit(COMPANY_ID, PROJECT_ID, Decimal("10"))
    repository.conflicts_to_raise = 1

    entry = ledger_service.deposit(COMPANY_ID, PROJECT_ID, Decimal("5"))

    assert entry.sequence == 2
    assert entry.balance_after == Decimal("15")


def test_verify_logs_broken_chain(
    ledger_service, repository, caplog, monkeypatch
) -> None:
    monkeypatch.setattr(logging.getLogger("meal_engine"), "propagate", True)
    ledger_service.deposit(COMPANY_ID, PROJECT_ID, Decimal("10"))
    ledger_service.deposit(COMPANY_ID, PROJECT_ID, Decimal("5"))
    repository.ledger_entries[1] = replace(
        repository.ledger_entries[1], amount=Decimal("6")
    )

    with caplog.at_level(logging.CRITICAL, logger="meal_engine.integrity"):
        result = ledger_service.verify(COMPANY_ID, PROJECT_ID)

    assert not result.is_valid
    assert "Ledger chain broken" in caplog.text
