"""Conversion between Supabase rows and domain models."""

from datetime import date, datetime, time
from decimal import Decimal
from uuid import UUID

from meal_engine.domain.changes import ChangeSet
from meal_engine.domain.ledger import AccountType, LedgerEntry, TransactionType
from meal_engine.domain.orders import FreezeRecord, Order, OrderStatus
from meal_engine.domain.subscriptions import (
    ScheduleType,
    Subscription,
    SubscriptionStatus,
)

SUBSCRIPTION_COLUMNS = (
    "id, company_id, project_id, employee_id, start_date, end_date, total_days, "
    "total_price, combo_type, price, schedule_type, status, created_at, updated_at, "
    "paused_at, paused_days_count, original_end_date, frozen_days_count, "
    "custom_dates, version"
)
ORDER_COLUMNS = (
    "id, company_id, project_id, subscription_id, employee_id, order_date, "
    "combo_type, price, status, created_at, updated_at, frozen_at, frozen_reason, "
    "replacement_date, version"
)
LEDGER_COLUMNS = (
    "id, company_id, account_id, account_type, sequence, type, amount, "
    "balance_after, created_at, description, order_id, invoice_id"
)
OPEN_SUBSCRIPTION_STATUSES = [
    SubscriptionStatus.ACTIVE.value,
    SubscriptionStatus.PAUSED.value,
]


def parse_subscription(row: dict[str, object]) -> Subscription:
    return Subscription(
        id=UUID(str(row["id"])),
        company_id=UUID(str(row["company_id"])),
        project_id=UUID(str(row["project_id"])),
        employee_id=UUID(str(row["employee_id"])),
        start_date=_date(row["start_date"]),
        end_date=_date(row["end_date"]),
        total_days=int(row["total_days"]),
        total_price=_decimal(row["total_price"]),
        combo_type=str(row["combo_type"]),
        price=_decimal(row["price"]),
        schedule_type=ScheduleType.normalize(_optional_str(row.get("schedule_type"))),
        status=SubscriptionStatus(row["status"]),
        created_at=_datetime(row["created_at"]),
        updated_at=_datetime(row["updated_at"]),
        paused_at=_optional_datetime(row.get("paused_at")),
        paused_days_count=int(row.get("paused_days_count") or 0),
        original_end_date=_optional_date(row.get("original_end_date")),
        frozen_days_count=int(row.get("frozen_days_count") or 0),
        custom_dates=tuple(_date(day) for day in row.get("custom_dates") or []),
        version=int(row.get("version") or 0),
    )


def parse_order(row: dict[str, object]) -> Order:
    return Order(
        id=UUID(str(row["id"])),
        company_id=UUID(str(row["company_id"])),
        project_id=UUID(str(row["project_id"])),
        subscription_id=UUID(str(row["subscription_id"])),
        employee_id=UUID(str(row["employee_id"])),
        order_date=_date(row["order_date"]),
        combo_type=str(row["combo_type"]),
        price=_decimal(row["price"]),
        status=OrderStatus(row["status"]),
        created_at=_datetime(row["created_at"]),
        updated_at=_datetime(row["updated_at"]),
        frozen_at=_optional_datetime(row.get("frozen_at")),
        frozen_reason=_optional_str(row.get("frozen_reason")),
        replacement_date=_optional_date(row.get("replacement_date")),
        version=int(row.get("version") or 0),
    )


def parse_ledger_entry(row: dict[str, object]) -> LedgerEntry:
    return LedgerEntry(
        id=UUID(str(row["id"])),
        company_id=UUID(str(row["company_id"])),
        account_id=UUID(str(row["account_id"])),
        account_type=AccountType(row["account_type"]),
        sequence=int(row["sequence"]),
        type=TransactionType(row["type"]),
        amount=_decimal(row["amount"]),
        balance_after=_decimal(row["balance_after"]),
        created_at=_datetime(row["created_at"]),
        description=_optional_str(row.get("description")),
        order_id=_optional_uuid(row.get("order_id")),
        invoice_id=_optional_uuid(row.get("invoice_id")),
    )


def change_set_payload(changes: ChangeSet) -> dict[str, list[dict[str, object]]]:
    """Serialize a change set into the JSON document ``apply_change_set`` takes."""
    return {
        "subscriptions": [_subscription_row(item) for item in changes.subscriptions],
        "orders": [_order_row(item) for item in changes.orders],
        "deleted_orders": [
            {"id": str(item.id), "version": item.version}
            for item in changes.deleted_orders
        ],
        "freeze_records": [_freeze_row(item) for item in changes.freeze_records],
        "ledger_entries": [_ledger_row(item) for item in changes.ledger_entries],
    }


def parse_time(raw: object) -> time | None:
    if isinstance(raw, time):
        return raw
    if isinstance(raw, str) and raw:
        return time.fromisoformat(raw)
    return None


def parse_decimal(raw: object) -> Decimal:
    return _decimal(raw)


def _subscription_row(subscription: Subscription) -> dict[str, object]:
    return {
        "id": str(subscription.id),
        "company_id": str(subscription.company_id),
        "project_id": str(subscription.project_id),
        "employee_id": str(subscription.employee_id),
        "start_date": subscription.start_date.isoformat(),
        "end_date": subscription.end_date.isoformat(),
        "total_days": subscription.total_days,
        "total_price": str(subscription.total_price),
        "combo_type": subscription.combo_type,
        "price": str(subscription.price),
        "schedule_type": subscription.schedule_type.value,
        "status": subscription.status.value,
        "created_at": subscription.created_at.isoformat(),
        "updated_at": subscription.updated_at.isoformat(),
        "paused_at": _iso(subscription.paused_at),
        "paused_days_count": subscription.paused_days_count,
        "original_end_date": _iso(subscription.original_end_date),
        "frozen_days_count": subscription.frozen_days_count,
        "custom_dates": [day.isoformat() for day in subscription.custom_dates],
        "version": subscription.version,
    }


def _order_row(order: Order) -> dict[str, object]:
    return {
        "id": str(order.id),
        "company_id": str(order.company_id),
        "project_id": str(order.project_id),
        "subscription_id": str(order.subscription_id),
        "employee_id": str(order.employee_id),
        "order_date": order.order_date.isoformat(),
        "combo_type": order.combo_type,
        "price": str(order.price),
        "status": order.status.value,
        "created_at": order.created_at.isoformat(),
        "updated_at": order.updated_at.isoformat(),
        "frozen_at": _iso(order.frozen_at),
        "frozen_reason": order.frozen_reason,
        "replacement_date": _iso(order.replacement_date),
        "version": order.version,
    }


def _freeze_row(record: FreezeRecord) -> dict[str, object]:
    return {
        "id": str(record.id),
        "employee_id": str(record.employee_id),
        "order_id": str(record.order_id),
        "frozen_at": record.frozen_at.isoformat(),
        "original_date": record.original_date.isoformat(),
        "week_year": record.week_year,
        "week_number": record.week_number,
        "ordinal": record.ordinal,
    }


def _ledger_row(entry: LedgerEntry) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "company_id": str(entry.company_id),
        "account_id": str(entry.account_id),
        "account_type": entry.account_type.value,
        "sequence": entry.sequence,
        "type": entry.type.value,
        "amount": str(entry.amount),
        "balance_after": str(entry.balance_after),
        "created_at": entry.created_at.isoformat(),
        "description": entry.description,
        "order_id": str(entry.order_id) if entry.order_id else None,
        "invoice_id": str(entry.invoice_id) if entry.invoice_id else None,
    }


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value else None


def _date(raw: object) -> date:
    if isinstance(raw, date):
        return raw
    return date.fromisoformat(str(raw)[:10])


def _optional_date(raw: object) -> date | None:
    return _date(raw) if raw else None


def _datetime(raw: object) -> datetime:
    if isinstance(raw, datetime):
        return raw
    return datetime.fromisoformat(str(raw))


def _optional_datetime(raw: object) -> datetime | None:
    return _datetime(raw) if raw else None


def _decimal(raw: object) -> Decimal:
    if raw is None or raw == "":
        return Decimal("0")
    return Decimal(str(raw))


def _optional_str(raw: object) -> str | None:
    return str(raw) if raw is not None else None


def _optional_uuid(raw: object) -> UUID | None:
    return UUID(str(raw)) if raw else None
