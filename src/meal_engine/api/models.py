"""Pydantic request models for the HTTP API."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from meal_engine.domain.ledger import TransactionType


class CreateSubscriptionRequest(BaseModel):
    employee_ids: list[UUID] = Field(min_length=1)
    combo_type: str
    start_date: date
    end_date: date | None = None
    total_days: int | None = Field(default=None, gt=0)
    schedule_type: str | None = None
    custom_dates: list[date] = Field(default_factory=list)

    @model_validator(mode="after")
    def _require_window(self) -> "CreateSubscriptionRequest":
        if self.end_date is None and self.total_days is None:
            raise ValueError("either end_date or total_days is required")
        return self


class ComboRequest(BaseModel):
    combo_type: str


class BulkUpdateRequest(BaseModel):
    employee_ids: list[UUID] = Field(min_length=1)
    combo_type: str


class ExtendRequest(BaseModel):
    days: int = Field(gt=0)


class FreezeRequest(BaseModel):
    reason: str | None = None


class FreezePeriodRequest(BaseModel):
    start_date: date
    end_date: date
    reason: str | None = None


class LedgerEntryRequest(BaseModel):
    """A balance-affecting event; ``amount`` is a positive magnitude."""

    type: TransactionType
    amount: Decimal = Field(gt=0)
    description: str | None = None
    order_id: UUID | None = None
    invoice_id: UUID | None = None
