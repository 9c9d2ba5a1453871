"""Dashboard and ledger endpoints."""

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from meal_engine.api.admin import company_scope, require_admin
from meal_engine.api.errors import unwrap
from meal_engine.api.models import LedgerEntryRequest
from meal_engine.api.serializers import (
    serialize_dashboard,
    serialize_ledger_entry,
    serialize_verification,
)

if TYPE_CHECKING:
    from meal_engine.containers import AppContainer

router = APIRouter(tags=["accounts"], dependencies=[Depends(require_admin)])


@router.get("/dashboard")
async def dashboard(
    request: Request,
    project_id: UUID | None = None,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    """Return budget and order figures for the company or one project."""
    container: AppContainer = request.app.state.container
    summary = unwrap(container.dashboard_service.get_dashboard(company_id, project_id))
    return serialize_dashboard(summary)


@router.get("/ledger/{account_id}/entries")
async def list_entries(
    account_id: UUID,
    request: Request,
    limit: int = Query(default=50, ge=1, le=500),
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    service = container.ledger_service
    entries = unwrap(service.list_entries(company_id, account_id, limit))
    balance = unwrap(service.balance(company_id, account_id))
    return {
        "account_id": str(account_id),
        "balance": balance,
        "entries": [serialize_ledger_entry(entry) for entry in entries],
    }


@router.post("/ledger/{account_id}/entries", status_code=status.HTTP_201_CREATED)
async def record_entry(
    account_id: UUID,
    payload: LedgerEntryRequest,
    request: Request,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    """Append a deposit, deduction, guest charge or refund."""
    container: AppContainer = request.app.state.container
    entry = unwrap(
        container.ledger_service.record(
            company_id,
            account_id,
            payload.type,
            payload.amount,
            description=payload.description,
            order_id=payload.order_id,
            invoice_id=payload.invoice_id,
        )
    )
    return serialize_ledger_entry(entry)


@router.get("/ledger/{account_id}/verify")
async def verify_ledger(
    account_id: UUID,
    request: Request,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    result = unwrap(container.ledger_service.verify(company_id, account_id))
    return serialize_verification(result)
