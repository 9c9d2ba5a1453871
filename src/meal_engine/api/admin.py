"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from meal_engine.api.serializers import serialize_settlement

if TYPE_CHECKING:
    from meal_engine.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


async def company_scope(x_company_id: str | None = Header(default=None)) -> UUID:
    """Return the tenant a request acts for."""
    if not x_company_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Company-Id header is required",
        )
    try:
        return UUID(x_company_id)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Company-Id must be a UUID",
        ) from exc


@router.post("/settlements/run", dependencies=[Depends(require_admin)])
async def run_settlement(request: Request) -> dict[str, object]:
    """Settle locked orders of every project now."""
    container: AppContainer = request.app.state.container
    report = container.settlement_service.run()
    return serialize_settlement(report)


@router.get("/jobs", dependencies=[Depends(require_admin)])
async def list_jobs(request: Request) -> dict[str, object]:
    """Return the periodic jobs of this process."""
    container: AppContainer = request.app.state.container
    jobs = container.scheduler.get_jobs() if container.scheduler else []
    return {"jobs": jobs}
