"""Subscription, order and freeze endpoints."""

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from meal_engine.api.admin import company_scope, require_admin
from meal_engine.api.errors import unwrap
from meal_engine.api.models import (
    BulkUpdateRequest,
    ComboRequest,
    CreateSubscriptionRequest,
    ExtendRequest,
    FreezePeriodRequest,
    FreezeRequest,
)
from meal_engine.api.serializers import (
    serialize_freeze_info,
    serialize_order,
    serialize_subscription,
)
from meal_engine.domain.outcomes import SubscriptionRequest
from meal_engine.domain.subscriptions import ScheduleType

if TYPE_CHECKING:
    from meal_engine.containers import AppContainer
    from meal_engine.services.subscriptions import SubscriptionService

router = APIRouter(tags=["subscriptions"], dependencies=[Depends(require_admin)])


def _service(request: Request) -> "SubscriptionService":
    container: AppContainer = request.app.state.container
    return container.subscription_service


@router.post("/subscriptions", status_code=status.HTTP_201_CREATED)
async def create_subscriptions(
    payload: CreateSubscriptionRequest,
    request: Request,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    """Create subscriptions and their daily orders for employees."""
    definition = SubscriptionRequest(
        employee_ids=tuple(payload.employee_ids),
        combo_type=payload.combo_type,
        start_date=payload.start_date,
        end_date=payload.end_date,
        total_days=payload.total_days,
        schedule_type=ScheduleType.normalize(payload.schedule_type),
        custom_dates=tuple(payload.custom_dates),
    )
    created = unwrap(_service(request).create_subscriptions(company_id, definition))
    return {"subscriptions": [serialize_subscription(item) for item in created]}


@router.post("/subscriptions/bulk-update")
async def bulk_update(
    payload: BulkUpdateRequest,
    request: Request,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    """Switch the combo of many employees' subscriptions."""
    result = unwrap(
        _service(request).bulk_update_combo(
            company_id, payload.employee_ids, payload.combo_type
        )
    )
    return {
        "updated_count": result.updated_subscriptions,
        "updated_orders": result.updated_orders,
        "skipped_employee_ids": [str(item) for item in result.skipped_employee_ids],
    }


@router.post("/subscriptions/{subscription_id}/pause")
async def pause_subscription(
    subscription_id: UUID,
    request: Request,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    subscription = unwrap(
        _service(request).pause_subscription(company_id, subscription_id)
    )
    return serialize_subscription(subscription)


@router.post("/subscriptions/{subscription_id}/resume")
async def resume_subscription(
    subscription_id: UUID,
    request: Request,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    subscription = unwrap(
        _service(request).resume_subscription(company_id, subscription_id)
    )
    return serialize_subscription(subscription)


@router.post("/subscriptions/{subscription_id}/cancel")
async def cancel_subscription(
    subscription_id: UUID,
    request: Request,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    subscription = unwrap(
        _service(request).cancel_subscription(company_id, subscription_id)
    )
    return serialize_subscription(subscription)


@router.post("/subscriptions/{subscription_id}/extend")
async def extend_subscription(
    subscription_id: UUID,
    payload: ExtendRequest,
    request: Request,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    subscription = unwrap(
        _service(request).extend_subscription(
            company_id, subscription_id, payload.days
        )
    )
    return serialize_subscription(subscription)


@router.put("/subscriptions/{subscription_id}/combo")
async def change_subscription_combo(
    subscription_id: UUID,
    payload: ComboRequest,
    request: Request,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    change = unwrap(
        _service(request).change_combo(company_id, subscription_id, payload.combo_type)
    )
    return {
        "updated_order_count": change.updated_orders,
        "subscription": serialize_subscription(change.subscription),
    }


@router.put("/employees/{employee_id}/combo")
async def change_employee_combo(
    employee_id: UUID,
    payload: ComboRequest,
    request: Request,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    change = unwrap(
        _service(request).change_employee_combo(
            company_id, employee_id, payload.combo_type
        )
    )
    return {
        "updated_order_count": change.updated_orders,
        "subscription": serialize_subscription(change.subscription),
    }


@router.post("/orders/{order_id}/freeze")
async def freeze_order(
    order_id: UUID,
    request: Request,
    payload: FreezeRequest | None = None,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    """Freeze a day and move it to the end of the subscription."""
    reason = payload.reason if payload else None
    result = unwrap(_service(request).freeze_order(company_id, order_id, reason))
    return {
        "order": serialize_order(result.order),
        "replacement_order": serialize_order(result.replacement_order),
        "subscription": serialize_subscription(result.subscription),
    }


@router.post("/orders/{order_id}/unfreeze")
async def unfreeze_order(
    order_id: UUID,
    request: Request,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    result = unwrap(_service(request).unfreeze_order(company_id, order_id))
    return {
        "order": serialize_order(result.order),
        "subscription": serialize_subscription(result.subscription),
        "removed_order": serialize_order(result.removed_order),
    }


@router.post("/orders/{order_id}/cancel")
async def cancel_order(
    order_id: UUID,
    request: Request,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    order = unwrap(_service(request).cancel_order(company_id, order_id))
    return serialize_order(order)


@router.post("/employees/{employee_id}/freeze-period")
async def freeze_period(
    employee_id: UUID,
    payload: FreezePeriodRequest,
    request: Request,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    """Freeze an employee's days between two dates within the weekly quota."""
    result = unwrap(
        _service(request).freeze_period(
            company_id,
            employee_id,
            payload.start_date,
            payload.end_date,
            payload.reason,
        )
    )
    return {
        "subscription": serialize_subscription(result.subscription),
        "frozen_orders": [serialize_order(order) for order in result.frozen_orders],
        "replacement_orders": [
            serialize_order(order) for order in result.replacement_orders
        ],
        "skipped": [
            {"date": day.isoformat(), "code": failure.code, "message": failure.message}
            for day, failure in result.skipped
        ],
    }


@router.get("/employees/{employee_id}/freeze-info")
async def freeze_info(
    employee_id: UUID,
    request: Request,
    company_id: UUID = Depends(company_scope),
) -> dict[str, object]:
    info = unwrap(_service(request).get_freeze_info(company_id, employee_id))
    return serialize_freeze_info(info)
