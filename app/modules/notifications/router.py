"""Notifications API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.core.enums import RoleEnum
from app.modules.identity.service import get_current_user, require_roles
from app.modules.notifications.schemas import NotificationDeliveryMetricsRead, NotificationRead
from app.modules.notifications.service import NotificationsService, get_notifications_service
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/my", response_model=Page[NotificationRead])
async def list_my_notifications(
    unread_only: bool = False,
    pagination=Depends(get_pagination_params),
    service: NotificationsService = Depends(get_notifications_service),
    current_user=Depends(get_current_user),
) -> Page[NotificationRead]:
    """List notifications for current user."""
    items, total = await service.list_my_notifications(
        current_user,
        pagination.limit,
        pagination.offset,
        unread_only=unread_only,
    )
    serialized = [NotificationRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.patch("/{notification_id}/read", response_model=NotificationRead)
async def mark_notification_read(
    notification_id: UUID,
    service: NotificationsService = Depends(get_notifications_service),
    current_user=Depends(get_current_user),
) -> NotificationRead:
    """Mark notification as read."""
    notification = await service.mark_read(notification_id, current_user)
    return NotificationRead.model_validate(notification)


@router.get(
    "/delivery/metrics",
    response_model=NotificationDeliveryMetricsRead,
    dependencies=[Depends(require_roles(RoleEnum.ADMIN))],
)
async def get_delivery_metrics(
    max_retries: int = Query(default=5, ge=1, le=100),
    service: NotificationsService = Depends(get_notifications_service),
) -> NotificationDeliveryMetricsRead:
    """Return delivery observability metrics."""
    return await service.get_delivery_metrics(max_retries=max_retries)
