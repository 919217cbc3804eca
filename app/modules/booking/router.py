"""Booking API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.core.enums import BookingHistoryFilterEnum, RoleEnum
from app.modules.booking.rate_limit import enforce_booking_create_rate_limit
from app.modules.booking.schemas import (
    BookingCancelRequest,
    BookingCreate,
    BookingRead,
    BookingStatusUpdate,
    ProgressPhotosRequest,
)
from app.modules.booking.service import BookingService, get_booking_service
from app.modules.identity.service import get_current_user, require_roles
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=BookingRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_booking_create_rate_limit)],
)
async def create_booking(
    payload: BookingCreate,
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(get_current_user),
) -> BookingRead:
    """Create booking in PENDING state."""
    booking = await service.create_booking(payload, current_user)
    return BookingRead.model_validate(booking)


@router.get("/my", response_model=Page[BookingRead])
async def list_my_bookings(
    history_filter: BookingHistoryFilterEnum = Query(default=BookingHistoryFilterEnum.ALL, alias="filter"),
    pagination=Depends(get_pagination_params),
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(get_current_user),
) -> Page[BookingRead]:
    """List bookings of current user as customer or professional."""
    items, total = await service.list_bookings(
        current_user.id,
        current_user.role.name,
        history_filter,
        pagination.limit,
        pagination.offset,
    )
    serialized = [BookingRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.get("/users/{owner_id}", response_model=Page[BookingRead])
async def list_user_bookings(
    owner_id: UUID,
    role: RoleEnum = Query(default=RoleEnum.CUSTOMER),
    history_filter: BookingHistoryFilterEnum = Query(default=BookingHistoryFilterEnum.ALL, alias="filter"),
    pagination=Depends(get_pagination_params),
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(require_roles(RoleEnum.ADMIN)),
) -> Page[BookingRead]:
    """List bookings of any user (admin only)."""
    items, total = await service.list_bookings(
        owner_id,
        role,
        history_filter,
        pagination.limit,
        pagination.offset,
    )
    serialized = [BookingRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.get("/{booking_id}", response_model=BookingRead)
async def get_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(get_current_user),
) -> BookingRead:
    """Get one booking visible to current user."""
    booking = await service.get_booking(booking_id, current_user)
    return BookingRead.model_validate(booking)


@router.put("/{booking_id}/status", response_model=BookingRead)
async def update_booking_status(
    booking_id: UUID,
    payload: BookingStatusUpdate,
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(get_current_user),
) -> BookingRead:
    """Move booking along its lifecycle."""
    booking = await service.update_status(
        booking_id,
        payload.status,
        current_user,
        payload.notes,
        payload.progress_photos,
    )
    return BookingRead.model_validate(booking)


@router.put("/{booking_id}/cancel", response_model=BookingRead)
async def cancel_booking(
    booking_id: UUID,
    payload: BookingCancelRequest,
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(get_current_user),
) -> BookingRead:
    """Cancel pending or confirmed booking."""
    booking = await service.cancel_booking(booking_id, payload.reason, actor=current_user)
    return BookingRead.model_validate(booking)


@router.post("/{booking_id}/progress-photos", response_model=BookingRead)
async def add_progress_photos(
    booking_id: UUID,
    payload: ProgressPhotosRequest,
    service: BookingService = Depends(get_booking_service),
    current_user=Depends(require_roles(RoleEnum.PROFESSIONAL, RoleEnum.ADMIN)),
) -> BookingRead:
    """Attach progress photos to an in-progress artist booking."""
    booking = await service.add_progress_photos(booking_id, payload.photos, current_user)
    return BookingRead.model_validate(booking)
