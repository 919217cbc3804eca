"""Booking schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.core.enums import BookingHistoryFilterEnum, BookingStatusEnum, ProfessionalTypeEnum
from app.modules.booking.history import classify_status


class Coordinates(BaseModel):
    """Geographic point, stored as given."""

    lat: float
    lng: float


class ServiceAddress(BaseModel):
    """Where the work takes place."""

    address: str
    city: str
    state: str = ""
    country: str = ""
    postal_code: str = ""
    coordinates: Coordinates | None = None


class BookingCreate(BaseModel):
    """Create booking request."""

    professional_id: UUID
    professional_type: ProfessionalTypeEnum
    service_category: str = Field(min_length=1, max_length=128)
    scheduled_date: datetime
    estimated_duration_minutes: int = Field(gt=0)
    service_address: ServiceAddress
    description: str = ""
    estimated_price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    project_details: dict[str, Any] | None = None
    reference_images: list[str] = Field(default_factory=list)


class ProgressPhotoCreate(BaseModel):
    """Photo of an artist project already uploaded to storage."""

    url: str = Field(min_length=1, max_length=2048)
    caption: str | None = Field(default=None, max_length=500)


class ProgressPhoto(ProgressPhotoCreate):
    id: str
    uploaded_at: datetime
    uploaded_by: UUID


class BookingStatusUpdate(BaseModel):
    """Status change request.

    Progress photos are only accepted when an artist booking starts.
    """

    status: BookingStatusEnum
    notes: str | None = None
    progress_photos: list[ProgressPhotoCreate] = Field(default_factory=list)


class ProgressPhotosRequest(BaseModel):
    photos: list[ProgressPhotoCreate] = Field(min_length=1)


class BookingCancelRequest(BaseModel):
    """Cancel booking request. The reason is kept exactly as sent."""

    reason: str


class BookingRead(BaseModel):
    """Booking response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    customer_id: UUID
    professional_id: UUID
    professional_type: ProfessionalTypeEnum
    service_category: str
    scheduled_date: datetime
    estimated_duration_minutes: int
    status: BookingStatusEnum
    started_at: datetime | None
    completed_at: datetime | None
    cancelled_at: datetime | None
    cancellation_reason: str | None
    service_address: dict[str, Any]
    description: str
    estimated_price: Decimal | None
    project_details: dict[str, Any] | None
    reference_images: list[str]
    progress_photos: list[ProgressPhoto]
    history: BookingHistoryFilterEnum | None = None
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def classify_history(self) -> BookingRead:
        self.history = classify_status(self.status)
        return self
