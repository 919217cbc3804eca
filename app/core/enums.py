"""Core enums used across modules."""

from enum import StrEnum


class RoleEnum(StrEnum):
    """System roles."""

    CUSTOMER = "customer"
    PROFESSIONAL = "professional"
    ADMIN = "admin"


class ProfessionalTypeEnum(StrEnum):
    """Kind of work a professional offers."""

    HANDYMAN = "handyman"
    ARTIST = "artist"


class BookingStatusEnum(StrEnum):
    """Booking lifecycle status."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"
    DISPUTED = "disputed"
    RESOLVED = "resolved"


class BookingHistoryFilterEnum(StrEnum):
    """Booking history views."""

    ACTIVE = "active"
    PAST = "past"
    ALL = "all"


class DisputeStatusEnum(StrEnum):
    """Dispute workflow status."""

    OPEN = "open"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"
    CLOSED = "closed"


class IssueTypeEnum(StrEnum):
    """Reason a dispute was raised."""

    NO_SHOW = "no_show"
    POOR_QUALITY = "poor_quality"
    DAMAGE = "damage"
    SAFETY_CONCERN = "safety_concern"
    PRICING_DISPUTE = "pricing_dispute"
    OTHER = "other"


class NotificationTypeEnum(StrEnum):
    """Semantic notification type."""

    BOOKING_CREATED = "booking_created"
    BOOKING_CONFIRMED = "booking_confirmed"
    BOOKING_REJECTED = "booking_rejected"
    BOOKING_CANCELLED = "booking_cancelled"
    BOOKING_STARTED = "booking_started"
    BOOKING_COMPLETED = "booking_completed"
    DISPUTE_RESOLVED = "dispute_resolved"


class NotificationStatusEnum(StrEnum):
    """Notification delivery status."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class OutboxStatusEnum(StrEnum):
    """Outbox event status for integration publishing."""

    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"
