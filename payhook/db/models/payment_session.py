import enum
import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    Index,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from payhook.db.session import Base


def utc_now() -> datetime:
    return datetime.now(UTC)


class PaymentStatus(enum.Enum):
    """Payment session status."""

    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class PaymentSession(Base):
    """One payment attempt, keyed by the processor-issued artifact id."""

    __tablename__ = "payment_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Session UUID",
    )
    artifact_id: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        comment="Processor artifact id (qr_..., plink_...)",
    )
    provider: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Gateway that created the artifact",
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        comment="Amount in major currency units",
    )
    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name="payment_status", create_constraint=True),
        default=PaymentStatus.PENDING,
        nullable=False,
        comment="Payment status",
    )
    settlement_reference: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        comment="Processor payment id (pay_...), set on SUCCESS",
    )
    presentation_target: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="QR image URL or hosted payment link",
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Artifact expiry reported by the processor",
    )
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Time the success webhook was applied",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        comment="Record creation time",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
        comment="Record update time",
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="amount_positive"),
        Index("idx_payment_sessions_created_at", "created_at"),
        Index("idx_payment_sessions_status", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"PaymentSession(artifact_id={self.artifact_id}, "
            f"amount={self.amount}, status={self.status.value})"
        )
