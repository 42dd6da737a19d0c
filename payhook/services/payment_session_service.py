"""Payment session lifecycle: creation, status, success transition, history."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal, InvalidOperation
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from payhook.core.config import Settings
from payhook.core.exceptions import (
    PersistenceError,
    PersistenceTimeoutError,
    UntrackedArtifactError,
    ValidationError,
)
from payhook.db.models.payment_session import PaymentSession, PaymentStatus
from payhook.db.repositories.payment_session_repository import PaymentSessionRepository
from payhook.db.session import Database
from payhook.payments.providers.base import ArtifactGateway

logger = logging.getLogger(__name__)

MIN_AMOUNT = Decimal("1")


class ApplyOutcome(str, Enum):
    """Result of applying a success event."""

    APPLIED = "applied"
    DUPLICATE = "duplicate"
    ORPHAN = "orphan"
    NOT_APPLICABLE = "not_applicable"


class PaymentSessionService:
    """Service for payment session operations.

    Every store operation runs in its own short session and is bounded by
    ``store_timeout_seconds``.
    """

    def __init__(
        self,
        database: Database,
        gateway: ArtifactGateway,
        settings: Settings,
    ) -> None:
        self.database = database
        self.gateway = gateway
        self.settings = settings

    @asynccontextmanager
    async def _store(self, operation: str) -> AsyncIterator[PaymentSessionRepository]:
        """Open a bounded store session, translating driver errors.

        Connection failures surface from the driver as OSError and are not
        wrapped by SQLAlchemy.
        """
        try:
            async with asyncio.timeout(self.settings.store_timeout_seconds):
                async with self.database.session() as session:
                    yield PaymentSessionRepository(session)
        except TimeoutError as e:
            raise PersistenceTimeoutError(
                message=f"Session store timed out during {operation}",
                details={"operation": operation},
            ) from e
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceError(
                message=f"Session store failed during {operation}",
                details={"operation": operation, "error": type(e).__name__},
            ) from e

    def validate_amount(self, amount: Decimal | int | str) -> Decimal:
        """Normalize and validate a major-unit amount.

        Raises:
            ValidationError: If amount is not a number, below 1, above the
                configured maximum, or has more than two decimal places
        """
        try:
            value = Decimal(str(amount))
        except InvalidOperation as e:
            raise ValidationError(message="Invalid amount", details={"amount": str(amount)}) from e

        if not value.is_finite() or value < MIN_AMOUNT:
            raise ValidationError(
                message="Invalid amount",
                details={"amount": str(amount), "minimum": str(MIN_AMOUNT)},
            )
        if value > self.settings.max_amount:
            raise ValidationError(
                message="Amount exceeds maximum",
                details={"amount": str(amount), "maximum": str(self.settings.max_amount)},
            )
        if value != value.quantize(Decimal("0.01")):
            raise ValidationError(
                message="Amount must have at most two decimal places",
                details={"amount": str(amount)},
            )
        return value.quantize(Decimal("0.01"))

    async def start_session(
        self,
        amount: Decimal | int | str,
        metadata: dict[str, str] | None = None,
    ) -> PaymentSession:
        """Create artifact at the processor and record a PENDING session.

        1. Validate amount
        2. Create artifact via gateway (no record if this fails)
        3. Persist PENDING session keyed by artifact id

        Args:
            amount: Amount in major currency units
            metadata: Notes forwarded to the processor

        Returns:
            Created session

        Raises:
            ValidationError: If amount is invalid
            ArtifactCreationError: If the processor rejects the request
            UntrackedArtifactError: If the artifact exists but the session
                could not be recorded
        """
        value = self.validate_amount(amount)

        artifact = await self.gateway.create_artifact(value, metadata)

        try:
            async with self._store("create") as repo:
                payment_session = await repo.create(
                    PaymentSession(
                        artifact_id=artifact.artifact_id,
                        provider=self.gateway.name,
                        amount=value,
                        status=PaymentStatus.PENDING,
                        presentation_target=artifact.presentation_target,
                        expires_at=artifact.expires_at,
                    )
                )
                await repo.session.commit()
        except PersistenceError as e:
            logger.error(
                "PARTIAL FAILURE: artifact created but not recorded, operator attention required: "
                "artifact_id=%s, amount=%s, provider=%s, error=%s",
                artifact.artifact_id,
                value,
                self.gateway.name,
                e.message,
            )
            raise UntrackedArtifactError(artifact.artifact_id) from e

        logger.info(
            "Payment session started: artifact_id=%s, amount=%s, provider=%s",
            payment_session.artifact_id,
            payment_session.amount,
            payment_session.provider,
        )
        return payment_session

    async def get_session(self, artifact_id: str) -> PaymentSession | None:
        """Get session by artifact id, or None if unknown."""
        async with self._store("get") as repo:
            return await repo.get_by_artifact_id(artifact_id)

    async def get_status(self, artifact_id: str) -> PaymentStatus | None:
        """Get session status.

        Returns:
            Status, or None when no session matches (not an error)
        """
        payment_session = await self.get_session(artifact_id)
        if payment_session is None:
            return None
        return payment_session.status

    async def apply_success(
        self,
        artifact_id: str,
        settlement_reference: str,
    ) -> ApplyOutcome:
        """Mark session as paid.

        Idempotent: a repeated delivery for an already successful session
        changes nothing. Events for unknown artifacts are dropped, never
        turned into new sessions.

        Args:
            artifact_id: Processor artifact id
            settlement_reference: Processor payment id

        Returns:
            What happened to the session
        """
        async with self._store("apply_success") as repo:
            updated = await repo.mark_success(artifact_id, settlement_reference)
            if updated is not None:
                await repo.session.commit()
                logger.info(
                    "Session %s marked SUCCESS: settlement_reference=%s",
                    artifact_id,
                    settlement_reference,
                )
                return ApplyOutcome.APPLIED

            existing = await repo.get_by_artifact_id(artifact_id)

        if existing is None:
            logger.warning(
                "Orphan event dropped: artifact_id=%s, settlement_reference=%s",
                artifact_id,
                settlement_reference,
            )
            return ApplyOutcome.ORPHAN

        if existing.status == PaymentStatus.SUCCESS:
            if existing.settlement_reference != settlement_reference:
                logger.warning(
                    "Second settlement for paid session ignored: artifact_id=%s, "
                    "recorded=%s, received=%s",
                    artifact_id,
                    existing.settlement_reference,
                    settlement_reference,
                )
            else:
                logger.info("Duplicate success event ignored: artifact_id=%s", artifact_id)
            return ApplyOutcome.DUPLICATE

        logger.warning(
            "Success event for session in status %s ignored: artifact_id=%s",
            existing.status.value,
            artifact_id,
        )
        return ApplyOutcome.NOT_APPLICABLE

    async def list_history(self, limit: int | None = None) -> list[PaymentSession]:
        """Get most recent sessions first.

        Args:
            limit: Max sessions; defaults to history_default_limit and is
                capped at history_max_limit

        Raises:
            ValidationError: If limit is below 1
        """
        if limit is None:
            limit = self.settings.history_default_limit
        if limit < 1:
            raise ValidationError(message="Limit must be at least 1", details={"limit": limit})
        limit = min(limit, self.settings.history_max_limit)

        async with self._store("list_history") as repo:
            return await repo.list_recent(limit)

    async def check_store(self) -> bool:
        """Readiness probe for the store."""
        try:
            async with asyncio.timeout(self.settings.store_timeout_seconds):
                return await self.database.ping()
        except (TimeoutError, SQLAlchemyError, OSError) as e:
            logger.warning("Store not ready: %s", e)
            return False
