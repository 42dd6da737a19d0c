"""Payment session repository for database operations."""

from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from payhook.db.models.payment_session import PaymentSession, PaymentStatus


class PaymentSessionRepository:
    """Repository for PaymentSession model operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, payment_session: PaymentSession) -> PaymentSession:
        """Create new payment session.

        Raises:
            IntegrityError: If a session for the artifact already exists
        """
        self.session.add(payment_session)
        await self.session.flush()
        await self.session.refresh(payment_session)
        return payment_session

    async def get_by_artifact_id(self, artifact_id: str) -> PaymentSession | None:
        """Get session by processor artifact id."""
        result = await self.session.execute(
            select(PaymentSession).where(PaymentSession.artifact_id == artifact_id)
        )
        return result.scalar_one_or_none()

    async def mark_success(
        self,
        artifact_id: str,
        settlement_reference: str,
    ) -> PaymentSession | None:
        """Move a PENDING session to SUCCESS in a single statement.

        The status predicate makes concurrent deliveries race safely: only
        one UPDATE matches, later ones see no PENDING row.

        Args:
            artifact_id: Processor artifact id
            settlement_reference: Processor payment id

        Returns:
            Updated session, or None if no PENDING session matched
        """
        now = datetime.now(UTC)
        stmt = (
            update(PaymentSession)
            .where(PaymentSession.artifact_id == artifact_id)
            .where(PaymentSession.status == PaymentStatus.PENDING)
            .values(
                status=PaymentStatus.SUCCESS,
                settlement_reference=settlement_reference,
                paid_at=now,
                updated_at=now,
            )
            .returning(PaymentSession)
        )

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_recent(self, limit: int = 20) -> list[PaymentSession]:
        """Get sessions ordered by created_at desc."""
        result = await self.session.execute(
            select(PaymentSession)
            .order_by(PaymentSession.created_at.desc(), PaymentSession.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
