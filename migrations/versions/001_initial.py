"""Payment sessions table.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    payment_status = postgresql.ENUM(
        "PENDING", "SUCCESS", "FAILED",
        name="payment_status",
        create_type=False,
    )
    payment_status.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "payment_sessions",
        sa.Column("id", sa.Uuid(), nullable=False, comment="Session UUID"),
        sa.Column("artifact_id", sa.String(64), nullable=False, comment="Processor artifact id (qr_..., plink_...)"),
        sa.Column("provider", sa.String(32), nullable=False, comment="Gateway that created the artifact"),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False, comment="Amount in major currency units"),
        sa.Column("status", payment_status, nullable=False, server_default="PENDING", comment="Payment status"),
        sa.Column("settlement_reference", sa.String(64), nullable=True, comment="Processor payment id (pay_...), set on SUCCESS"),
        sa.Column("presentation_target", sa.Text(), nullable=True, comment="QR image URL or hosted payment link"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True, comment="Artifact expiry reported by the processor"),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True, comment="Time the success webhook was applied"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()"), comment="Record creation time"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()"), comment="Record update time"),
        sa.PrimaryKeyConstraint("id", name="pk_payment_sessions"),
        sa.UniqueConstraint("artifact_id", name="uq_payment_sessions_artifact_id"),
        sa.CheckConstraint("amount > 0", name="amount_positive"),
    )
    op.create_index("idx_payment_sessions_created_at", "payment_sessions", ["created_at"])
    op.create_index("idx_payment_sessions_status", "payment_sessions", ["status"])


def downgrade() -> None:
    op.drop_index("idx_payment_sessions_status", table_name="payment_sessions")
    op.drop_index("idx_payment_sessions_created_at", table_name="payment_sessions")
    op.drop_table("payment_sessions")

    postgresql.ENUM(name="payment_status").drop(op.get_bind(), checkfirst=True)
