"""Payment schemas for provider communication."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class ArtifactKind(str, Enum):
    """What the client is shown to pay."""

    QR_CODE = "qr_code"
    PAYMENT_LINK = "payment_link"


class ArtifactResult(BaseModel):
    """Artifact created by the processor."""

    artifact_id: str = Field(..., min_length=1, description="Processor artifact id")
    presentation_target: str = Field(..., description="QR image URL or hosted payment link")
    kind: ArtifactKind = Field(..., description="Artifact type")
    expires_at: datetime | None = Field(default=None, description="When the artifact closes")


class ArtifactCredited(BaseModel):
    """Money was received for an artifact."""

    kind: Literal["credited"] = "credited"
    event: str = Field(..., description="Processor event name")
    artifact_id: str = Field(..., min_length=1, description="Artifact the payment was made against")
    settlement_reference: str = Field(..., min_length=1, description="Processor payment id")


class UnrecognizedEvent(BaseModel):
    """Any event we do not act on, including incomplete credit events."""

    kind: Literal["unrecognized"] = "unrecognized"
    event: str | None = Field(default=None, description="Processor event name, if present")
    reason: str = Field(..., description="Why the event is ignored")


WebhookEvent = ArtifactCredited | UnrecognizedEvent
