"""Base artifact gateway interface."""

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from payhook.core.exceptions import ValidationError
from payhook.payments.schemas import ArtifactCredited, ArtifactResult, UnrecognizedEvent, WebhookEvent


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount to processor minor units (paise).

    Raises:
        ValidationError: If amount is not positive
    """
    if amount <= 0:
        raise ValidationError(
            message="Amount must be positive",
            details={"amount": str(amount)},
        )
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _dig(data: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None at the first missing level."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


class ArtifactGateway(ABC):
    """Abstract base class for artifact gateways.

    All gateways (Razorpay QR, Razorpay payment link, Mock) must implement
    this interface. Subclasses name the event that means "money received"
    and the payload entity carrying the artifact id; event parsing is shared.
    """

    #: Short provider name stored on each session
    name: str
    #: Processor event that marks the artifact as paid
    credit_event: str
    #: Key under ``payload`` holding the artifact entity
    artifact_entity: str

    @abstractmethod
    async def create_artifact(
        self,
        amount: Decimal,
        metadata: dict[str, str] | None = None,
    ) -> ArtifactResult:
        """Create a single-use payment artifact at the processor.

        Args:
            amount: Amount in major currency units
            metadata: Notes attached to the artifact

        Returns:
            Created artifact

        Raises:
            ArtifactCreationError: If the processor rejects the request
            ArtifactGatewayTimeoutError: If the processor does not answer in time
        """

    def parse_event(self, payload: Any) -> WebhookEvent:
        """Parse a webhook body into a credited or unrecognized event.

        Missing or malformed fields never raise; they yield UnrecognizedEvent.

        Args:
            payload: Decoded JSON body

        Returns:
            ArtifactCredited or UnrecognizedEvent
        """
        event = _dig(payload, "event")
        if not isinstance(event, str):
            return UnrecognizedEvent(reason="missing event name")

        if event != self.credit_event:
            return UnrecognizedEvent(event=event, reason="event type not handled")

        artifact_id = _dig(payload, "payload", self.artifact_entity, "entity", "id")
        payment_id = _dig(payload, "payload", "payment", "entity", "id")

        if not isinstance(artifact_id, str) or not artifact_id:
            return UnrecognizedEvent(event=event, reason=f"missing {self.artifact_entity} entity id")
        if not isinstance(payment_id, str) or not payment_id:
            return UnrecognizedEvent(event=event, reason="missing payment entity id")

        return ArtifactCredited(
            event=event,
            artifact_id=artifact_id,
            settlement_reference=payment_id,
        )
