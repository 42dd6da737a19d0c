"""Payment processor integration module."""

from payhook.payments.providers import ArtifactGateway, get_artifact_gateway
from payhook.payments.schemas import (
    ArtifactCredited,
    ArtifactResult,
    UnrecognizedEvent,
    WebhookEvent,
)
from payhook.payments.signature import compute_signature, verify_signature

__all__ = [
    "ArtifactCredited",
    "ArtifactGateway",
    "ArtifactResult",
    "UnrecognizedEvent",
    "WebhookEvent",
    "compute_signature",
    "get_artifact_gateway",
    "verify_signature",
]
