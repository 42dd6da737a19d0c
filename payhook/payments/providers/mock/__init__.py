"""Mock payment processor."""

from payhook.payments.providers.mock.provider import MockArtifactGateway, build_credited_event

__all__ = [
    "MockArtifactGateway",
    "build_credited_event",
]
