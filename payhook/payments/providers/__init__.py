"""Payment providers module."""

from payhook.core.config import Settings
from payhook.payments.providers.base import ArtifactGateway


def get_artifact_gateway(settings: Settings) -> ArtifactGateway:
    """Factory function to get configured artifact gateway.

    Returns gateway based on PAYMENT_PROVIDER setting.
    """
    from payhook.payments.providers.mock.provider import MockArtifactGateway
    from payhook.payments.providers.razorpay.payment_link import RazorpayPaymentLinkGateway
    from payhook.payments.providers.razorpay.qr_code import RazorpayQrCodeGateway

    if settings.payment_provider == "razorpay_qr":
        return RazorpayQrCodeGateway.from_settings(settings)

    if settings.payment_provider == "razorpay_link":
        return RazorpayPaymentLinkGateway.from_settings(settings)

    if settings.payment_provider == "mock":
        return MockArtifactGateway(
            base_url=settings.webhook_base_url,
            ttl_seconds=settings.qr_code_ttl_seconds,
        )

    raise ValueError(f"Unknown payment provider: {settings.payment_provider}")


__all__ = [
    "ArtifactGateway",
    "get_artifact_gateway",
]
