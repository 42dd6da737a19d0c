"""Razorpay artifact gateways."""

from payhook.payments.providers.razorpay.client import RazorpayClient
from payhook.payments.providers.razorpay.payment_link import RazorpayPaymentLinkGateway
from payhook.payments.providers.razorpay.qr_code import RazorpayQrCodeGateway

__all__ = [
    "RazorpayClient",
    "RazorpayPaymentLinkGateway",
    "RazorpayQrCodeGateway",
]
