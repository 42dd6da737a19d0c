"""QR code / payment link sessions reconciled by processor webhooks."""

__version__ = "1.0.0"
