"""HMAC-SHA256 webhook signature utilities."""

import hashlib
import hmac

SIGNATURE_HEADER = "X-Razorpay-Signature"


def compute_signature(raw_body: bytes, secret: str) -> str:
    """Sign a webhook body.

    The digest covers the exact bytes on the wire; a parsed and
    re-serialized body can differ in key order or whitespace.

    Args:
        raw_body: Request body as received
        secret: Shared webhook secret

    Returns:
        Lowercase hex HMAC-SHA256 digest
    """
    return hmac.new(secret.encode(), raw_body, hashlib.sha256).hexdigest()


def verify_signature(raw_body: bytes, signature: str | None, secret: str) -> bool:
    """Verify webhook signature.

    Args:
        raw_body: Request body as received
        signature: Value of the signature header
        secret: Shared webhook secret

    Returns:
        True if signature is valid
    """
    if not signature:
        return False

    expected = compute_signature(raw_body, secret)
    return hmac.compare_digest(expected.encode(), signature.strip().lower().encode())
