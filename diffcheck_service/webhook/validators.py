"""Webhook signature validation."""

import hashlib
import hmac

SIGNATURE_PREFIX = "sha1="


class WebhookSignatureError(Exception):
    """Raised when webhook signature verification fails."""

    pass


class MissingSignatureError(WebhookSignatureError):
    """Raised when the signature header is absent or lacks the ``sha1=`` prefix."""

    pass


def sign_payload(payload: bytes, secret: bytes) -> str:
    """Sign a payload the same way GitHub does for ``X-Hub-Signature``.

    Returns the lowercase hex digest without the prefix, so
    ``SIGNATURE_PREFIX + sign_payload(...)`` is a valid header value.
    """
    return hmac.new(secret, payload, hashlib.sha1).hexdigest()


def verify_webhook_signature(payload: bytes, signature: str, secret: bytes) -> None:
    """Verify the HMAC-SHA1 signature of a webhook payload.

    The digest comparison is constant time. An empty secret is not treated
    specially here; callers must refuse to run without one.

    Args:
        payload: The raw request body bytes.
        signature: The X-Hub-Signature header value.
        secret: The webhook secret configured on GitHub.

    Raises:
        MissingSignatureError: If the header is empty or has no ``sha1=`` prefix.
        WebhookSignatureError: If the digest does not match.
    """
    if not signature:
        raise MissingSignatureError("Missing signature header")

    if not signature.startswith(SIGNATURE_PREFIX):
        raise MissingSignatureError(
            f"Invalid signature format: must start with '{SIGNATURE_PREFIX}'"
        )

    supplied = signature.removeprefix(SIGNATURE_PREFIX)
    expected = sign_payload(payload, secret)

    # compare bytes: compare_digest rejects non-ASCII str input with TypeError
    if not hmac.compare_digest(expected.encode(), supplied.encode()):
        raise WebhookSignatureError("Signature verification failed")


def is_valid_signature(payload: bytes, signature: str, secret: bytes) -> bool:
    """Boolean form of :func:`verify_webhook_signature`."""
    try:
        verify_webhook_signature(payload, signature, secret)
    except WebhookSignatureError:
        return False
    return True
