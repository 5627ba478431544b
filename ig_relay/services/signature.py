"""X-Hub-Signature-256 verification for inbound webhook deliveries."""

import hashlib
import hmac

from ig_relay.constants import SIGNATURE_PREFIX


def compute_signature(raw_body: bytes, secret: str) -> str:
    """Return the header value the platform sends for ``raw_body``."""
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(
    raw_body: bytes,
    signature_header: str | None,
    secret: str | None,
) -> bool:
    """Check a webhook signature against the raw request body.

    Verification is skipped (returns True) when no secret is configured or the
    request carries no signature header. Otherwise the header must equal
    ``sha256=<hex HMAC-SHA256(secret, raw_body)>``, compared in constant time.
    Any failure while comparing counts as a mismatch.
    """
    if not secret or not signature_header:
        return True

    try:
        expected = compute_signature(raw_body, secret)
        return hmac.compare_digest(
            signature_header.encode("utf-8"),
            expected.encode("utf-8"),
        )
    except Exception:
        return False


def is_signature_enforceable(signature_header: str | None, secret: str | None) -> bool:
    """True when both a secret and a signature header are present."""
    return bool(secret and signature_header)
