"""Tests for webhook signature verification."""

import hashlib
import hmac

from hypothesis import given, strategies as st

from ig_relay.services.signature import (
    compute_signature,
    is_signature_enforceable,
    verify_signature,
)

secrets = st.text(min_size=1, max_size=64)
bodies = st.binary(max_size=2048)


class TestComputeSignature:
    """Test compute_signature()."""

    def test_matches_hmac_sha256_hexdigest(self):
        body = b'{"object":"instagram"}'
        expected = hmac.new(b"s3cret", body, hashlib.sha256).hexdigest()

        assert compute_signature(body, "s3cret") == f"sha256={expected}"


class TestVerifySignatureProperties:
    """Property-based tests for verify_signature()."""

    @given(secret=secrets, body=bodies)
    def test_valid_signature_passes(self, secret: str, body: bytes):
        """Property: the platform's own signature always verifies."""
        digest = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()

        assert verify_signature(body, f"sha256={digest}", secret) is True

    @given(secret=secrets, body=bodies, tampered=st.text(min_size=1, max_size=80))
    def test_tampered_signature_fails(self, secret: str, body: bytes, tampered: str):
        """Property: any other header value is rejected when a secret is set."""
        genuine = compute_signature(body, secret)
        if tampered == genuine:
            tampered = tampered + "0"

        assert verify_signature(body, tampered, secret) is False

    @given(body=bodies, header=st.one_of(st.none(), st.text(max_size=80)))
    def test_no_secret_always_passes(self, body: bytes, header):
        """Property: without a configured secret verification is skipped."""
        assert verify_signature(body, header, None) is True
        assert verify_signature(body, header, "") is True


class TestVerifySignatureEdgeCases:
    """Edge cases for verify_signature()."""

    def test_missing_header_passes(self):
        assert verify_signature(b"{}", None, "s3cret") is True

    def test_signature_for_different_body_fails(self):
        signature = compute_signature(b'{"a":1}', "s3cret")

        assert verify_signature(b'{"a":2}', signature, "s3cret") is False

    def test_signature_with_wrong_secret_fails(self):
        signature = compute_signature(b"{}", "other")

        assert verify_signature(b"{}", signature, "s3cret") is False

    def test_bare_hex_without_prefix_fails(self):
        digest = compute_signature(b"{}", "s3cret").removeprefix("sha256=")

        assert verify_signature(b"{}", digest, "s3cret") is False

    def test_unencodable_header_fails_instead_of_raising(self):
        """Lone surrogates cannot be UTF-8 encoded; treated as a mismatch."""
        assert verify_signature(b"{}", "sha256=\udc80", "s3cret") is False


class TestIsSignatureEnforceable:
    """Test is_signature_enforceable()."""

    def test_requires_secret_and_header(self):
        assert is_signature_enforceable("sha256=ab", "s3cret") is True
        assert is_signature_enforceable(None, "s3cret") is False
        assert is_signature_enforceable("sha256=ab", None) is False
        assert is_signature_enforceable("", "") is False
