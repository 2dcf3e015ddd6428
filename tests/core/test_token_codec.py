# tests/core/test_token_codec.py
"""
Unit tests for the CSRF token codec.
"""
import hashlib
import hmac

import pytest

from csrf_guard.core.exceptions import CSRFConfigurationError, MalformedTokenError
from csrf_guard.core.security.token_codec import TokenCodec

SECRET = "0123456789abcdef0123456789abcdef"
OTHER_SECRET = "fedcba9876543210fedcba9876543210"


@pytest.fixture(params=["hmac-sha256", "md5"])
def codec(request):
    return TokenCodec(request.param)


class TestIssue:
    """Token issuance"""

    def test_token_shape(self, codec):
        token = codec.issue(SECRET)
        salt, digest = token.split("-", 1)

        assert len(salt) == 16  # 8 bytes hex
        int(salt, 16)
        assert digest
        assert "-" not in digest

    def test_fresh_salt_per_token(self, codec):
        tokens = {codec.issue(SECRET) for _ in range(20)}
        assert len(tokens) == 20

    def test_issue_with_salt_is_deterministic(self, codec):
        assert codec.issue_with_salt(SECRET, "a1b2c3d4") == codec.issue_with_salt(SECRET, "a1b2c3d4")

    def test_hmac_digest(self):
        codec = TokenCodec("hmac-sha256")
        expected = hmac.new(SECRET.encode(), f"a1b2c3d4-{SECRET}".encode(), hashlib.sha256).hexdigest()

        assert codec.issue_with_salt(SECRET, "a1b2c3d4") == f"a1b2c3d4-{expected}"

    def test_legacy_md5_digest(self):
        """Legacy mode stays compatible with MD5(salt-secret) tokens"""
        codec = TokenCodec("md5")
        expected = hashlib.md5(f"a1b2c3d4-{SECRET}".encode()).hexdigest()

        assert codec.issue_with_salt(SECRET, "a1b2c3d4") == f"a1b2c3d4-{expected}"

    def test_unknown_digest_rejected(self):
        with pytest.raises(CSRFConfigurationError):
            TokenCodec("sha1")


class TestVerify:
    """Token verification"""

    @pytest.mark.parametrize("salt", ["a1b2c3d4", "0000000000000000", "[12, 200, 7]"])
    def test_round_trip(self, codec, salt):
        token = codec.issue_with_salt(SECRET, salt)
        assert codec.verify(token, SECRET) is True

    def test_round_trip_random_salt(self, codec):
        assert codec.verify(codec.issue(SECRET), SECRET) is True

    def test_tampered_digest_fails(self, codec):
        token = codec.issue(SECRET)
        salt, digest = token.split("-", 1)

        for i in range(len(digest)):
            flipped = "0" if digest[i] != "0" else "1"
            tampered = f"{salt}-{digest[:i]}{flipped}{digest[i + 1:]}"
            assert codec.verify(tampered, SECRET) is False

    def test_tampered_salt_fails(self, codec):
        token = codec.issue_with_salt(SECRET, "a1b2c3d4")
        assert codec.verify("a1b2c3d5" + token[8:], SECRET) is False

    def test_secret_isolation(self, codec):
        token = codec.issue(SECRET)
        assert codec.verify(token, OTHER_SECRET) is False

    def test_extra_dashes_belong_to_digest(self, codec):
        token = codec.issue(SECRET)
        assert codec.verify(token + "-extra", SECRET) is False

    def test_digest_mismatch_between_algorithms(self):
        token = TokenCodec("md5").issue(SECRET)
        assert TokenCodec("hmac-sha256").verify(token, SECRET) is False

    @pytest.mark.parametrize("token", ["invalidToken", "", "-abcdef"])
    def test_malformed_token_raises(self, codec, token):
        with pytest.raises(MalformedTokenError) as exc_info:
            codec.verify(token, SECRET)

        assert exc_info.value.status_code == 403
        assert exc_info.value.reason == "The provided CSRF token is in the wrong format."

    def test_empty_digest_is_invalid_not_malformed(self, codec):
        assert codec.verify("a1b2c3d4-", SECRET) is False

    def test_many_tokens_valid_for_one_secret(self, codec):
        tokens = [codec.issue(SECRET) for _ in range(5)]
        assert all(codec.verify(token, SECRET) for token in tokens)
