# csrf_guard/core/security/token_codec.py
"""
CSRF token codec.

A token has the form ``salt-digest``. The salt is random per issued token,
the digest is computed over the salt and the session secret. Validity can
be recomputed at any time from ``(salt, secret)``, so no token is ever
stored server-side and any number of tokens can be valid for one session.
"""

import hashlib
import hmac
import secrets

from csrf_guard.core.config import DIGEST_HMAC_SHA256, DIGEST_MD5, SUPPORTED_DIGESTS
from csrf_guard.core.exceptions import config_error, malformed_token_error

SALT_BYTES = 8
SEPARATOR = "-"


class TokenCodec:
    """Issues and verifies ``salt-digest`` tokens for a session secret"""

    def __init__(self, digest: str = DIGEST_HMAC_SHA256):
        if digest not in SUPPORTED_DIGESTS:
            raise config_error(f"Unsupported CSRF digest '{digest}'", "digest")
        self.digest = digest

    def issue(self, secret: str) -> str:
        """Mint a new token for ``secret`` with a fresh random salt"""
        return self.issue_with_salt(secret, secrets.token_hex(SALT_BYTES))

    def issue_with_salt(self, secret: str, salt: str) -> str:
        return f"{salt}{SEPARATOR}{self._digest(salt, secret)}"

    def verify(self, token: str, secret: str) -> bool:
        """
        Check ``token`` against ``secret``.

        The token is split on its first separator; everything after it is
        the presented digest.

        Raises:
            MalformedTokenError: If the token has no salt component
        """
        salt, separator, presented = token.partition(SEPARATOR)
        if not separator or not salt:
            raise malformed_token_error(len(token))

        expected = self._digest(salt, secret)
        return hmac.compare_digest(expected.encode("utf-8"), presented.encode("utf-8"))

    def _digest(self, salt: str, secret: str) -> str:
        message = f"{salt}{SEPARATOR}{secret}".encode("utf-8")
        if self.digest == DIGEST_MD5:
            # Wire-compatible with tokens minted by older deployments
            return hashlib.md5(message).hexdigest()
        return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()
