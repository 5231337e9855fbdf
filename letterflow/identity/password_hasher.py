import hashlib
import hmac
import secrets

_ALGORITHM = "pbkdf2_sha256"
_SALT_BYTES = 16


class PasswordHasher:
    """PBKDF2-HMAC-SHA256 password hashes.

    Encoded as ``pbkdf2_sha256$<iterations>$<salt_hex>$<hash_hex>``.
    """

    def __init__(self, iterations: int = 260_000) -> None:
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self._iterations = iterations

    def hash(self, secret: str) -> str:
        salt = secrets.token_bytes(_SALT_BYTES)
        digest = self._derive(secret, salt, self._iterations)
        return f"{_ALGORITHM}${self._iterations}${salt.hex()}${digest.hex()}"

    def verify(self, secret: str, encoded: str) -> bool:
        """Constant-time check of ``secret`` against ``encoded``.

        Malformed hashes never verify.
        """
        try:
            algorithm, iterations_text, salt_hex, digest_hex = encoded.split("$")
            iterations = int(iterations_text)
            salt = bytes.fromhex(salt_hex)
            expected = bytes.fromhex(digest_hex)
        except ValueError:
            return False
        if algorithm != _ALGORITHM or iterations < 1:
            return False
        actual = self._derive(secret, salt, iterations)
        return hmac.compare_digest(actual, expected)

    @staticmethod
    def _derive(secret: str, salt: bytes, iterations: int) -> bytes:
        return hashlib.pbkdf2_hmac("sha256", secret.encode("utf-8"), salt, iterations)
