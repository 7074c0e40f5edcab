"""Secret hashing and bearer token decoding.

Withdrawal PINs and OTP codes are stored as salted PBKDF2-SHA256 hashes in
the form ``pbkdf2_sha256$<iterations>$<salt>$<hash>`` (base64 parts).
Verification goes through the KDF's own constant-time ``verify``.
"""

import base64
import os
import secrets
import uuid
from typing import Any

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from jose import JWTError, jwt

from banqa.core.config import get_settings
from banqa.core.exceptions import AuthenticationError

HASH_SCHEME = "pbkdf2_sha256"
SALT_BYTES = 16
KEY_LENGTH = 32


def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )


def hash_secret(secret: str, iterations: int | None = None) -> str:
    """Hash a PIN or OTP with a fresh random salt."""
    if iterations is None:
        iterations = get_settings().PIN_HASH_ITERATIONS
    salt = os.urandom(SALT_BYTES)
    derived = _kdf(salt, iterations).derive(secret.encode("utf-8"))
    return "$".join([
        HASH_SCHEME,
        str(iterations),
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(derived).decode("ascii"),
    ])


def verify_secret(secret: str, encoded: str) -> bool:
    """Check ``secret`` against a value produced by :func:`hash_secret`.

    Malformed stored values never match.
    """
    try:
        scheme, iterations, salt_b64, hash_b64 = encoded.split("$")
        if scheme != HASH_SCHEME:
            return False
        salt = base64.b64decode(salt_b64)
        expected = base64.b64decode(hash_b64)
        _kdf(salt, int(iterations)).verify(secret.encode("utf-8"), expected)
    except (ValueError, InvalidKey):
        return False
    return True


def generate_otp(digits: int = 6) -> str:
    """Random numeric one-time code, zero-padded to ``digits``."""
    return str(secrets.randbelow(10 ** digits)).zfill(digits)


def decode_token_claims(token: str) -> dict[str, Any]:
    """Verify a bearer JWT and return its claims.

    Raises:
        AuthenticationError: If the token is malformed or expired.
    """
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_aud": False},
        )
    except JWTError:
        raise AuthenticationError("Invalid user token")


def subject_of(claims: dict[str, Any]) -> uuid.UUID:
    try:
        return uuid.UUID(str(claims.get("sub")))
    except ValueError:
        raise AuthenticationError("Invalid user token")


def decode_access_token(token: str) -> uuid.UUID:
    """Return the user id carried in the ``sub`` claim of a bearer JWT.

    Raises:
        AuthenticationError: If the token is malformed, expired or has
            no usable subject.
    """
    return subject_of(decode_token_claims(token))
