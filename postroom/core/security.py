import re
import secrets
from datetime import datetime
from typing import Any, Dict

import bcrypt
from jose import jwt, JWTError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# At least 8 characters with a letter, a digit and a symbol
PASSWORD_PATTERN = re.compile(r'^(?=.*[a-zA-Z])(?=.*[0-9])(?=.*[!@#$%^&*(),.?":{}|<>]).{8,}$')


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


# bcrypt only looks at the first 72 bytes and newer releases refuse longer input
MAX_PASSWORD_BYTES = 72


def fits_password_hash(password: str) -> bool:
    return len((password or "").encode("utf-8")) <= MAX_PASSWORD_BYTES


def meets_password_policy(password: str) -> bool:
    return fits_password_hash(password) and bool(PASSWORD_PATTERN.match(password or ""))


def get_password_hash(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Check a password against a bcrypt hash. Accounts without a hash never match."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash or a password bcrypt refuses (over 72 bytes)
        return False


def generate_opaque_token() -> str:
    """Two 128-bit values from the OS CSPRNG, hex-encoded (64 characters)."""
    return secrets.token_hex(16) + secrets.token_hex(16)


def encode_jwt_token(
    claims: Dict[str, Any], secret: str, algorithm: str, issued_at: datetime, expires_at: datetime
) -> str:
    payload = dict(claims)
    payload["iat"] = issued_at
    payload["exp"] = expires_at
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_jwt_token(token: str, secret: str, algorithm: str) -> Dict[str, Any]:
    """
    Verify the signature of a JWT and return its claims.

    Expiry is not checked here; callers compare ``exp`` against their own clock.
    Raises ``JWTError`` on a bad signature or malformed token.
    """
    return jwt.decode(token, secret, algorithms=[algorithm], options={"verify_exp": False})


__all__ = [
    "JWTError",
    "is_valid_email",
    "MAX_PASSWORD_BYTES",
    "fits_password_hash",
    "meets_password_policy",
    "get_password_hash",
    "verify_password",
    "generate_opaque_token",
    "encode_jwt_token",
    "decode_jwt_token",
]
