# accounts/core/security.py
"""
Security module for authentication.
Handles password hashing and JWT token issuance/verification.
"""
import datetime as dt

import jwt  # PyJWT
from passlib.context import CryptContext

from accounts.core.errors import InvalidOrExpiredToken, MissingToken

# Password hashing context
# bcrypt with a fixed work factor of 10; the salt is generated per hash
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=10,
)

JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using bcrypt.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (salt embedded, safe to store in database)
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a stored hash.

    Returns:
        True if password matches, False otherwise. A stored value that is not
        a recognisable hash also yields False.
    """
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False


class TokenIssuer:
    """
    Issues and verifies signed, time-limited access tokens.

    Token payload:
        - sub: user ID (string)
        - iat: issued at timestamp
        - exp: expiration timestamp
    """

    def __init__(self, secret: str, expires_minutes: int = 60):
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self.expires_minutes = expires_minutes

    def issue(self, user_id, now: dt.datetime | None = None) -> str:
        now = now or dt.datetime.now(dt.timezone.utc)
        payload = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + dt.timedelta(minutes=self.expires_minutes),
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALG)

    def verify(self, token: str | None) -> str:
        """
        Validate signature and expiry and return the embedded user ID.

        Raises:
            MissingToken: If no token was presented
            InvalidOrExpiredToken: If the signature is wrong, the token is
                malformed, or it has expired
        """
        if not token:
            raise MissingToken()
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALG],
                options={"require": ["exp", "sub"]},
            )
        except jwt.PyJWTError as exc:
            raise InvalidOrExpiredToken() from exc
        return payload["sub"]
