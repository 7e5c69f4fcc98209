"""Session / identity service — password verification and bearer tokens.

Handles:
- bcrypt password hashing and verification
- JWT issuance on login, carrying userId / email / role
- Token validation, re-resolving the user from the store on every request

A token for a user that no longer exists is rejected, and the role used
for authorization is always the one on the live user record.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import jwt, JWTError

from app.config import Settings
from app.exceptions import AuthenticationError, ValidationError
from app.services.store import Store

logger = logging.getLogger(__name__)

# bcrypt only considers the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class AuthService:
    """
    Service for credentials and session tokens.

    Usage:
        >>> service = AuthService(store, settings)
        >>> token, user = service.login("admin@respect.com", "admin123")
        >>> current = service.authenticate(token)
    """

    def __init__(self, store: Store, settings: Settings):
        self.store = store
        self.settings = settings

    def hash_password(self, password: str) -> str:
        """Hash a plaintext password using bcrypt."""
        salt = bcrypt.gensalt(rounds=self.settings.BCRYPT_ROUNDS)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        """Validate a plaintext password against a stored hash."""
        try:
            return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
        except ValueError:
            # Stored digest is not a bcrypt hash
            return False

    def issue_token(self, user: dict) -> str:
        """Sign a token for ``user`` valid for TOKEN_EXPIRY_DAYS."""
        now = datetime.now(timezone.utc)
        payload = {
            "userId": user["id"],
            "email": user["email"],
            "role": user["role"].value if hasattr(user["role"], "value") else user["role"],
            "iat": now,
            "exp": now + timedelta(days=self.settings.TOKEN_EXPIRY_DAYS),
        }
        return jwt.encode(payload, self.settings.JWT_SECRET, algorithm=self.settings.JWT_ALGORITHM)

    def login(self, email: Optional[str], password: Optional[str]) -> tuple[str, dict]:
        """Verify credentials and return ``(token, user)``.

        Raises:
            ValidationError: If email or password is missing
            AuthenticationError: If the user is unknown or the password is wrong
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        record = self.store.get_user_by_email(email)
        if not record or not self.verify_password(password, record["password_hash"]):
            logger.info("Failed login attempt for %s", email)
            raise AuthenticationError("Invalid credentials")

        user = {k: v for k, v in record.items() if k != "password_hash"}
        logger.info("User %s logged in", user["id"])
        return self.issue_token(user), user

    def authenticate(self, token: Optional[str]) -> dict:
        """Validate a bearer token and return the current user record.

        Raises:
            AuthenticationError: If the token is missing, malformed, expired,
                badly signed, or names a user that no longer exists
        """
        if not token:
            raise AuthenticationError("Token not provided")

        try:
            claims = jwt.decode(
                token,
                self.settings.JWT_SECRET,
                algorithms=[self.settings.JWT_ALGORITHM],
            )
        except JWTError as e:
            logger.info("Token validation failed: %s", e)
            raise AuthenticationError("Invalid token")

        user_id = claims.get("userId")
        if not user_id:
            raise AuthenticationError("Invalid token")

        user = self.store.get_user(user_id)
        if not user:
            raise AuthenticationError("User not found")
        return user
