"""
JWT token service for admin authentication.

Tokens are issued by the account service; FormHook only verifies them.
create_token exists for operational scripts and tests.
"""
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from formhook.config import settings


class JWTService:
    """Service for creating and verifying JWT tokens."""

    def create_token(self, user_id: str, email: str, expires_minutes: int = 60) -> str:
        """
        Create a JWT token for a user.

        Args:
            user_id: User's unique ID (becomes the "sub" claim)
            email: User's email
            expires_minutes: Token lifetime

        Returns:
            Encoded JWT token string
        """
        expires = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)

        payload = {
            "sub": user_id,
            "email": email,
            "exp": expires
        }

        return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    def verify_token(self, token: str) -> dict | None:
        """
        Verify and decode a JWT token.

        Args:
            token: JWT token string

        Returns:
            Decoded payload dict or None if invalid
        """
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM]
            )
            return payload
        except JWTError:
            return None
