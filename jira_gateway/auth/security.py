"""Caller token verification.

Platform users call the gateway with a signed JWT in the Authorization
header. The numeric platform user id is carried in the ``sub`` claim
(``user_id`` is accepted for tokens minted by older clients).
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from ..config import get_settings
from ..core.exceptions import TokenVerificationError
from ..core.logging import LogEvent, log_event
from ..core.messages import INVALID_TOKEN, MISSING_TOKEN, MessageCatalog, get_message_catalog

BEARER_SCHEME = "bearer"


def create_access_token(
    user_id: int,
    secret_key: str,
    algorithm: str = "HS256",
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed caller token for a platform user."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=30))
    to_encode = {"sub": str(user_id), "exp": expire}
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


class JwtAuthentication:
    """Extracts the caller identity from a signed Authorization header."""

    def __init__(self, secret_key: str, algorithm: str, messages: MessageCatalog):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.messages = messages

    def get_user_id_from_authorization_header(self, authorization_header: Optional[str]) -> int:
        """Verify the token in the header and return the platform user id.

        Raises:
            TokenVerificationError: If the header is absent, the token is not
                valid or it does not identify a user
        """
        token = self._get_token(authorization_header)
        if not token:
            log_event(LogEvent.AUTH_TOKEN_MISSING, "Caller token missing", level="WARNING")
            raise TokenVerificationError(self.messages.get_message(MISSING_TOKEN))

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            log_event(LogEvent.AUTH_TOKEN_INVALID, "Caller token rejected", level="WARNING", error=str(e))
            raise TokenVerificationError(self.messages.get_message(INVALID_TOKEN)) from e

        subject = payload.get("sub", payload.get("user_id"))
        try:
            return int(subject)
        except (TypeError, ValueError) as e:
            log_event(LogEvent.AUTH_TOKEN_INVALID, "Caller token does not identify a user", level="WARNING")
            raise TokenVerificationError(self.messages.get_message(INVALID_TOKEN)) from e

    @staticmethod
    def _get_token(authorization_header: Optional[str]) -> Optional[str]:
        if not authorization_header:
            return None
        parts = authorization_header.split()
        if parts and parts[0].lower() == BEARER_SCHEME:
            parts = parts[1:]
        return parts[0] if len(parts) == 1 else None


def get_token_verifier() -> JwtAuthentication:
    """FastAPI dependency providing the caller token verifier."""
    settings = get_settings()
    return JwtAuthentication(
        secret_key=settings.secret_key,
        algorithm=settings.algorithm,
        messages=get_message_catalog(),
    )
