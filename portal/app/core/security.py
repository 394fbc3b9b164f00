"""Bearer credential handling for calls to the recruitment API"""

from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from jose import JWTError, jwt

from portal.app.core.exceptions import AuthenticationException
from portal.app.core.logging import get_logger
from portal.app.schemas.auth import Identity

logger = get_logger(__name__)


class CredentialStore:
    """
    Holds the bearer token and identity of the signed-in user.

    The token is issued by the remote service, so its signature is not
    verified here; only the ``exp`` claim is read to fail fast on an
    expired session. Tokens that are not JWTs are treated as opaque and
    left for the server to judge.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        identity: Optional[Identity] = None,
        on_reset: Optional[Callable[[], None]] = None
    ):
        self._token = token
        self._identity = identity
        self._on_reset = on_reset

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token) and not self.is_expired()

    def sign_in(self, token: str, identity: Identity) -> None:
        """Store a fresh session"""
        self._token = token
        self._identity = identity
        logger.info(f"Signed in: {identity.email}")

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """
        Check the token's ``exp`` claim

        Args:
            now: Reference time, defaults to the current UTC time

        Returns:
            True if the token carries an expiry in the past
        """
        if not self._token:
            return False

        try:
            claims = jwt.get_unverified_claims(self._token)
        except JWTError:
            return False

        exp = claims.get("exp")
        if exp is None:
            return False

        now = now or datetime.now(timezone.utc)
        return datetime.fromtimestamp(exp, tz=timezone.utc) <= now

    def bearer_headers(self) -> Dict[str, str]:
        """
        Authorization header for a pipeline call

        Returns:
            Header mapping

        Raises:
            AuthenticationException: If there is no session or it has expired
        """
        if not self._token:
            raise AuthenticationException("Login required")

        if self.is_expired():
            logger.warning("Access token has expired")
            self.reset()
            raise AuthenticationException("Session expired")

        return {"Authorization": f"Bearer {self._token}"}

    def reset(self) -> None:
        """Forget the session and tell the host to send the user to sign-in"""
        had_session = self._token is not None
        self._token = None
        self._identity = None

        if had_session:
            logger.info("Local credentials cleared")

        if self._on_reset is not None:
            self._on_reset()
