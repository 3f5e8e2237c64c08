"""Bearer-token identity provider backed by PyJWT.

Tokens are issued by an external identity service and shared-secret signed.
``sub`` carries the user id; ``email``, ``phone_number`` and ``name`` are
optional claims used to seed a first-time user record.
"""

import logging
from datetime import datetime, timedelta, timezone

import jwt

from draftgen.core.exceptions import AuthenticationError
from draftgen.interfaces.identity import BaseIdentityProvider, Identity

logger = logging.getLogger(__name__)


class JWTIdentityProvider(BaseIdentityProvider):
    """Verifies caller tokens signed with a shared secret."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    def verify(self, token: str) -> Identity:
        """Verify a bearer token and return the caller.

        Args:
            token: The raw JWT, without the ``Bearer`` prefix.

        Returns:
            The verified identity.

        Raises:
            AuthenticationError: If the token is missing, invalid or expired.
        """
        if not token:
            raise AuthenticationError("Authentication required")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.debug("Identity token expired")
            raise AuthenticationError("Authentication token expired") from e
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid identity token: {e}")
            raise AuthenticationError("Invalid authentication token") from e

        uid = str(claims["sub"]).strip()
        if not uid:
            raise AuthenticationError("Invalid authentication token")

        return Identity(
            uid=uid,
            email=claims.get("email") or "",
            phone_number=claims.get("phone_number") or "",
            name=claims.get("name") or "",
        )

    def create_token(self, identity: Identity, ttl_minutes: int = 60) -> str:
        """Issue a token for ``identity``. Used by scripts and tests."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": identity.uid,
            "email": identity.email,
            "phone_number": identity.phone_number,
            "name": identity.name,
            "iat": now,
            "exp": now + timedelta(minutes=ttl_minutes),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)
