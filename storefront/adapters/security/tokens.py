"""
JWT token issuer - Implements TokenIssuer protocol via PyJWT.

Tokens are HS256-signed by default and carry the account id in `sub`,
plus `iat` and `exp` claims.
"""

import logging
from datetime import datetime, timedelta, timezone

import jwt

from storefront.domain.exceptions import InvalidToken

logger = logging.getLogger(__name__)


class JwtTokenIssuer:
    """Implements TokenIssuer protocol."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    def issue(self, subject: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {"sub": subject, "iat": now, "exp": now + ttl}
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """
        Return the subject of a valid token.

        Raises:
            InvalidToken: Bad signature, malformed token, missing subject or expired
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidToken("Token has expired") from None
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected bearer token: %s", e)
            raise InvalidToken() from None
        return payload["sub"]
