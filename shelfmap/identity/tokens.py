"""Bearer access token verification.

Tokens are issued by the identity provider (HS256, shared secret); the
only claim the API needs is ``sub``, the user id.
"""

from datetime import timedelta
from uuid import UUID

from jose import JWTError, jwt

from shelfmap.config.settings import Settings
from shelfmap.models.common import utc_now


class InvalidTokenError(Exception):
    """Token is malformed, expired, wrongly signed, or lacks a user id."""


def decode_user_id(token: str, settings: Settings) -> UUID:
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE or None,
            options={"verify_aud": bool(settings.JWT_AUDIENCE)},
        )
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc

    try:
        return UUID(str(claims["sub"]))
    except (KeyError, ValueError) as exc:
        raise InvalidTokenError("Token has no valid 'sub' claim.") from exc


def issue_token(user_id: UUID, settings: Settings,
                expires_in: timedelta = timedelta(hours=1)) -> str:
    """Mint a token the way the identity provider does (dev tooling and tests)."""
    claims = {"sub": str(user_id), "exp": utc_now() + expires_in}
    if settings.JWT_AUDIENCE:
        claims["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
