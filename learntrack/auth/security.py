"""Access token verification.

learntrack never signs in users; the identity service issues HS256 access
tokens carrying the learner id (`sub`) and role.
"""

from typing import Any

from jose import JWTError, jwt

from learntrack.config.settings import get_settings


ACCESS_TOKEN_TYPE = "access"


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry, then require an access token with a subject.

    Raises:
        JWTError: If the token is invalid, expired, of another type or has no subject
    """
    settings = get_settings()
    payload = jwt.decode(
        token,
        settings.auth_secret_key,
        algorithms=[settings.auth_algorithm],
    )

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        msg = f"Invalid token type: expected '{ACCESS_TOKEN_TYPE}'"
        raise JWTError(msg)
    if not payload.get("sub"):
        msg = "Token has no subject"
        raise JWTError(msg)
    return payload
