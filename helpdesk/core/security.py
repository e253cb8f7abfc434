"""Access token verification for identity-service JWTs."""

from uuid import UUID

import jwt

from helpdesk.core.config import settings


def decode_access_token(token: str) -> dict:
    """
    Decode and verify an identity-service access token.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired or not
            issued for SUPABASE_JWT_AUDIENCE.
    """
    if not settings.SUPABASE_JWT_SECRET:
        raise jwt.InvalidTokenError("SUPABASE_JWT_SECRET not configured")
    return jwt.decode(
        token,
        settings.SUPABASE_JWT_SECRET,
        algorithms=["HS256"],
        audience=settings.SUPABASE_JWT_AUDIENCE,
    )


def user_id_from_claims(claims: dict) -> UUID:
    """Extract the user id (``sub``) from verified claims."""
    try:
        return UUID(str(claims["sub"]))
    except (KeyError, ValueError) as exc:
        raise jwt.InvalidTokenError("Token has no valid subject") from exc
