from uuid import UUID

import bcrypt
from jose import JWTError, jwt
from iam.config import settings
from iam.core.exceptions import UnauthorizedException


def decode_jwt(token: str) -> dict:
    """
    Decode and validate JWT token using shared SECRET_KEY.

    Args:
        token: JWT access token from Authorization header

    Returns:
        Decoded token payload with 'sub' (user_id), 'exp', etc.

    Raises:
        UnauthorizedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])

        # Validate expiration (jose checks this automatically)
        exp = payload.get("exp")
        if exp is None:
            raise UnauthorizedException("Token missing expiration")

        # Extract user_id from 'sub' claim
        user_id: str = payload.get("sub")
        if user_id is None:
            raise UnauthorizedException("Token missing user identifier")

        return payload

    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}")


def extract_user_id(token: str) -> UUID:
    """
    Extract the user UUID from the JWT 'sub' claim.

    The subject must be a UUID. Any other value is rejected instead of
    being mapped to an anonymous principal.
    """
    payload = decode_jwt(token)
    try:
        return UUID(str(payload["sub"]))
    except ValueError:
        raise UnauthorizedException("Token user identifier is not a valid UUID")


def hash_password(password: str) -> str:
    """Hash a password with bcrypt"""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def create_access_token(claims: dict) -> str:
    """Encode claims with the shared SECRET_KEY (used by tooling and tests)"""
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
