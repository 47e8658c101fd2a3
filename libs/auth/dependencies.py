from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import ValidationError

from libs.common.config import get_settings
from libs.auth.models import AuthUser

settings = get_settings()
security = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> AuthUser:
    """Decode a Supabase HS256 access token into an AuthUser."""
    payload = jwt.decode(
        token,
        settings.SUPABASE_JWT_SECRET,
        algorithms=["HS256"],
        options={"verify_aud": False},
    )
    return AuthUser(**payload)


async def get_current_user(
    token: Annotated[HTTPAuthorizationCredentials | None, Depends(security)]
) -> AuthUser:
    """
    Validate Supabase JWT and return the authenticated user.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if token is None or not token.credentials:
        raise credentials_exception

    try:
        return decode_access_token(token.credentials)
    except (JWTError, ValidationError):
        raise credentials_exception


async def get_optional_user(
    token: Annotated[HTTPAuthorizationCredentials | None, Depends(security)]
) -> AuthUser | None:
    """Return the caller when a valid token is present, otherwise None."""
    if token is None or not token.credentials:
        return None
    try:
        return decode_access_token(token.credentials)
    except (JWTError, ValidationError):
        return None
