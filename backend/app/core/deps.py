"""Request dependencies: bearer token to vendor user, permission checks."""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from pydantic import ValidationError

from app.core.security import decode_access_token
from app.schemas.auth import CurrentUser, PermissionAction, TokenClaims

# Tokens are minted by the platform auth service; tokenUrl only feeds the docs
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """Resolve the bearer token to the calling vendor user. 401 if unusable."""
    try:
        claims = TokenClaims.model_validate(decode_access_token(token))
    except (JWTError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims.to_user()


def require_permission(*required: PermissionAction | str):
    """Dependency factory: the user must hold every listed product permission.

    Unknown permission names raise ValueError when the route is declared.
    """
    needed = [PermissionAction(p).value for p in required]

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        missing = [p for p in needed if p not in user.permissions]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permissions: {', '.join(missing)}",
            )
        return user

    return checker
