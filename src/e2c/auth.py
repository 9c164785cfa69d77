"""JWT authentication and authorization."""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from e2c.config import get_settings
from e2c.db.base import get_db
from e2c.db.models import User as UserModel
from e2c.db.models import UserRole


def create_access_token(user_id: UUID) -> str:
    """Sign a session token for ``user_id``."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expires_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> UUID:
    """Return the user ID carried by ``token``; raises 401 when invalid."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
        user_id = payload.get("sub")
        if not user_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token: missing user ID",
            )
        return UUID(user_id)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
        )
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format",
        )


def extract_token(request: Request) -> Optional[str]:
    """Session token from the auth cookie or a Bearer header."""
    settings = get_settings()
    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        return token
    auth = request.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth.split(" ", 1)[1]
    return None


def set_auth_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        settings.auth_cookie_name,
        token,
        max_age=settings.jwt_expires_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.environment not in ("development", "test"),
        samesite="strict",
    )


def clear_auth_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        settings.auth_cookie_name,
        httponly=True,
        secure=settings.environment not in ("development", "test"),
        samesite="strict",
    )


async def get_current_user(request: Request) -> UUID:
    """Extract and validate user ID from the session token."""
    # Prefer user ID from middleware if available
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        try:
            return UUID(str(user_id))
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid user ID format",
            )

    token = extract_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: No token provided",
        )
    return decode_access_token(token)


async def require_user(
    user_id: UUID = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserModel:
    """Load the authenticated user; a token for a deleted account is rejected."""
    user = await db.get(UserModel, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: User not found",
        )
    return user


async def require_admin(user: UserModel = Depends(require_user)) -> UserModel:
    """Allow only administrators through."""
    if user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not allowed to manage problems",
        )
    return user
