"""Authentication endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from e2c.auth import clear_auth_cookie, create_access_token, require_user, set_auth_cookie
from e2c.db.base import get_db
from e2c.db.models import User as UserModel
from e2c.schemas.auth import LoginRequest, RegisterRequest, User
from e2c.services.users import UserService

router = APIRouter()


@router.post("/register", response_model=User, status_code=201)
async def register(
    payload: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Register a user and start a session."""
    service = UserService(db)
    user = await service.register(payload.name, payload.email, payload.password)
    set_auth_cookie(response, create_access_token(user.id))
    return user


@router.post("/login", response_model=User)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Check credentials and start a session."""
    service = UserService(db)
    user = await service.authenticate(payload.email, payload.password)
    set_auth_cookie(response, create_access_token(user.id))
    return user


@router.post("/logout")
async def logout(response: Response) -> dict:
    """End the session."""
    clear_auth_cookie(response)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=User)
async def me(user: UserModel = Depends(require_user)) -> User:
    """Get the authenticated user."""
    return user
