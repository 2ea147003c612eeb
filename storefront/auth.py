# storefront/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.auth_utils import (
    Principal,
    hash_password,
    verify_password,
    create_access_token,
    get_current_principal,
)
from storefront.db.database import get_db
from storefront.db.functions import get_user_by_username, get_user_by_id, create_user
from storefront.db.schemas import LoginRequest, RegisterRequest, Token, User as UserSchema

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
async def register(credentials: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Регистрация, новый пользователь получает роль user."""
    return await create_user(db, credentials.username, hash_password(credentials.password))


@router.post("/login", response_model=Token)
async def login(credentials: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await get_user_by_username(db, credentials.username)
    if not user or not user.is_active or not verify_password(credentials.password, user.hashed_password):
        logger.info("Failed login for %s", credentials.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = create_access_token({"sub": user.username, "id": user.id, "role": user.role.value})
    return Token(access_token=token)


@router.get("/me", response_model=UserSchema)
async def read_me(principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    user = await get_user_by_id(db, principal.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
