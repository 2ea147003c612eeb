# storefront/auth_utils.py
import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, PASSWORD_HASH_ITERATIONS
from storefront.db.database import get_db
from storefront.db.functions import get_user_by_id
from storefront.db.models import RoleEnum, INT32_MAX

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login")


@dataclass(frozen=True)
class Principal:
    """Пользователь, от имени которого выполняется запрос."""
    user_id: int
    username: str
    role: RoleEnum


def hash_password(password: str) -> str:
    """Хэширует пароль PBKDF2-SHA256 со случайной солью."""
    salt = secrets.token_hex(16)
    iterations = PASSWORD_HASH_ITERATIONS
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations).hex()
    return f"pbkdf2_sha256${iterations}${salt}${digest}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверяет пароль, сравнивая с хэшем."""
    # формат: pbkdf2_sha256$<iterations>$<salt>$<digest>
    parts = hashed_password.split("$")
    if len(parts) != 4 or parts[0] != "pbkdf2_sha256" or not parts[1].isdigit():
        return False
    _, iterations, salt, digest = parts
    candidate = hashlib.pbkdf2_hmac("sha256", plain_password.encode(), salt.encode(), int(iterations)).hex()
    return hmac.compare_digest(candidate, digest)


def create_access_token(data: dict, expires_delta: timedelta = None):
    """Создает JWT токен с указанным временем истечения."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str) -> Principal:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")

    user_id = payload.get("id")
    username = payload.get("sub")
    if not isinstance(user_id, int) or not 0 < user_id <= INT32_MAX or username is None:
        raise _unauthorized("Invalid token")
    try:
        role = RoleEnum(payload.get("role", RoleEnum.user.value))
    except ValueError:
        raise _unauthorized("Invalid token")
    return Principal(user_id=user_id, username=username, role=role)


async def get_current_principal(
    token: str = Depends(oauth2_scheme), db: AsyncSession = Depends(get_db)
) -> Principal:
    """Проверяет токен и что его пользователь всё ещё существует и активен."""
    claims = decode_access_token(token)
    user = await get_user_by_id(db, claims.user_id)
    if not user or not user.is_active:
        logger.info("Token for unknown or inactive user %s rejected", claims.user_id)
        raise _unauthorized("User not found or inactive")
    # роль берём из базы, а не из токена
    return Principal(user_id=user.id, username=user.username, role=user.role)


def require_role(principal: Principal, role: RoleEnum) -> None:
    """Проверка прав, вызывается в начале каждого изменяющего обработчика."""
    if principal.role != role:
        logger.warning("User %s (%s) denied: %s role required", principal.username, principal.role.value, role.value)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")
