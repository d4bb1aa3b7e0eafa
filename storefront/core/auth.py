"""
Модуль аутентификации администратора.

Back-office защищен одной учетной записью из настроек. Пароль
сравнивается через passlib, после входа выдается JWT токен.
"""

from datetime import datetime, timedelta
from functools import lru_cache
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from storefront.core.config import settings

# Хеширование паролей
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ALGORITHM = "HS256"

# HTTP Bearer схема
security = HTTPBearer(auto_error=False)


@lru_cache(maxsize=4)
def _hash_for(password: str) -> str:
    return pwd_context.hash(password)


class AuthService:
    """Сервис для работы с аутентификацией."""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Проверка пароля."""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Хеширование пароля."""
        return pwd_context.hash(password)

    def authenticate_admin(self, username: str, password: str) -> bool:
        """Проверка учетных данных администратора."""
        if username != settings.ADMIN_USERNAME:
            return False
        return self.verify_password(password, _hash_for(settings.ADMIN_PASSWORD))

    @staticmethod
    def create_access_token(
        data: dict, expires_delta: Optional[timedelta] = None
    ) -> str:
        """Создание JWT токена."""
        to_encode = data.copy()
        if expires_delta:
            expire = datetime.utcnow() + expires_delta
        else:
            expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)

    @staticmethod
    def verify_token(token: str) -> Optional[dict]:
        """Проверка JWT токена."""
        try:
            return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
        except jwt.PyJWTError:
            return None


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Проверка прав администратора; возвращает имя пользователя из токена."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    payload = AuthService.verify_token(credentials.credentials)
    if payload is None:
        raise credentials_exception

    username = payload.get("sub")
    if username is None:
        raise credentials_exception

    if username != settings.ADMIN_USERNAME or payload.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions"
        )
    return username


# Экспорт сервиса
auth_service = AuthService()
