import uuid
from functools import lru_cache

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.orm import Session

from photoshelf.models.db import get_db
from photoshelf.models.user import User
from photoshelf.repositories.user_repository import UserRepository


class AuthSettings(BaseSettings):
    """Settings for verifying access tokens, loaded from environment variables."""

    jwt_secret_key: str
    jwt_algorithm: str = "HS256"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    return AuthSettings()  # type: ignore[call-arg]


security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the caller from a bearer access token whose ``sub`` claim is the user id.

    Tokens are issued elsewhere; this only verifies them.
    """
    if not credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")

    settings = get_auth_settings()
    try:
        payload = jwt.decode(credentials.credentials, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired") from None
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token") from None

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(status_code=401, detail="Invalid token")

    try:
        user_id = uuid.UUID(str(subject))
    except ValueError:
        raise HTTPException(status_code=401, detail="User not found") from None

    user = UserRepository(db).get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user
