from typing import Annotated, Protocol

import jwt
from fastapi import Depends, Request
from loguru import logger
from pydantic import BaseModel

from app.app_config import get_app_environ_config
from app.domain.live.broadcast.broadcast_models import LivePlatform
from app.services.integrations.youtube.youtube_client import YouTubeLiveClient
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode


class User(BaseModel):
    user_id: str


def _bad_token() -> AppError:
    return AppError(
        errcode=AppErrorCode.E_BAD_TOKEN,
        errmesg="Invalid token",
        status_code=HttpStatusCode.UNAUTHORIZED,
    )


async def get_current_user(request: Request) -> User:
    # Do not log request headers here (Authorization carries the session token).
    auth_header = request.headers.get("authorization") or ""
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        logger.debug("missing bearer token")
        raise _bad_token()

    cfg = get_app_environ_config()
    try:
        if cfg.JWT_VERIFY:
            payload = jwt.decode(token.strip(), cfg.JWT_SECRET, algorithms=["HS256"])
        else:
            payload = jwt.decode(token.strip(), options={"verify_signature": False})
    except jwt.PyJWTError as e:
        logger.debug("invalid session token: {}", type(e).__name__)
        raise _bad_token() from e

    user_id = payload.get("username") or payload.get("sub")
    if not user_id:
        raise _bad_token()

    logger.debug("Authenticated user_id: {}", user_id)
    return User(user_id=str(user_id))


CurrentUser = Annotated[User, Depends(get_current_user)]


class CredentialProvider(Protocol):
    """Resolves the platform access token for a user. Refresh is the provider's concern."""

    async def get_access_token(self, user: User) -> str | None: ...


class ConfigCredentialProvider:
    """Single-account provider backed by YOUTUBE_ACCESS_TOKEN."""

    async def get_access_token(self, user: User) -> str | None:
        return get_app_environ_config().YOUTUBE_ACCESS_TOKEN


async def get_platform_credential(request: Request, user: CurrentUser) -> str:
    provider: CredentialProvider = getattr(
        request.app.state, "credential_provider", None
    ) or ConfigCredentialProvider()

    access_token = await provider.get_access_token(user)
    if not access_token:
        raise AppError(
            errcode=AppErrorCode.E_PLATFORM_NOT_CONNECTED,
            errmesg="YouTube not connected",
            status_code=HttpStatusCode.UNAUTHORIZED,
        )
    return access_token


async def get_platform(credential: str = Depends(get_platform_credential)) -> LivePlatform:
    return YouTubeLiveClient(credential)


Platform = Annotated[LivePlatform, Depends(get_platform)]
