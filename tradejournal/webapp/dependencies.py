"""FastAPI dependencies: DB session, settings and the initData gate."""
from typing import AsyncIterator

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tradejournal.core.config import Settings
from tradejournal.core.logger import logger
from tradejournal.core.models import User
from tradejournal.core.services.users import get_or_create_user
from tradejournal.webapp.auth import AuthFailure, authenticate

INIT_DATA_HEADER = "X-Telegram-Init-Data"

_FAILURE_MESSAGES = {
    AuthFailure.CONFIGURATION: "bot token missing, all initData rejected",
    AuthFailure.MALFORMED_PAYLOAD: "initData malformed or without hash",
    AuthFailure.SIGNATURE_MISMATCH: "initData signature mismatch",
    AuthFailure.EXPIRED: "initData auth_date too old",
    AuthFailure.IDENTITY_MISSING: "user data not found in verified initData",
}


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.session_factory() as session:
        yield session


def _unauthorized() -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


async def resolve_principal(
    init_data: str | None,
    settings: Settings,
    session: AsyncSession,
) -> User:
    """Authenticate initData and map the claim to a local user or raise 401."""
    if not init_data:
        logger.warning("Auth rejected: initData header missing")
        raise _unauthorized()

    result = authenticate(
        init_data.strip(),
        settings.bot_token,
        max_age=settings.init_data_max_age,
    )
    if not result.ok:
        message = _FAILURE_MESSAGES[result.failure]
        if result.failure is AuthFailure.CONFIGURATION:
            logger.error("Auth rejected: %s", message)
        else:
            logger.warning("Auth rejected: %s", message)
        raise _unauthorized()

    return await get_or_create_user(session, result.user, settings.default_role)


async def get_current_user(
    x_telegram_init_data: str | None = Header(None),
    settings: Settings = Depends(get_settings),
    session: AsyncSession = Depends(get_session),
) -> User:
    return await resolve_principal(x_telegram_init_data, settings, session)
