"""Local users keyed by Telegram id."""
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tradejournal.core.logger import logger
from tradejournal.core.models import User, UserRole
from tradejournal.webapp.auth import TelegramUser


async def get_user_by_telegram_id(session: AsyncSession, telegram_id: int) -> User | None:
    return await session.scalar(select(User).where(User.telegram_id == telegram_id))


async def get_or_create_user(
    session: AsyncSession,
    tg_user: TelegramUser,
    default_role: UserRole = UserRole.TRADER,
) -> User:
    """Find the principal for a verified identity, creating it on first sight.

    The unique constraint on ``telegram_id`` decides concurrent first-time
    inserts; the loser re-reads the winner's row.
    """
    user = await get_user_by_telegram_id(session, tg_user.id)
    if user:
        return user

    user = User(
        telegram_id=tg_user.id,
        name=tg_user.full_name,
        username=tg_user.username,
        role=default_role,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        user = await get_user_by_telegram_id(session, tg_user.id)
        if user is None:
            raise
        return user
    logger.info("New user: %s %s", tg_user.id, user.name)
    return user


async def set_role(session: AsyncSession, telegram_id: int, role: UserRole) -> User | None:
    user = await get_user_by_telegram_id(session, telegram_id)
    if not user:
        return None
    user.role = role
    await session.commit()
    return user
