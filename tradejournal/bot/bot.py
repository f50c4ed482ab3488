from aiogram import Bot, Dispatcher
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.client.default import DefaultBotProperties
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tradejournal.core.config import Settings


def create_bot(
    settings: Settings, session_factory: async_sessionmaker[AsyncSession]
) -> tuple[Bot, Dispatcher]:
    from tradejournal.bot.handlers.start import router as start_router
    from tradejournal.bot.handlers.admin import router as admin_router
    from tradejournal.bot.handlers.errors import router as errors_router

    bot = Bot(
        token=settings.bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML)
    )
    # workflow data: handlers receive settings and session_factory as arguments
    dp = Dispatcher(
        storage=MemoryStorage(),
        settings=settings,
        session_factory=session_factory,
    )
    dp.include_router(admin_router)
    dp.include_router(start_router)
    dp.include_router(errors_router)
    return bot, dp
