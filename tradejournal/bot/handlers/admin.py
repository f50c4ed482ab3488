from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tradejournal.core.config import Settings
from tradejournal.core.logger import logger
from tradejournal.core.models import UserRole
from tradejournal.core.services.users import set_role

router = Router()

ROLE_COMMANDS = {
    "partner": UserRole.PARTNER,
    "trader": UserRole.TRADER,
}


def admin_filter(message: Message, settings: Settings) -> bool:
    return bool(settings.admin_id) and message.from_user.id == settings.admin_id


@router.message(Command(*ROLE_COMMANDS), admin_filter)
async def admin_set_role(
    message: Message,
    command: CommandObject,
    session_factory: async_sessionmaker[AsyncSession],
):
    role = ROLE_COMMANDS[command.command]
    if not command.args or not command.args.strip().isdigit():
        await message.answer(f"Usage: /{command.command} TELEGRAM_ID")
        return
    telegram_id = int(command.args.strip())
    async with session_factory() as session:
        user = await set_role(session, telegram_id, role)
    if not user:
        await message.answer("❌ User not found (they must open the journal at least once)")
        return
    logger.info("Role of %s set to %s by admin %s", telegram_id, role.value, message.from_user.id)
    await message.answer(f"✅ {user.name}: role set to {role.value}")
