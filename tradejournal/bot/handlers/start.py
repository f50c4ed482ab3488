from aiogram import Router
from aiogram.filters import CommandStart
from aiogram.types import Message
from tradejournal.bot.keyboards import open_journal_kb
from tradejournal.core.config import Settings

router = Router()


@router.message(CommandStart())
async def cmd_start(message: Message, settings: Settings):
    if not settings.webapp_url:
        await message.answer("📈 Trading journal\n\nThe Mini App is not configured yet.")
        return
    await message.answer(
        "📈 <b>Trading journal</b>\n\nLog your daily P/L and check the reports.",
        reply_markup=open_journal_kb(settings.webapp_url),
    )
