from aiogram import Router
from aiogram.types import ErrorEvent
from tradejournal.core.logger import logger

router = Router()


@router.error()
async def error_handler(event: ErrorEvent):
    logger.error("Error: %s", event.exception, exc_info=event.exception)

    # answer the callback so the client stops its loading spinner
    cb = getattr(event.update, "callback_query", None)
    if cb is not None:
        await cb.answer("Something went wrong. Please try again.", show_alert=True)
