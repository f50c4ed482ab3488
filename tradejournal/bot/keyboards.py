from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton, WebAppInfo


def open_journal_kb(webapp_url: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="📈 Open journal", web_app=WebAppInfo(url=webapp_url))],
    ])
