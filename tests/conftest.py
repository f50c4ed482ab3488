import hashlib
import hmac
import json
from pathlib import Path
from urllib.parse import urlencode

import pytest

from tradejournal.core.config import Settings

BOT_TOKEN = "123456:TEST-TOKEN"


def build_init_data(bot_token: str, fields: dict[str, str]) -> str:
    """Sign ``fields`` the way Telegram does and return the query string."""
    data_check_string = "\n".join(f"{key}={fields[key]}" for key in sorted(fields))
    secret_key = hmac.new(b"WebAppData", bot_token.encode("utf-8"), hashlib.sha256).digest()
    signature = hmac.new(secret_key, data_check_string.encode("utf-8"), hashlib.sha256).hexdigest()
    return urlencode({**fields, "hash": signature})


def user_fields(user_id: int = 42, **user) -> dict[str, str]:
    user = {"id": user_id, "first_name": "Bo", **user}
    return {
        "auth_date": "1700000000",
        "query_id": "AAE2b7c1234567890",
        "user": json.dumps(user, separators=(",", ":")),
    }


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        bot_token=BOT_TOKEN,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'journal.db'}",
        debug=False,
        _env_file=None,
    )
